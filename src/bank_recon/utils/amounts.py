"""Money parsing shared by statement rows, ledger exports and store records."""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

# Larger magnitudes are treated as garbage; they would overflow Decimal arithmetic
AMOUNT_LIMIT = Decimal("1E15")


def parse_amount(value: Any, strip_commas: bool = False) -> Optional[Decimal]:
    """
    Parse a money value.

    Args:
        value: Text, number or Decimal; a leading ``$`` is ignored
        strip_commas: Also drop thousands separators

    Returns:
        Decimal, or None when the value is empty, non-numeric, non-finite or
        outside ``AMOUNT_LIMIT``
    """
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).replace("$", "").strip()
        if strip_commas:
            text = text.replace(",", "")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None

    # copy_abs skips context rounding, which would itself overflow
    if not result.is_finite() or result.copy_abs() >= AMOUNT_LIMIT:
        return None
    return result
