"""Configuration loader and validation for reconciliation settings."""

from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError
from .utils.logging_config import resolve_level

logger = logging.getLogger(__name__)


class AssignmentMode(str, Enum):
    """How bank transactions are paired with ledger entries."""

    GREEDY = "greedy"
    OPTIMAL = "optimal"


class StatementInputConfig(BaseModel):
    """Configuration for bank statement parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","


class LedgerInputConfig(BaseModel):
    """Configuration for ledger export loading."""

    encoding: str = "utf-8"
    delimiter: str = ","
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "id",
            "date": "date",
            "description": "description",
            "debit_account": "debitAccount",
            "credit_account": "creditAccount",
            "amount": "amount",
        }
    )


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    statement: StatementInputConfig = Field(default_factory=StatementInputConfig)
    ledger: LedgerInputConfig = Field(default_factory=LedgerInputConfig)


class MatchingPolicy(BaseModel):
    """
    Tolerances and account rules shared by the matcher and the anomaly detector.

    ``amount_epsilon`` is the single tolerance constant: the matcher accepts a
    pair when the difference is strictly below it and the discrepancy check
    flags a pair when the difference is strictly above it.
    """

    date_window_hours: float = Field(default=24.0, ge=0, le=24 * 366, allow_inf_nan=False)
    amount_epsilon: Decimal = Field(default=Decimal("0.01"), gt=0, allow_inf_nan=False)
    cash_keywords: list[str] = Field(
        default_factory=lambda: ["cash", "bank", "company account"]
    )
    require_cash_account: bool = False
    restrict_missing_to_cash_accounts: bool = False
    assignment: AssignmentMode = AssignmentMode.GREEDY
    allow_shared_entries: bool = False

    @field_validator("amount_epsilon", mode="before")
    @classmethod
    def _coerce_epsilon(cls, value: Any) -> Any:
        # Floats from YAML go through str() so 0.01 stays exactly 0.01
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("cash_keywords")
    @classmethod
    def _normalize_keywords(cls, value: list[str]) -> list[str]:
        return [kw.strip().lower() for kw in value if kw and kw.strip()]

    def is_cash_account(self, account_name: Optional[str]) -> bool:
        """Case-insensitive substring check against the cash keywords."""
        if not account_name:
            return False
        name = account_name.lower()
        return any(kw in name for kw in self.cash_keywords)

    def entry_touches_cash(self, entry: Any) -> bool:
        """True if either side of a ledger entry is a cash or bank account."""
        return self.is_cash_account(entry.debit_account) or self.is_cash_account(
            entry.credit_account
        )


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    transactions: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Bank Transactions")
    )
    duplicates: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Duplicates"))
    missing_entries: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Missing Entries")
    )
    amount_discrepancies: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Amount Discrepancies")
    )


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        resolve_level(value)
        return value.strip().upper()


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingPolicy = Field(default_factory=MatchingPolicy)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "statement": {
                "encoding": "utf-8",
                "delimiter": ",",
            },
            "ledger": {
                "encoding": "utf-8",
                "delimiter": ",",
                "column_mappings": {
                    "id": "id",
                    "date": "date",
                    "description": "description",
                    "debit_account": "debitAccount",
                    "credit_account": "creditAccount",
                    "amount": "amount",
                },
            },
        },
        "matching": {
            "date_window_hours": 24.0,
            "amount_epsilon": 0.01,
            "cash_keywords": ["cash", "bank", "company account"],
            "require_cash_account": False,
            "restrict_missing_to_cash_accounts": False,
            "assignment": "greedy",
            "allow_shared_entries": False,
        },
        "output": {
            "excel": {
                "filename_template": "reconciliation_report_{date}_{time}.xlsx",
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "transactions": {"enabled": True, "name": "Bank Transactions"},
                "duplicates": {"enabled": True, "name": "Duplicates"},
                "missing_entries": {"enabled": True, "name": "Missing Entries"},
                "amount_discrepancies": {"enabled": True, "name": "Amount Discrepancies"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be read or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read configuration file: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping, got {type(user_config).__name__}"
            )

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    yaml_content = """# Bank statement reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(get_default_config(), default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
