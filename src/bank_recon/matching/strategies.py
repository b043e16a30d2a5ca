"""
Assignment strategies for pairing bank transactions with ledger entries.
Each strategy decides, for every bank transaction, which ledger entry it claims.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from ..models.transaction import BankTransaction, LedgerEntry
from ..config import AssignmentMode, MatchingPolicy
from .predicates import MatchPredicate


class AssignmentStrategy(ABC):
    """Abstract base class for assignment strategies."""

    name = "abstract"

    def __init__(self, policy: MatchingPolicy):
        self.policy = policy
        self.predicate = MatchPredicate(policy)

    @abstractmethod
    def assign(
        self,
        bank_txns: Sequence[BankTransaction],
        bank_dates: Sequence[Optional[datetime]],
        entries: Sequence[LedgerEntry],
        ledger_dates: Sequence[Optional[datetime]],
    ) -> list[Optional[int]]:
        """
        Choose a ledger entry for each bank transaction.

        Args:
            bank_txns: Bank transactions in statement order
            bank_dates: Parsed date per bank transaction
            entries: Ledger entries in store order
            ledger_dates: Parsed date per ledger entry

        Returns:
            One ledger index (or None) per bank transaction
        """
        pass


class GreedyFirstFitStrategy(AssignmentStrategy):
    """
    First-fit matching in input order.

    Each bank transaction takes the first acceptable ledger entry that is
    still available; a claimed entry leaves the pool, so an earlier bank
    transaction always wins a contested entry. With ``allow_shared_entries``
    the pool is never consumed and several transactions may point at the
    same entry.
    """

    name = "greedy"

    def assign(self, bank_txns, bank_dates, entries, ledger_dates):
        assignment: list[Optional[int]] = [None] * len(bank_txns)
        available = list(range(len(entries)))

        for b_idx, bank in enumerate(bank_txns):
            for pos, l_idx in enumerate(available):
                if self.predicate.accepts(
                    bank, bank_dates[b_idx], entries[l_idx], ledger_dates[l_idx]
                ):
                    assignment[b_idx] = l_idx
                    if not self.policy.allow_shared_entries:
                        del available[pos]
                    break

        return assignment


class OptimalAssignmentStrategy(AssignmentStrategy):
    """
    Minimum-cost bipartite assignment over acceptable pairs.

    Maximises the number of matched transactions first, then minimises the
    summed date+amount distance. Pairs the predicate rejects are never
    assigned.
    """

    name = "optimal"

    def assign(self, bank_txns, bank_dates, entries, ledger_dates):
        assignment: list[Optional[int]] = [None] * len(bank_txns)

        costs: dict[tuple[int, int], float] = {}
        for b_idx, bank in enumerate(bank_txns):
            for l_idx, entry in enumerate(entries):
                if self.predicate.accepts(bank, bank_dates[b_idx], entry, ledger_dates[l_idx]):
                    costs[(b_idx, l_idx)] = self.predicate.distance(
                        bank, bank_dates[b_idx], entry, ledger_dates[l_idx]
                    )

        if not costs:
            return assignment

        if self.policy.allow_shared_entries:
            # No exclusivity: every transaction takes its nearest candidate
            for (b_idx, l_idx), cost in costs.items():
                current = assignment[b_idx]
                if current is None or cost < costs[(b_idx, current)]:
                    assignment[b_idx] = l_idx
            return assignment

        rows = sorted({b for b, _ in costs})
        cols = sorted({l for _, l in costs})
        # Any real pair costs < 1, so one forbidden pair outweighs all real ones
        forbidden = float(len(rows) + 1)

        matrix = [[costs.get((b, l), forbidden) for l in cols] for b in rows]
        transposed = len(rows) > len(cols)
        if transposed:
            matrix = [list(column) for column in zip(*matrix)]

        for r, c in enumerate(_solve_assignment(matrix)):
            b_idx, l_idx = (rows[c], cols[r]) if transposed else (rows[r], cols[c])
            if (b_idx, l_idx) in costs:
                assignment[b_idx] = l_idx

        return assignment


def _solve_assignment(cost: list[list[float]]) -> list[int]:
    """
    Hungarian algorithm (shortest augmenting path, potentials).

    Args:
        cost: n x m matrix with n <= m

    Returns:
        Column index assigned to each row
    """
    n = len(cost)
    m = len(cost[0])
    inf = float("inf")

    u = [0.0] * (n + 1)
    v = [0.0] * (m + 1)
    owner = [0] * (m + 1)  # owner[j]: row (1-based) holding column j
    way = [0] * (m + 1)

    for i in range(1, n + 1):
        owner[0] = i
        j0 = 0
        minv = [inf] * (m + 1)
        used = [False] * (m + 1)

        while True:
            used[j0] = True
            i0 = owner[j0]
            delta = inf
            j1 = 0
            for j in range(1, m + 1):
                if used[j]:
                    continue
                cur = cost[i0 - 1][j - 1] - u[i0] - v[j]
                if cur < minv[j]:
                    minv[j] = cur
                    way[j] = j0
                if minv[j] < delta:
                    delta = minv[j]
                    j1 = j
            for j in range(m + 1):
                if used[j]:
                    u[owner[j]] += delta
                    v[j] -= delta
                else:
                    minv[j] -= delta
            j0 = j1
            if owner[j0] == 0:
                break

        while True:
            j1 = way[j0]
            owner[j0] = owner[j1]
            j0 = j1
            if j0 == 0:
                break

    result = [0] * n
    for j in range(1, m + 1):
        if owner[j]:
            result[owner[j] - 1] = j - 1
    return result


STRATEGIES: dict[AssignmentMode, type[AssignmentStrategy]] = {
    AssignmentMode.GREEDY: GreedyFirstFitStrategy,
    AssignmentMode.OPTIMAL: OptimalAssignmentStrategy,
}


def build_strategy(policy: MatchingPolicy) -> AssignmentStrategy:
    """Instantiate the strategy selected by ``policy.assignment``."""
    return STRATEGIES[AssignmentMode(policy.assignment)](policy)
