"""Balance validator -- the double-entry identity, sum(debit) == sum(credit)."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from gl_kernel.domain.dtos import BalanceSummary, JournalLine
from gl_kernel.domain.values import ZERO
from gl_kernel.exceptions import UnbalancedJournalError

DEFAULT_BALANCE_TOLERANCE = Decimal("0.01")


def compute_totals(lines: Sequence[JournalLine]) -> BalanceSummary:
    return BalanceSummary(
        total_debit=sum((line.debit_amount for line in lines), ZERO),
        total_credit=sum((line.credit_amount for line in lines), ZERO),
    )


def validate_balanced(
    lines: Sequence[JournalLine],
    *,
    tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE,
) -> BalanceSummary:
    """
    Check that debits equal credits within ``tolerance``.

    The tolerance absorbs drift from amounts that were accumulated upstream;
    a difference exactly equal to the tolerance is accepted.

    Raises:
        UnbalancedJournalError: If |total_debit - total_credit| > tolerance.
    """
    summary = compute_totals(lines)
    if summary.difference > tolerance:
        raise UnbalancedJournalError(
            total_debit=summary.total_debit,
            total_credit=summary.total_credit,
            difference=summary.difference,
        )
    return summary
