"""
Line validator -- Structural checks on journal lines.

Every accepted journal has between one and ``max_lines`` lines, and each
line carries exactly one positive amount. Negative amounts are rejected
here rather than trusted to an upstream schema layer.
"""

from __future__ import annotations

from collections.abc import Sequence

from gl_kernel.domain.dtos import JournalLine
from gl_kernel.domain.values import ZERO
from gl_kernel.exceptions import (
    EmptyJournalError,
    InvalidLineAmountsError,
    TooManyLinesError,
)

DEFAULT_MAX_LINES = 100


def validate_journal_lines(
    lines: Sequence[JournalLine],
    *,
    max_lines: int = DEFAULT_MAX_LINES,
) -> None:
    """
    Raises:
        EmptyJournalError: No lines.
        TooManyLinesError: More than ``max_lines`` lines.
        InvalidLineAmountsError: First line (in order) that is negative,
            has both sides set, or has neither.
    """
    if len(lines) == 0:
        raise EmptyJournalError()
    if len(lines) > max_lines:
        raise TooManyLinesError(len(lines), max_lines)

    for index, line in enumerate(lines):
        debit = line.debit_amount
        credit = line.credit_amount
        if debit < ZERO or credit < ZERO:
            raise InvalidLineAmountsError(
                index, debit, credit, "negative_amount",
                "Debit and credit amounts cannot be negative",
            )
        if debit > ZERO and credit > ZERO:
            raise InvalidLineAmountsError(
                index, debit, credit, "both_sides",
                "Cannot have both debit and credit amounts",
            )
        if debit == ZERO and credit == ZERO:
            raise InvalidLineAmountsError(
                index, debit, credit, "zero_amounts",
                "Must have either debit or credit amount",
            )
