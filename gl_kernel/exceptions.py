"""
Typed Exception Hierarchy for the GL posting kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every gate in the posting pipeline fails with a dedicated exception class.
Callers (request handlers, adjacent posting flows) catch by type and read
structured attributes instead of parsing message strings:

    try:
        result = await orchestrator.post_journal(request)
    except UnbalancedJournalError as e:
        api_response(code=e.code, difference=str(e.difference))
    except PostingError as e:
        api_response(code=e.code, details=e.details)

Each exception carries:
  1. a class-level ``code`` (machine-readable, API-safe)
  2. a human-readable message
  3. a ``details`` dict with the structured context of the failure

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- PostingError
        +-- EmptyJournalError
        +-- TooManyLinesError
        +-- InvalidLineAmountsError
        +-- UnbalancedJournalError
        +-- AccountsNotFoundError
        +-- InactiveAccountError
        +-- CurrencyMismatchError
        +-- ControlAccountViolationError
        +-- SoDViolationError
        +-- InvalidCurrencyCodeError
        +-- InvalidExchangeRateError
        +-- FutureJournalDateError
        +-- InvalidInvoiceError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                        | When Raised
----------------------------|-----------------------------------------------
EMPTY_JOURNAL               | Journal has no lines
TOO_MANY_LINES              | Journal exceeds the maximum line count
INVALID_LINE_AMOUNTS        | Line has both/neither side set, or a negative
UNBALANCED_JOURNAL          | |debits - credits| exceeds tolerance
ACCOUNTS_NOT_FOUND          | Referenced account ids do not resolve
INACTIVE_ACCOUNT            | Referenced account is deactivated
CURRENCY_MISMATCH           | Account currency differs from journal currency
CONTROL_ACCOUNT_VIOLATION   | Posting to level-0 or parent account
SOD_VIOLATION               | Acting role may not perform the action
INVALID_CURRENCY_CODE       | Currency code is not three letters
INVALID_EXCHANGE_RATE       | Supplied exchange rate is zero/negative/missing
FUTURE_JOURNAL_DATE         | Journal date is after today
INVALID_INVOICE             | Invoice is missing data or has no positive total

All failures are deterministic and derived from the input. None of them is
transient, so none is retried inside the kernel.
"""

from __future__ import annotations

from typing import Any


class LedgerKernelError(Exception):
    """
    Base exception for all GL kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


class PostingError(LedgerKernelError):
    """Base exception for posting gate failures.

    Carries ``code``, ``message`` and ``details`` -- the single error shape
    seen by callers of the posting pipeline.
    """

    code: str = "POSTING_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for handlers translating errors into responses."""
        return {"code": self.code, "message": self.message, "details": self.details}


# Structural line errors


class EmptyJournalError(PostingError):
    """Journal has no lines."""

    code: str = "EMPTY_JOURNAL"

    def __init__(self) -> None:
        super().__init__("Journal must have at least one line", {"line_count": 0})


class TooManyLinesError(PostingError):
    """Journal exceeds the maximum number of lines."""

    code: str = "TOO_MANY_LINES"

    def __init__(self, line_count: int, max_lines: int):
        self.line_count = line_count
        self.max_lines = max_lines
        super().__init__(
            f"Journal cannot have more than {max_lines} lines (got {line_count})",
            {"line_count": line_count, "max_lines": max_lines},
        )


class InvalidLineAmountsError(PostingError):
    """A line does not carry exactly one positive amount."""

    code: str = "INVALID_LINE_AMOUNTS"

    def __init__(self, line_index: int, debit: Any, credit: Any, reason: str, message: str):
        self.line_index = line_index
        self.debit = debit
        self.credit = credit
        self.reason = reason
        super().__init__(
            f"Line {line_index + 1}: {message}",
            {
                "line_index": line_index,
                "debit": debit,
                "credit": credit,
                "reason": reason,
            },
        )


# Balance errors


class UnbalancedJournalError(PostingError):
    """Journal debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_JOURNAL"

    def __init__(self, total_debit: Any, total_credit: Any, difference: Any):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = difference
        super().__init__(
            "Journal must be balanced: debits must equal credits",
            {
                "total_debit": total_debit,
                "total_credit": total_credit,
                "difference": difference,
            },
        )


# Chart-of-accounts errors


class AccountsNotFoundError(PostingError):
    """One or more referenced accounts do not exist."""

    code: str = "ACCOUNTS_NOT_FOUND"

    def __init__(self, missing_account_ids: list[str]):
        self.missing_account_ids = missing_account_ids
        super().__init__(
            f"Account(s) not found: {', '.join(missing_account_ids)}",
            {"missing_account_ids": missing_account_ids},
        )


class InactiveAccountError(PostingError):
    """One or more referenced accounts are deactivated."""

    code: str = "INACTIVE_ACCOUNT"

    def __init__(self, inactive_accounts: list[dict[str, str]]):
        self.inactive_accounts = inactive_accounts
        codes = ", ".join(a["code"] for a in inactive_accounts)
        super().__init__(
            f"Inactive account(s) cannot be used: {codes}",
            {"inactive_accounts": inactive_accounts},
        )


class CurrencyMismatchError(PostingError):
    """Referenced accounts are denominated in a different currency."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, journal_currency: str, mismatches: list[dict[str, str]]):
        self.journal_currency = journal_currency
        self.mismatches = mismatches
        super().__init__(
            f"Currency mismatch: journal is {journal_currency}, "
            f"{len(mismatches)} account(s) differ",
            {"journal_currency": journal_currency, "mismatches": mismatches},
        )


class ControlAccountViolationError(PostingError):
    """Posting targets a control (level-0) or parent account."""

    code: str = "CONTROL_ACCOUNT_VIOLATION"

    def __init__(self, violations: list[dict[str, str]]):
        self.violations = violations
        super().__init__(
            f"Control account violations: {len(violations)} account(s) "
            "cannot be posted to directly",
            {"violations": violations},
        )


# Authorization errors


class SoDViolationError(PostingError):
    """Acting role is not permitted to perform the action."""

    code: str = "SOD_VIOLATION"

    def __init__(self, action: str, user_role: str, reason: str):
        self.action = action
        self.user_role = user_role
        self.reason = reason
        super().__init__(
            f"User role '{user_role}' is not authorized to perform '{action}'",
            {"action": action, "user_role": user_role, "reason": reason},
        )


# Currency errors


class InvalidCurrencyCodeError(PostingError):
    """Currency code is not exactly three letters after normalization."""

    code: str = "INVALID_CURRENCY_CODE"

    def __init__(self, currency: Any, field: str):
        self.currency = currency
        self.field = field
        super().__init__(
            f"Invalid {field} currency code: {currency!r}",
            {"currency": currency, "field": field},
        )


class InvalidExchangeRateError(PostingError):
    """Exchange rate is missing where required, or not positive."""

    code: str = "INVALID_EXCHANGE_RATE"

    def __init__(self, base_currency: str, transaction_currency: str, exchange_rate: Any):
        self.base_currency = base_currency
        self.transaction_currency = transaction_currency
        self.exchange_rate = exchange_rate
        super().__init__(
            f"Exchange rate for {transaction_currency} to {base_currency} "
            f"must be positive, got {exchange_rate}",
            {
                "base_currency": base_currency,
                "transaction_currency": transaction_currency,
                "exchange_rate": exchange_rate,
            },
        )


# Date errors


class FutureJournalDateError(PostingError):
    """Journal is dated after the current date."""

    code: str = "FUTURE_JOURNAL_DATE"

    def __init__(self, journal_date: str, today: str):
        self.journal_date = journal_date
        self.today = today
        super().__init__(
            f"Journal date {journal_date} cannot be in the future (today is {today})",
            {"journal_date": journal_date, "today": today},
        )


# Adjacent posting flows


class InvalidInvoiceError(PostingError):
    """Invoice cannot be turned into a journal."""

    code: str = "INVALID_INVOICE"

    def __init__(self, invoice_number: str, reason: str):
        self.invoice_number = invoice_number
        self.reason = reason
        super().__init__(
            f"Invoice {invoice_number}: {reason}",
            {"invoice_number": invoice_number, "reason": reason},
        )
