"""
DTOs -- Pure domain data transfer objects for the posting pipeline.

Responsibility:
    Defines the immutable structures that flow through the posting pipeline:
    ActorContext and JournalPostingRequest (input), JournalLine, the
    intermediate validation results, and PostingResult (output).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All monetary fields are Decimal (floats are converted via str()).
    - ActorContext.role is a closed Role enum; unknown roles fail at
      construction.
    - PostingResult.to_dict() is deterministic: equal inputs serialize to
      identical JSON.

Failure modes:
    - ValueError on construction with unparseable amounts or unknown roles.

Data flow:
    JournalPostingRequest -> (gates) -> PostingResult
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from gl_kernel.domain.accounts import AccountSnapshot, AccountType
from gl_kernel.domain.sod import Role
from gl_kernel.domain.values import ZERO, to_amount


class LineSide(str, Enum):
    """Which side of the entry a line is on."""

    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class ActorContext:
    """Who is acting, for which tenant and company, under which role."""

    tenant_id: str
    company_id: str
    user_id: str
    role: Role

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role.parse(self.role))


@dataclass(frozen=True)
class JournalLine:
    """
    A single debit-or-credit entry against one account.

    Contract:
        ``debit`` / ``credit`` of None mean the side is absent and count as
        zero. Sign and exclusivity rules are checked by the line validator,
        not here, so that a bad line produces a typed posting error.
    """

    account_id: str
    debit: Decimal | None = None
    credit: Decimal | None = None
    description: str | None = None
    reference: str | None = None

    def __post_init__(self) -> None:
        if self.debit is not None:
            object.__setattr__(self, "debit", to_amount(self.debit))
        if self.credit is not None:
            object.__setattr__(self, "credit", to_amount(self.credit))

    @property
    def debit_amount(self) -> Decimal:
        return self.debit if self.debit is not None else ZERO

    @property
    def credit_amount(self) -> Decimal:
        return self.credit if self.credit is not None else ZERO

    @property
    def side(self) -> LineSide | None:
        """The side carrying a positive amount, or None if ambiguous."""
        has_debit = self.debit_amount > ZERO
        has_credit = self.credit_amount > ZERO
        if has_debit and not has_credit:
            return LineSide.DEBIT
        if has_credit and not has_debit:
            return LineSide.CREDIT
        return None

    @property
    def amount(self) -> Decimal:
        return self.debit_amount if self.side is LineSide.DEBIT else self.credit_amount


@dataclass(frozen=True)
class JournalPostingRequest:
    """
    Caller-constructed, ephemeral posting request.

    ``exchange_rate`` is the rate supplied by the caller's rate collaborator
    for journals in a currency other than the base currency.
    A ``datetime`` journal_date is reduced to its calendar date.
    """

    journal_number: str
    description: str | None
    journal_date: date
    currency: str
    lines: tuple[JournalLine, ...]
    context: ActorContext
    exchange_rate: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        # datetime subclasses date but does not compare with it
        if isinstance(self.journal_date, datetime):
            object.__setattr__(self, "journal_date", self.journal_date.date())
        if self.exchange_rate is not None:
            object.__setattr__(self, "exchange_rate", to_amount(self.exchange_rate))

    @property
    def account_ids(self) -> tuple[str, ...]:
        """Referenced account ids, first-seen order, without duplicates."""
        return tuple(dict.fromkeys(line.account_id for line in self.lines))


@dataclass(frozen=True)
class BalanceSummary:
    """Totals computed by the balance validator."""

    total_debit: Decimal
    total_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return abs(self.total_debit - self.total_credit)


@dataclass(frozen=True)
class NormalBalanceWarning:
    """Advisory: a line posts against the account type's natural side."""

    account_id: str
    account_code: str
    account_type: AccountType
    side: LineSide
    amount: Decimal
    warning: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "account_code": self.account_code,
            "account_type": self.account_type.value,
            "side": self.side.value,
            "amount": str(self.amount),
            "warning": self.warning,
        }


@dataclass(frozen=True)
class COAValidationResult:
    """Outcome of the chart-of-accounts pipeline."""

    valid: bool
    warnings: tuple[NormalBalanceWarning, ...]
    account_details: Mapping[str, AccountSnapshot]


@dataclass(frozen=True)
class FxPolicyResult:
    """Whether a conversion is needed, and at which rate."""

    requires_fx_rate: bool
    base_currency: str
    transaction_currency: str
    exchange_rate: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "requires_fx_rate": self.requires_fx_rate,
            "base_currency": self.base_currency,
            "transaction_currency": self.transaction_currency,
            "exchange_rate": str(self.exchange_rate),
        }


@dataclass(frozen=True)
class PostingResult:
    """
    Result of a successful validation pass.

    Contract:
        Only produced when every gate passed; ``validated`` is therefore
        always True. ``approver_roles`` is empty unless approval is required.
        The caller owns persistence.
    """

    journal_number: str
    total_debit: Decimal
    total_credit: Decimal
    requires_approval: bool
    approver_roles: tuple[Role, ...] = ()
    warnings: tuple[NormalBalanceWarning, ...] = ()
    fx: FxPolicyResult | None = None
    validated: bool = field(default=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "validated": self.validated,
            "journal_number": self.journal_number,
            "total_debit": str(self.total_debit),
            "total_credit": str(self.total_credit),
            "requires_approval": self.requires_approval,
            "approver_roles": [r.value for r in self.approver_roles],
            "warnings": [w.to_dict() for w in self.warnings],
            "fx": self.fx.to_dict() if self.fx is not None else None,
        }
