"""
Accounts -- Read-only chart-of-accounts snapshots.

Responsibility:
    Defines the AccountSnapshot value object loaded from the account
    repository, the parent->children AccountHierarchy index, and the
    AccountSnapshotSet that bundles both for a single validation pass.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Snapshots are immutable; a validation pass never observes mutation.
    - The hierarchy index is built once per pass in O(n), so leaf checks are
      O(1) lookups instead of repeated scans of the full chart.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from gl_kernel.domain.values import normalize_code


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @property
    def normal_balance(self) -> NormalBalance:
        """The side on which this account type naturally carries its balance."""
        return _NORMAL_BALANCES[self]


class NormalBalance(str, Enum):
    """Normal balance side for an account."""

    DEBIT = "debit"
    CREDIT = "credit"


_NORMAL_BALANCES: dict[AccountType, NormalBalance] = {
    AccountType.ASSET: NormalBalance.DEBIT,
    AccountType.EXPENSE: NormalBalance.DEBIT,
    AccountType.LIABILITY: NormalBalance.CREDIT,
    AccountType.EQUITY: NormalBalance.CREDIT,
    AccountType.REVENUE: NormalBalance.CREDIT,
}


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """
    Point-in-time view of one chart-of-accounts entry.

    Contract:
        Loaded by the account repository, never mutated by the kernel.
        ``level`` 0 denotes a top-level control account.

    Guarantees:
        - account_type is always an AccountType member.
        - currency is trimmed and uppercased.
    """

    id: str
    code: str
    name: str
    account_type: AccountType
    currency: str
    is_active: bool = True
    level: int = 1
    parent_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.account_type, AccountType):
            object.__setattr__(
                self, "account_type", AccountType(str(self.account_type).strip().upper())
            )
        object.__setattr__(self, "currency", normalize_code(self.currency))
        if self.level < 0:
            raise ValueError(f"Account level must be >= 0, got {self.level}")

    @property
    def normal_balance(self) -> NormalBalance:
        return self.account_type.normal_balance

    @property
    def is_control_level(self) -> bool:
        return self.level == 0


@dataclass(frozen=True)
class AccountHierarchy:
    """Precomputed parent -> children index over the full chart."""

    children: Mapping[str, tuple[str, ...]]

    @classmethod
    def from_accounts(cls, accounts: Iterable[AccountSnapshot]) -> AccountHierarchy:
        index: dict[str, list[str]] = {}
        for account in accounts:
            if account.parent_id is not None:
                index.setdefault(account.parent_id, []).append(account.id)
        return cls(MappingProxyType({k: tuple(v) for k, v in index.items()}))

    def children_of(self, account_id: str) -> tuple[str, ...]:
        return self.children.get(account_id, ())

    def is_parent(self, account_id: str) -> bool:
        return account_id in self.children


@dataclass(frozen=True)
class AccountSnapshotSet:
    """
    Immutable, per-call bundle of account data for one validation pass.

    Contract:
        ``accounts`` holds the snapshots for the ids referenced by the
        journal; ``hierarchy`` is derived from the full chart. Neither is
        shared across invocations.
    """

    accounts: Mapping[str, AccountSnapshot]
    hierarchy: AccountHierarchy = field(
        default_factory=lambda: AccountHierarchy(MappingProxyType({}))
    )

    @classmethod
    def build(
        cls,
        accounts: Mapping[str, AccountSnapshot],
        all_accounts: Iterable[AccountSnapshot],
    ) -> AccountSnapshotSet:
        return cls(
            accounts=MappingProxyType(dict(accounts)),
            hierarchy=AccountHierarchy.from_accounts(all_accounts),
        )
