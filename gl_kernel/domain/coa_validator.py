"""
COA validator -- Chart-of-accounts rules for the accounts a journal touches.

Responsibility:
    Checks that every referenced account exists and is active, is
    denominated in the journal currency, and is a postable leaf. Also
    produces advisory warnings for lines that post against an account
    type's natural balance.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Operates on the
    per-call AccountSnapshotSet loaded by the orchestrator.

Invariants enforced:
    - Every account id resolves to an active snapshot.
    - Account currency equals the journal currency, unless the caller
      passes that account's currency in ``permitted_currencies``.
    - No posting targets a level-0 control account or a parent account.

Failure modes:
    - AccountsNotFoundError, InactiveAccountError, CurrencyMismatchError,
      ControlAccountViolationError.

Audit relevance:
    Normal-balance warnings are accumulated and returned, never raised.
    They are meant for reviewers and never block a posting.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping, Sequence
from types import MappingProxyType

from gl_kernel.domain.accounts import (
    AccountHierarchy,
    AccountSnapshot,
    NormalBalance,
)
from gl_kernel.domain.dtos import (
    COAValidationResult,
    JournalLine,
    LineSide,
    NormalBalanceWarning,
)
from gl_kernel.domain.values import normalize_code
from gl_kernel.exceptions import (
    AccountsNotFoundError,
    ControlAccountViolationError,
    CurrencyMismatchError,
    InactiveAccountError,
)

CONTROL_LEVEL_REASON = "Top-level control account (level 0) cannot be posted to directly"


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def validate_accounts_exist(
    account_ids: Iterable[str],
    snapshots: Mapping[str, AccountSnapshot],
) -> None:
    """
    Raises:
        AccountsNotFoundError: Lists exactly the missing ids, first-seen order.
        InactiveAccountError: Lists every inactive referenced account.
    """
    ids = _unique(account_ids)
    missing = [account_id for account_id in ids if account_id not in snapshots]
    if missing:
        raise AccountsNotFoundError(missing)

    inactive = [
        {"account_id": snapshots[i].id, "code": snapshots[i].code, "name": snapshots[i].name}
        for i in ids
        if not snapshots[i].is_active
    ]
    if inactive:
        raise InactiveAccountError(inactive)


def validate_currency_consistency(
    journal_currency: str,
    snapshots: Mapping[str, AccountSnapshot],
    account_ids: Iterable[str],
    *,
    permitted_currencies: Collection[str] = (),
) -> None:
    """
    Raises:
        CurrencyMismatchError: With one {account_id, code, account_currency}
            entry per offending account.
    """
    currency = normalize_code(journal_currency)
    accepted = {currency} | {normalize_code(c) for c in permitted_currencies}
    mismatches = []
    for account_id in _unique(account_ids):
        account = snapshots.get(account_id)
        if account is None:
            continue
        if account.currency not in accepted:
            mismatches.append({
                "account_id": account.id,
                "code": account.code,
                "account_currency": account.currency,
            })
    if mismatches:
        raise CurrencyMismatchError(currency, mismatches)


def validate_control_accounts(
    account_ids: Iterable[str],
    snapshots: Mapping[str, AccountSnapshot],
    all_accounts: Iterable[AccountSnapshot] | AccountHierarchy,
) -> None:
    """
    Postings must target leaf accounts only.

    ``all_accounts`` may be the full chart or a prebuilt AccountHierarchy;
    either way the parent lookup is a single index lookup per account.

    Raises:
        ControlAccountViolationError: With one entry per level-0 or
            parent account.
    """
    hierarchy = (
        all_accounts
        if isinstance(all_accounts, AccountHierarchy)
        else AccountHierarchy.from_accounts(all_accounts)
    )
    violations = []
    for account_id in _unique(account_ids):
        account = snapshots.get(account_id)
        if account is None:
            continue
        if account.is_control_level:
            violations.append({
                "account_id": account.id,
                "code": account.code,
                "reason": CONTROL_LEVEL_REASON,
            })
        elif hierarchy.is_parent(account.id):
            children = len(hierarchy.children_of(account.id))
            violations.append({
                "account_id": account.id,
                "code": account.code,
                "reason": (
                    f"Parent account with {children} child account(s) "
                    "cannot be posted to directly"
                ),
            })
    if violations:
        raise ControlAccountViolationError(violations)


def validate_normal_balances(
    lines: Sequence[JournalLine],
    snapshots: Mapping[str, AccountSnapshot],
) -> tuple[NormalBalanceWarning, ...]:
    """Warn for lines posted against the account type's natural side."""
    warnings = []
    for line in lines:
        account = snapshots.get(line.account_id)
        side = line.side
        if account is None or side is None:
            continue
        normal = account.normal_balance
        if (side is LineSide.DEBIT) == (normal is NormalBalance.DEBIT):
            continue
        warnings.append(NormalBalanceWarning(
            account_id=account.id,
            account_code=account.code,
            account_type=account.account_type,
            side=side,
            amount=line.amount,
            warning=(
                f"{account.account_type.value} account {account.code} normally has "
                f"{normal.value} balance, but this line is a {side.value} "
                f"of {line.amount}"
            ),
        ))
    return tuple(warnings)


def validate_coa_flags(
    lines: Sequence[JournalLine],
    currency: str,
    snapshots: Mapping[str, AccountSnapshot],
    all_accounts: Iterable[AccountSnapshot] | AccountHierarchy,
    *,
    permitted_currencies: Collection[str] = (),
) -> COAValidationResult:
    """
    Run the COA checks in fixed order: existence, currency, control account,
    then normal-balance warnings.

    Raises:
        The first failing check's PostingError subclass.
    """
    account_ids = _unique(line.account_id for line in lines)

    validate_accounts_exist(account_ids, snapshots)
    validate_currency_consistency(
        currency, snapshots, account_ids, permitted_currencies=permitted_currencies
    )
    validate_control_accounts(account_ids, snapshots, all_accounts)
    warnings = validate_normal_balances(lines, snapshots)

    details = snapshots if isinstance(snapshots, MappingProxyType) else MappingProxyType(dict(snapshots))
    return COAValidationResult(valid=True, warnings=warnings, account_details=details)
