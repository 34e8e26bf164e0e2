"""
Pure domain layer.

This module contains the value objects and validators of the posting
pipeline with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Configuration files
- I/O

All domain objects are immutable and deterministic.
"""

from gl_kernel.domain.accounts import (
    AccountHierarchy,
    AccountSnapshot,
    AccountSnapshotSet,
    AccountType,
    NormalBalance,
)
from gl_kernel.domain.balance_validator import compute_totals, validate_balanced
from gl_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from gl_kernel.domain.coa_validator import (
    validate_accounts_exist,
    validate_coa_flags,
    validate_control_accounts,
    validate_currency_consistency,
    validate_normal_balances,
)
from gl_kernel.domain.dtos import (
    ActorContext,
    BalanceSummary,
    COAValidationResult,
    FxPolicyResult,
    JournalLine,
    JournalPostingRequest,
    LineSide,
    NormalBalanceWarning,
    PostingResult,
)
from gl_kernel.domain.fx_policy import normalize_currency_code, validate_fx_policy
from gl_kernel.domain.lifecycle import PostingStage, PostingStageTracker
from gl_kernel.domain.line_validator import validate_journal_lines
from gl_kernel.domain.settings import PostingSettings
from gl_kernel.domain.sod import (
    DEFAULT_AUTHORIZATION_POLICY,
    DEFAULT_PERMISSION_TABLE,
    AuthorizationPolicy,
    PermissionTable,
    PostingAction,
    Role,
    SoDDecision,
    SoDRule,
    TableAuthorizationPolicy,
    validate_sod_compliance,
)

__all__ = [
    # Accounts
    "AccountHierarchy",
    "AccountSnapshot",
    "AccountSnapshotSet",
    "AccountType",
    "NormalBalance",
    # DTOs
    "ActorContext",
    "BalanceSummary",
    "COAValidationResult",
    "FxPolicyResult",
    "JournalLine",
    "JournalPostingRequest",
    "LineSide",
    "NormalBalanceWarning",
    "PostingResult",
    # Validators
    "compute_totals",
    "normalize_currency_code",
    "validate_accounts_exist",
    "validate_balanced",
    "validate_coa_flags",
    "validate_control_accounts",
    "validate_currency_consistency",
    "validate_fx_policy",
    "validate_journal_lines",
    "validate_normal_balances",
    # SoD
    "AuthorizationPolicy",
    "DEFAULT_AUTHORIZATION_POLICY",
    "DEFAULT_PERMISSION_TABLE",
    "PermissionTable",
    "PostingAction",
    "Role",
    "SoDDecision",
    "SoDRule",
    "TableAuthorizationPolicy",
    "validate_sod_compliance",
    # Pipeline
    "Clock",
    "DeterministicClock",
    "PostingSettings",
    "PostingStage",
    "PostingStageTracker",
    "SystemClock",
]
