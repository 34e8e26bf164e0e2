"""
Segregation of Duties (SoD) -- Role permissions for posting actions.

Responsibility:
    Decides whether an acting role may perform a posting action and whether
    the action additionally needs a second approver. Roles form a closed
    enum and permissions an explicit (action, role) table, so an unknown role
    fails construction and a missing table entry is a denial -- never a
    fall-through default.

Architecture position:
    Kernel > Domain -- pure, zero I/O. The kernel ships a default table;
    deployments supply their own through ``gl_config.bridges``.

Failure modes:
    - SoDViolationError when the policy denies the action.

Audit relevance:
    Preparer and approver are distinct duties. A role that may post can
    still require approval; that requirement is surfaced as a flag on the
    decision and never blocks the posting by itself.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from gl_kernel.exceptions import SoDViolationError

if TYPE_CHECKING:
    from gl_kernel.domain.dtos import ActorContext


class Role(str, Enum):
    """Closed set of roles an actor may act under."""

    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    CLERK = "clerk"
    AUDITOR = "auditor"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: Role | str) -> Role:
        """Parse a role, raising ValueError for anything outside the enum."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Role must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None


class PostingAction(str, Enum):
    """Actions governed by the SoD table."""

    JOURNAL_POST = "journal:post"
    JOURNAL_APPROVE = "journal:approve"


@dataclass(frozen=True)
class SoDRule:
    """One (action, role) entry of the permission table."""

    action: PostingAction
    role: Role
    allowed: bool
    requires_approval: bool = False
    reason: str = ""


@dataclass(frozen=True)
class SoDDecision:
    """Outcome of an SoD check."""

    allowed: bool
    requires_approval: bool = False
    reason: str = ""


class AuthorizationPolicy(Protocol):
    """External authorization collaborator."""

    def check_sod_compliance(
        self, context: ActorContext, action: PostingAction
    ) -> SoDDecision: ...

    def approver_roles(self, action: PostingAction) -> tuple[Role, ...]:
        """Roles that approve a pending ``action``, in a stable order."""
        ...


class PermissionTable:
    """
    Explicit (action, role) -> SoDRule lookup.

    Contract:
        Built once from a sequence of rules; duplicate keys are rejected.
        Lookups never invent entries.
    """

    def __init__(self, rules: Iterable[SoDRule]):
        table: dict[tuple[PostingAction, Role], SoDRule] = {}
        for rule in rules:
            key = (rule.action, rule.role)
            if key in table:
                raise ValueError(
                    f"Duplicate SoD rule for action={rule.action.value} role={rule.role.value}"
                )
            table[key] = rule
        self._rules: Mapping[tuple[PostingAction, Role], SoDRule] = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, action: PostingAction, role: Role) -> SoDRule | None:
        return self._rules.get((action, role))

    def allowed_roles(self, action: PostingAction) -> tuple[Role, ...]:
        """
        Roles allowed to perform ``action``, in Role declaration order.

        The order does not depend on the order rules were given in, so the
        default table yields (admin, manager).
        """
        return tuple(
            role for role in Role
            if (rule := self._rules.get((action, role))) is not None and rule.allowed
        )


def _rule(action: PostingAction, role: Role, allowed: bool, approval: bool = False) -> SoDRule:
    reason = "" if allowed else f"Role '{role.value}' may not perform '{action.value}'"
    return SoDRule(action, role, allowed, approval, reason)


DEFAULT_PERMISSION_TABLE = PermissionTable([
    _rule(PostingAction.JOURNAL_POST, Role.OWNER, True),
    _rule(PostingAction.JOURNAL_POST, Role.ADMIN, True),
    _rule(PostingAction.JOURNAL_POST, Role.MANAGER, True, approval=True),
    _rule(PostingAction.JOURNAL_POST, Role.ACCOUNTANT, True, approval=True),
    _rule(PostingAction.JOURNAL_POST, Role.CLERK, False),
    _rule(PostingAction.JOURNAL_POST, Role.AUDITOR, False),
    _rule(PostingAction.JOURNAL_POST, Role.VIEWER, False),
    _rule(PostingAction.JOURNAL_APPROVE, Role.ADMIN, True),
    _rule(PostingAction.JOURNAL_APPROVE, Role.MANAGER, True),
])


class TableAuthorizationPolicy:
    """AuthorizationPolicy backed by a PermissionTable."""

    def __init__(self, table: PermissionTable = DEFAULT_PERMISSION_TABLE):
        self._table = table

    def check_sod_compliance(
        self, context: ActorContext, action: PostingAction
    ) -> SoDDecision:
        rule = self._table.get(action, context.role)
        if rule is None:
            return SoDDecision(
                allowed=False,
                reason=f"No permission entry for role '{context.role.value}' on '{action.value}'",
            )
        if not rule.allowed:
            return SoDDecision(allowed=False, reason=rule.reason)
        return SoDDecision(allowed=True, requires_approval=rule.requires_approval)

    def approver_roles(self, action: PostingAction) -> tuple[Role, ...]:
        """Roles allowed ``journal:approve`` for a post, in Role declaration order."""
        if action is PostingAction.JOURNAL_POST:
            return self._table.allowed_roles(PostingAction.JOURNAL_APPROVE)
        return ()


DEFAULT_AUTHORIZATION_POLICY = TableAuthorizationPolicy()


def validate_sod_compliance(
    context: ActorContext,
    policy: AuthorizationPolicy | None = None,
    *,
    action: PostingAction = PostingAction.JOURNAL_POST,
) -> SoDDecision:
    """
    Gate an action on the SoD policy.

    Postconditions:
        Returns the decision when allowed; ``requires_approval`` may be True.

    Raises:
        SoDViolationError: If the policy denies the action.
    """
    decision = (policy or DEFAULT_AUTHORIZATION_POLICY).check_sod_compliance(context, action)
    if not decision.allowed:
        raise SoDViolationError(
            action=action.value,
            user_role=context.role.value,
            reason=decision.reason,
        )
    return decision
