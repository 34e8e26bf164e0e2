"""
Configuration Validator (``gl_config.validator``).

Responsibility
--------------
Validates a parsed ``PostingConfig`` before it is bridged into kernel
inputs, so that a bad policy fails at load time rather than mid-posting.

Invariants enforced
-------------------
* Roles and actions must belong to the kernel's closed enums.
* At most one rule per ``(action, role)`` pair.
* Tolerance is non-negative, the line limit at least 1, and the base
  currency a three-letter code.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> the policy
  MUST NOT be used.
* Validation warnings  -> the policy may be used but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gl_config.schema import PostingConfig
from gl_kernel.domain.sod import PostingAction, Role
from gl_kernel.domain.values import is_currency_code, normalize_code

_KNOWN_ROLES = frozenset(r.value for r in Role)
_KNOWN_ACTIONS = frozenset(a.value for a in PostingAction)


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block loading but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_posting_config(config: PostingConfig) -> ConfigValidationResult:
    """
    Validate a posting policy.

    Postconditions:
        - Returns a ``ConfigValidationResult``; never raises for content
          problems.
    """
    result = ConfigValidationResult()
    _validate_limits(config, result)
    _validate_fx(config, result)
    _validate_sod_rules(config, result)
    return result


def _validate_limits(config: PostingConfig, result: ConfigValidationResult) -> None:
    limits = config.limits
    if limits.balance_tolerance < 0:
        result.add_error(
            f"limits.balance_tolerance must be >= 0, got {limits.balance_tolerance}"
        )
    elif limits.balance_tolerance == 0:
        result.add_warning("limits.balance_tolerance is 0; rounding residue will be rejected")
    if limits.max_lines < 1:
        result.add_error(f"limits.max_lines must be >= 1, got {limits.max_lines}")


def _validate_fx(config: PostingConfig, result: ConfigValidationResult) -> None:
    if not is_currency_code(normalize_code(config.fx.base_currency)):
        result.add_error(
            f"fx.base_currency must be a 3-letter code, got {config.fx.base_currency!r}"
        )


def _validate_sod_rules(config: PostingConfig, result: ConfigValidationResult) -> None:
    seen: set[tuple[str, str]] = set()
    for i, rule in enumerate(config.sod_rules):
        where = f"sod_rules[{i}]"
        if rule.action not in _KNOWN_ACTIONS:
            result.add_error(f"{where}: unknown action {rule.action!r}")
        if rule.role not in _KNOWN_ROLES:
            result.add_error(f"{where}: unknown role {rule.role!r}")
        key = (rule.action, rule.role)
        if key in seen:
            result.add_error(f"{where}: duplicate rule for action={rule.action} role={rule.role}")
        seen.add(key)
        if rule.requires_approval and not rule.allowed:
            result.add_warning(f"{where}: requires_approval has no effect on a denied rule")

    post = PostingAction.JOURNAL_POST.value
    missing = sorted(_KNOWN_ROLES - {role for action, role in seen if action == post})
    if missing:
        result.add_warning(
            f"No {post} rule for role(s) {', '.join(missing)}; they will be denied"
        )

    needs_approval = any(
        r.action == post and r.allowed and r.requires_approval for r in config.sod_rules
    )
    has_approver = any(
        r.action == PostingAction.JOURNAL_APPROVE.value and r.allowed for r in config.sod_rules
    )
    if needs_approval and not has_approver:
        result.add_error(
            f"Some roles require approval for {post} but no role is allowed "
            f"{PostingAction.JOURNAL_APPROVE.value}"
        )
