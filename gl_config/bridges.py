"""
Config -> Kernel Bridges.

Functions that convert a PostingConfig into kernel-compatible inputs.
These live in gl_config (the producer) because the kernel must NEVER
import gl_config.

Usage:
    from gl_config import get_posting_config
    from gl_config.bridges import build_posting_orchestrator

    config = get_posting_config()
    orchestrator = build_posting_orchestrator(config, repository)
"""

from __future__ import annotations

from gl_config.schema import PostingConfig
from gl_kernel.domain.clock import Clock
from gl_kernel.domain.settings import PostingSettings
from gl_kernel.domain.sod import (
    PermissionTable,
    PostingAction,
    Role,
    SoDRule,
    TableAuthorizationPolicy,
)
from gl_kernel.services.account_repository import AccountRepository
from gl_kernel.services.posting_orchestrator import PostingOrchestrator


def build_posting_settings(config: PostingConfig) -> PostingSettings:
    """Build PostingSettings from the limits and FX sections."""
    return PostingSettings(
        base_currency=config.fx.base_currency,
        balance_tolerance=config.limits.balance_tolerance,
        max_lines=config.limits.max_lines,
        reject_future_dates=config.limits.reject_future_dates,
        permit_fx_conversion=config.fx.permit_fx_conversion,
    )


def build_permission_table(config: PostingConfig) -> PermissionTable:
    """
    Build a PermissionTable from the SoD rules.

    Raises:
        ValueError: Unknown role/action, or a duplicate (action, role).
    """
    rules = []
    for rule in config.sod_rules:
        action = PostingAction(rule.action)
        role = Role.parse(rule.role)
        reason = rule.reason
        if not rule.allowed and not reason:
            reason = f"Role '{role.value}' may not perform '{action.value}'"
        rules.append(SoDRule(
            action=action,
            role=role,
            allowed=rule.allowed,
            requires_approval=rule.requires_approval,
            reason=reason,
        ))
    return PermissionTable(rules)


def build_authorization_policy(config: PostingConfig) -> TableAuthorizationPolicy:
    return TableAuthorizationPolicy(build_permission_table(config))


def build_posting_orchestrator(
    config: PostingConfig,
    account_repository: AccountRepository,
    clock: Clock | None = None,
) -> PostingOrchestrator:
    """Wire a PostingOrchestrator governed by ``config``."""
    return PostingOrchestrator(
        account_repository,
        authorization_policy=build_authorization_policy(config),
        settings=build_posting_settings(config),
        clock=clock,
    )
