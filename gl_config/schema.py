"""
PostingConfig schema.

Defines the human-authored, reviewable posting policy.  YAML files are
parsed into these types by the loader, checked by the validator, and
translated into kernel inputs by the bridges.

Roles and actions are kept as plain strings here; the validator checks
them against the kernel's closed enums and the bridges convert them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

# ---------------------------------------------------------------------------
# Posting limits and FX policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PostingLimitsDef:
    """Structural limits applied to every journal."""

    balance_tolerance: Decimal = Decimal("0.01")
    max_lines: int = 100
    reject_future_dates: bool = True


@dataclass(frozen=True)
class FxPolicyDef:
    """Base currency and cross-currency posting policy."""

    base_currency: str = "MYR"
    permit_fx_conversion: bool = False


# ---------------------------------------------------------------------------
# Segregation of duties
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SoDRuleDef:
    """One (action, role) permission entry."""

    action: str
    role: str
    allowed: bool
    requires_approval: bool = False
    reason: str = ""


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PostingConfig:
    """A complete, versioned posting policy."""

    config_id: str
    version: int
    name: str
    limits: PostingLimitsDef
    fx: FxPolicyDef
    sod_rules: tuple[SoDRuleDef, ...] = ()
    checksum: str = ""
