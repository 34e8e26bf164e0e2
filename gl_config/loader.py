"""
Configuration Loader (``gl_config.loader``).

Responsibility
--------------
Loads a posting policy YAML file and parses it into typed
``gl_config.schema`` dataclass instances.  Runtime callers go through
``gl_config.get_posting_config()``; the parse functions are exposed for
tests and tooling.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Has no dependency on the
kernel's services.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-numeric tolerance  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from gl_config.schema import FxPolicyDef, PostingConfig, PostingLimitsDef, SoDRuleDef


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse a Decimal from YAML; floats go through str() to keep the literal."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field_name} must be numeric, got {value!r}") from None


def parse_limits(data: dict[str, Any]) -> PostingLimitsDef:
    """Parse PostingLimitsDef; absent keys keep the kernel defaults."""
    defaults = PostingLimitsDef()
    return PostingLimitsDef(
        balance_tolerance=parse_decimal(
            data.get("balance_tolerance", defaults.balance_tolerance), "balance_tolerance"
        ),
        max_lines=int(data.get("max_lines", defaults.max_lines)),
        reject_future_dates=bool(data.get("reject_future_dates", defaults.reject_future_dates)),
    )


def parse_fx(data: dict[str, Any]) -> FxPolicyDef:
    """Parse FxPolicyDef from a dict."""
    return FxPolicyDef(
        base_currency=str(data["base_currency"]),
        permit_fx_conversion=bool(data.get("permit_fx_conversion", False)),
    )


def parse_sod_rule(data: dict[str, Any]) -> SoDRuleDef:
    """
    Parse a ``SoDRuleDef`` from a dict.

    Raises:
        KeyError: if ``action``, ``role`` or ``allowed`` is missing.
    """
    return SoDRuleDef(
        action=str(data["action"]),
        role=str(data["role"]),
        allowed=bool(data["allowed"]),
        requires_approval=bool(data.get("requires_approval", False)),
        reason=str(data.get("reason", "")),
    )


def parse_posting_config(data: dict[str, Any]) -> PostingConfig:
    """
    Parse a complete ``PostingConfig`` from the root dict.

    Postconditions:
        - ``checksum`` is the SHA-256 of the canonical JSON of ``data``.
    """
    return PostingConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        name=data.get("name", data["config_id"]),
        limits=parse_limits(data.get("limits") or {}),
        fx=parse_fx(data["fx"]),
        sod_rules=tuple(parse_sod_rule(r) for r in data.get("sod_rules") or ()),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
