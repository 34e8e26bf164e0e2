"""Kernel-side posting settings.

The kernel never reads configuration files. ``gl_config.bridges`` builds a
PostingSettings from the YAML policy; without one the defaults below apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from gl_kernel.domain.balance_validator import DEFAULT_BALANCE_TOLERANCE
from gl_kernel.domain.fx_policy import normalize_currency_code
from gl_kernel.domain.line_validator import DEFAULT_MAX_LINES


@dataclass(frozen=True)
class PostingSettings:
    """
    Tunables for one orchestrator.

    ``permit_fx_conversion``: when True, a journal in a foreign currency may
    also reference accounts held in the base currency.
    """

    base_currency: str = "MYR"
    balance_tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE
    max_lines: int = DEFAULT_MAX_LINES
    reject_future_dates: bool = True
    permit_fx_conversion: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_currency", normalize_currency_code(self.base_currency, "base"))
        if self.balance_tolerance < 0:
            raise ValueError(f"balance_tolerance must be >= 0, got {self.balance_tolerance}")
        if self.max_lines < 1:
            raise ValueError(f"max_lines must be >= 1, got {self.max_lines}")
