"""
GL Kernel - Journal posting validation engine

A pure validation pipeline that decides whether a proposed journal entry
may be posted to the general ledger:
- Segregation-of-duties authorization
- Structural line and balance checks
- Chart-of-accounts gates (existence, activity, currency, control accounts)
- FX policy resolution against the base currency

The kernel never writes; a PostingResult means the caller may persist.
"""

__version__ = "0.1.0"

from gl_kernel.domain.balance_validator import validate_balanced
from gl_kernel.domain.coa_validator import validate_coa_flags
from gl_kernel.domain.fx_policy import validate_fx_policy
from gl_kernel.domain.line_validator import validate_journal_lines
from gl_kernel.domain.sod import validate_sod_compliance
from gl_kernel.exceptions import LedgerKernelError, PostingError
from gl_kernel.services.posting_orchestrator import PostingOrchestrator, post_journal

__all__ = [
    "LedgerKernelError",
    "PostingError",
    "PostingOrchestrator",
    "post_journal",
    "validate_balanced",
    "validate_coa_flags",
    "validate_fx_policy",
    "validate_journal_lines",
    "validate_sod_compliance",
]
