"""Services for the GL kernel (validation side; no writes)."""

from gl_kernel.services.account_repository import (
    AccountRepository,
    AsyncSqlAccountRepository,
    InMemoryAccountRepository,
    SqlAccountRepository,
)
from gl_kernel.services.invoice_posting import (
    InvoiceLine,
    InvoicePostingRequest,
    InvoicePostingResult,
    InvoiceTotals,
    TaxLine,
    build_invoice_journal,
    calculate_invoice_totals,
    validate_invoice_posting,
)
from gl_kernel.services.posting_orchestrator import PostingOrchestrator, post_journal

__all__ = [
    "AccountRepository",
    "AsyncSqlAccountRepository",
    "InMemoryAccountRepository",
    "InvoiceLine",
    "InvoicePostingRequest",
    "InvoicePostingResult",
    "InvoiceTotals",
    "PostingOrchestrator",
    "SqlAccountRepository",
    "TaxLine",
    "build_invoice_journal",
    "calculate_invoice_totals",
    "post_journal",
    "validate_invoice_posting",
]
