"""
Invoice posting -- Turns an AR invoice into a journal and validates it.

Responsibility:
    Computes invoice totals, builds the balanced AR journal (AR debit against
    revenue and tax credits) in the base currency, and runs it through the
    full posting pipeline.

Architecture position:
    Kernel > Services.  Adjacent flow on top of PostingOrchestrator; it adds
    invoice-level gates and reuses every journal gate unchanged.

Invariants enforced:
    - The journal is always in the base currency.  Foreign invoices are
      converted at the supplied rate, each credit quantized to 2 places.
    - The AR debit equals the sum of the converted credits, so conversion
      rounding never unbalances the journal.

Failure modes:
    - InvalidInvoiceError: missing ids/lines, non-positive totals.
    - InvalidExchangeRateError: foreign invoice without a positive rate.
    - Any PostingError raised by the journal pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from gl_kernel.domain.dtos import (
    ActorContext,
    JournalLine,
    JournalPostingRequest,
    PostingResult,
)
from gl_kernel.domain.fx_policy import normalize_currency_code, validate_fx_policy
from gl_kernel.domain.values import CENT, ZERO, to_amount
from gl_kernel.exceptions import InvalidExchangeRateError, InvalidInvoiceError
from gl_kernel.logging_config import get_logger
from gl_kernel.services.posting_orchestrator import PostingOrchestrator

logger = get_logger("services.invoice_posting")


@dataclass(frozen=True)
class InvoiceLine:
    """Revenue line of an invoice."""

    description: str
    line_amount: Decimal
    revenue_account_id: str
    quantity: Decimal = Decimal("1")
    unit_price: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_amount", to_amount(self.line_amount))
        object.__setattr__(self, "quantity", to_amount(self.quantity))
        if self.unit_price is not None:
            object.__setattr__(self, "unit_price", to_amount(self.unit_price))


@dataclass(frozen=True)
class TaxLine:
    """Output tax posted to a liability account."""

    tax_code: str
    tax_account_id: str
    tax_amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "tax_amount", to_amount(self.tax_amount))


@dataclass(frozen=True)
class InvoicePostingRequest:
    invoice_id: str
    invoice_number: str
    customer_name: str
    invoice_date: date
    currency: str
    ar_account_id: str
    lines: tuple[InvoiceLine, ...]
    context: ActorContext
    tax_lines: tuple[TaxLine, ...] = ()
    exchange_rate: Decimal | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "tax_lines", tuple(self.tax_lines))
        if self.exchange_rate is not None:
            object.__setattr__(self, "exchange_rate", to_amount(self.exchange_rate))


@dataclass(frozen=True)
class InvoiceTotals:
    total_revenue: Decimal
    total_tax: Decimal

    @property
    def total_amount(self) -> Decimal:
        return self.total_revenue + self.total_tax


@dataclass(frozen=True)
class InvoicePostingResult:
    """Validated invoice: the journal that was checked and its outcome."""

    journal: JournalPostingRequest
    totals: InvoiceTotals
    posting: PostingResult

    @property
    def requires_approval(self) -> bool:
        return self.posting.requires_approval


def calculate_invoice_totals(invoice: InvoicePostingRequest) -> InvoiceTotals:
    """Revenue and tax totals in the invoice currency."""
    return InvoiceTotals(
        total_revenue=sum((line.line_amount for line in invoice.lines), ZERO),
        total_tax=sum((tax.tax_amount for tax in invoice.tax_lines), ZERO),
    )


def _convert(amount: Decimal, rate: Decimal) -> Decimal:
    return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)


def build_invoice_journal(
    invoice: InvoicePostingRequest,
    base_currency: str = "MYR",
) -> JournalPostingRequest:
    """
    Build the AR journal for ``invoice`` in ``base_currency``.

    Raises:
        InvalidInvoiceError: Missing ids or lines, or non-positive totals.
        InvalidExchangeRateError: Foreign invoice without a positive rate.
    """
    number = invoice.invoice_number
    if not invoice.invoice_id or not invoice.ar_account_id or not invoice.lines:
        raise InvalidInvoiceError(
            number, "Missing required fields: invoice_id, ar_account_id, or lines"
        )

    totals = calculate_invoice_totals(invoice)
    if totals.total_revenue <= ZERO:
        raise InvalidInvoiceError(number, "Invoice revenue must be positive")
    if totals.total_amount <= ZERO:
        raise InvalidInvoiceError(number, "Invoice total amount must be positive")

    fx = validate_fx_policy(base_currency, invoice.currency, invoice.exchange_rate)
    if fx.requires_fx_rate and invoice.exchange_rate is None:
        raise InvalidExchangeRateError(
            fx.base_currency, fx.transaction_currency, invoice.exchange_rate
        )
    rate = fx.exchange_rate

    credits: list[JournalLine] = []
    for line in invoice.lines:
        credits.append(JournalLine(
            account_id=line.revenue_account_id,
            credit=_convert(line.line_amount, rate),
            description=f"Revenue - {line.description}",
            reference=number,
        ))
    for tax in invoice.tax_lines:
        credits.append(JournalLine(
            account_id=tax.tax_account_id,
            credit=_convert(tax.tax_amount, rate),
            description=f"{tax.tax_code} Tax - {number}",
            reference=number,
        ))

    ar_amount = sum((c.credit_amount for c in credits), ZERO)
    ar_line = JournalLine(
        account_id=invoice.ar_account_id,
        debit=ar_amount,
        description=f"AR - {invoice.customer_name} - {number}",
        reference=number,
    )

    return JournalPostingRequest(
        journal_number=f"INV-{number}",
        description=invoice.description or f"Invoice {number} - {invoice.customer_name}",
        journal_date=invoice.invoice_date,
        currency=fx.base_currency,
        lines=(ar_line, *credits),
        context=invoice.context,
    )


async def validate_invoice_posting(
    invoice: InvoicePostingRequest,
    orchestrator: PostingOrchestrator,
) -> InvoicePostingResult:
    """
    Validate an invoice end to end.

    The journal is built in the orchestrator's base currency and then goes
    through every journal gate.

    Raises:
        PostingError: From the invoice gates or the journal pipeline.
    """
    base_currency = orchestrator.settings.base_currency
    try:
        journal = build_invoice_journal(invoice, base_currency)
    except InvalidInvoiceError as exc:
        logger.warning(
            "invoice_rejected",
            extra={"invoice_number": invoice.invoice_number, "reason": exc.reason},
        )
        raise

    totals = calculate_invoice_totals(invoice)
    logger.info(
        "invoice_journal_built",
        extra={
            "invoice_number": invoice.invoice_number,
            "invoice_currency": normalize_currency_code(invoice.currency),
            "line_count": len(journal.lines),
            "total_amount": totals.total_amount,
        },
    )
    posting = await orchestrator.post_journal(journal)
    return InvoicePostingResult(journal=journal, totals=totals, posting=posting)
