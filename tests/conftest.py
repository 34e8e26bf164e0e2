"""
Pytest fixtures for the GL kernel test suite.

Provides:
- A small chart of accounts covering every account type, a control
  account, an inactive account, a foreign-currency account and a
  parent/child pair
- Actor contexts per role
- In-memory account repository and deterministic clock
- An in-memory SQLite session for the SQL repository
- Structured log capture
"""

import asyncio
import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from gl_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from gl_kernel.domain.accounts import AccountSnapshot, AccountType
from gl_kernel.domain.clock import DeterministicClock
from gl_kernel.domain.dtos import ActorContext, JournalLine, JournalPostingRequest
from gl_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from gl_kernel.services.account_repository import InMemoryAccountRepository
from gl_kernel.services.posting_orchestrator import PostingOrchestrator

TENANT_ID = "tenant-001"
COMPANY_ID = "company-001"
USER_ID = "user-001"

# Clock "today" is 2024-06-30; journals default to mid-month
TODAY = date(2024, 6, 30)
JOURNAL_DATE = date(2024, 6, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture gl_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ...):
            ...
            logs = captured_logs()
            assert any(r["message"] == "journal_posting_validated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("gl_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Chart of accounts
# =============================================================================


def _account(account_id, code, name, account_type, currency="MYR", **kwargs):
    return AccountSnapshot(
        id=account_id,
        code=code,
        name=name,
        account_type=account_type,
        currency=currency,
        **kwargs,
    )


@pytest.fixture
def chart() -> list[AccountSnapshot]:
    return [
        _account("acc-control-001", "1000", "Assets", AccountType.ASSET, level=0),
        _account("acc-asset-001", "1100", "Cash at Bank", AccountType.ASSET),
        _account("acc-usd-001", "1150", "USD Bank", AccountType.ASSET, currency="USD"),
        _account("acc-ar-001", "1200", "Accounts Receivable", AccountType.ASSET),
        _account("acc-parent-001", "1300", "Inventory", AccountType.ASSET),
        _account(
            "acc-child-001", "1310", "Raw Materials", AccountType.ASSET,
            level=2, parent_id="acc-parent-001",
        ),
        _account("acc-inactive-001", "1900", "Closed Bank", AccountType.ASSET, is_active=False),
        _account("acc-liability-001", "2100", "Sales Tax Payable", AccountType.LIABILITY),
        _account("acc-equity-001", "3000", "Owner Equity", AccountType.EQUITY),
        _account("acc-revenue-001", "4000", "Sales Revenue", AccountType.REVENUE),
        _account(
            "acc-usd-revenue-001", "4100", "Export Revenue", AccountType.REVENUE,
            currency="USD",
        ),
        _account("acc-expense-001", "5000", "Office Expense", AccountType.EXPENSE),
    ]


@pytest.fixture
def accounts_by_id(chart) -> dict[str, AccountSnapshot]:
    return {a.id: a for a in chart}


@pytest.fixture
def repository(chart) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(chart)


# =============================================================================
# Actors, clock, orchestrator
# =============================================================================


@pytest.fixture
def make_context():
    def _make(role: str = "admin", **overrides) -> ActorContext:
        fields = {
            "tenant_id": TENANT_ID,
            "company_id": COMPANY_ID,
            "user_id": USER_ID,
            "role": role,
        }
        fields.update(overrides)
        return ActorContext(**fields)

    return _make


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 6, 30, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def orchestrator(repository, clock) -> PostingOrchestrator:
    return PostingOrchestrator(repository, clock=clock)


@pytest.fixture
def make_request(make_context):
    """
    Build a JournalPostingRequest.

    Defaults to a balanced MYR journal: Dr Cash 100 / Cr Sales Revenue 100,
    posted by an admin.
    """

    def _make(
        lines=None,
        *,
        role: str = "admin",
        currency: str = "MYR",
        journal_date: date = JOURNAL_DATE,
        journal_number: str = "JE-2024-0001",
        exchange_rate=None,
        context: ActorContext | None = None,
    ) -> JournalPostingRequest:
        if lines is None:
            lines = [
                JournalLine("acc-asset-001", debit=Decimal("100.00")),
                JournalLine("acc-revenue-001", credit=Decimal("100.00")),
            ]
        return JournalPostingRequest(
            journal_number=journal_number,
            description="Test journal",
            journal_date=journal_date,
            currency=currency,
            lines=lines,
            context=context or make_context(role),
            exchange_rate=exchange_rate,
        )

    return _make


@pytest.fixture
def run():
    """Drive a coroutine to completion."""
    return asyncio.run


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite schema per test."""
    init_engine_from_url("sqlite:///:memory:")
    create_tables()
    session = get_session()
    try:
        yield session
    finally:
        session.close()
        drop_tables()
        reset_engine()
