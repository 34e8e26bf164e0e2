"""
Account repository -- the collaborator that loads account snapshots.

Responsibility:
    Defines the AccountRepository protocol consumed by the posting
    orchestrator, plus an in-memory repository for embedding and tests and
    two SQLAlchemy repositories over the Account model (sync and async).

Architecture position:
    Kernel > Services.  The only I/O the posting pipeline performs goes
    through this protocol.  Any I/O timeout is the repository's concern.

Invariants enforced:
    - Lookups are scoped to the actor's tenant and company.
    - Returned snapshots are immutable values; the kernel never writes back.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from gl_kernel.domain.accounts import AccountSnapshot
from gl_kernel.domain.dtos import ActorContext
from gl_kernel.logging_config import get_logger
from gl_kernel.models.account import Account

logger = get_logger("services.account_repository")


class AccountRepository(Protocol):
    """Source of account snapshots for a validation pass."""

    async def get_accounts_info(
        self, context: ActorContext, account_ids: Sequence[str]
    ) -> Mapping[str, AccountSnapshot]:
        """Snapshots for ``account_ids`` keyed by id; unknown ids are absent."""
        ...

    async def get_all_accounts_info(
        self, context: ActorContext
    ) -> Sequence[AccountSnapshot]:
        """The full chart, used to derive parent/child relationships."""
        ...


class InMemoryAccountRepository:
    """
    Repository over a fixed set of snapshots.

    Charts are keyed by (tenant_id, company_id).  Accounts registered without
    a scope are visible to every actor.
    """

    def __init__(self, accounts: Iterable[AccountSnapshot] = ()):
        self._shared: dict[str, AccountSnapshot] = {}
        self._scoped: dict[tuple[str, str], dict[str, AccountSnapshot]] = {}
        for account in accounts:
            self.add(account)

    def add(
        self,
        account: AccountSnapshot,
        *,
        tenant_id: str | None = None,
        company_id: str | None = None,
    ) -> None:
        if tenant_id is None and company_id is None:
            self._shared[account.id] = account
        else:
            self._scoped.setdefault((tenant_id or "", company_id or ""), {})[account.id] = account

    def _chart(self, context: ActorContext) -> dict[str, AccountSnapshot]:
        chart = dict(self._shared)
        chart.update(self._scoped.get((context.tenant_id, context.company_id), {}))
        return chart

    async def get_accounts_info(
        self, context: ActorContext, account_ids: Sequence[str]
    ) -> Mapping[str, AccountSnapshot]:
        chart = self._chart(context)
        return {i: chart[i] for i in account_ids if i in chart}

    async def get_all_accounts_info(
        self, context: ActorContext
    ) -> Sequence[AccountSnapshot]:
        return tuple(self._chart(context).values())


def _parse_ids(account_ids: Sequence[str]) -> dict[UUID, list[str]]:
    """Group the caller's id strings by the UUID they spell."""
    wanted: dict[UUID, list[str]] = {}
    for account_id in account_ids:
        try:
            key = UUID(str(account_id))
        except ValueError:
            # Not a UUID, so it cannot exist in this table
            continue
        wanted.setdefault(key, []).append(account_id)
    return wanted


def _scoped(context: ActorContext):
    return select(Account).where(
        Account.tenant_id == context.tenant_id,
        Account.company_id == context.company_id,
    )


def _keyed_by_request(
    wanted: dict[UUID, list[str]], rows: Sequence[Account]
) -> dict[str, AccountSnapshot]:
    # Keys are the caller's spellings so line lookups hit regardless of case
    by_uuid = {row.id: row.to_snapshot() for row in rows}
    return {
        account_id: by_uuid[key]
        for key, spellings in wanted.items()
        if key in by_uuid
        for account_id in spellings
    }


class SqlAccountRepository:
    """
    Repository over the ``accounts`` table on a synchronous Session.

    Queries run in the calling thread and block the event loop while they
    execute, so use this with one posting per loop (``asyncio.run`` per
    request, scripts, batch jobs).  Services that serve many postings on one
    loop should use AsyncSqlAccountRepository.  The session belongs to the
    caller; this class never commits or writes.
    """

    def __init__(self, session: Session):
        self._session = session

    async def get_accounts_info(
        self, context: ActorContext, account_ids: Sequence[str]
    ) -> Mapping[str, AccountSnapshot]:
        wanted = _parse_ids(account_ids)
        if not wanted:
            return {}
        rows = self._session.scalars(
            _scoped(context).where(Account.id.in_(list(wanted)))
        ).all()
        logger.debug(
            "accounts_loaded",
            extra={"requested": len(account_ids), "found": len(rows)},
        )
        return _keyed_by_request(wanted, rows)

    async def get_all_accounts_info(
        self, context: ActorContext
    ) -> Sequence[AccountSnapshot]:
        rows = self._session.scalars(_scoped(context).order_by(Account.code)).all()
        return tuple(row.to_snapshot() for row in rows)


class AsyncSqlAccountRepository:
    """
    Repository over the ``accounts`` table on an AsyncSession.

    Each query is awaited, so concurrent postings on one event loop do not
    stall each other.  The session belongs to the caller.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_accounts_info(
        self, context: ActorContext, account_ids: Sequence[str]
    ) -> Mapping[str, AccountSnapshot]:
        wanted = _parse_ids(account_ids)
        if not wanted:
            return {}
        result = await self._session.scalars(
            _scoped(context).where(Account.id.in_(list(wanted)))
        )
        rows = result.all()
        logger.debug(
            "accounts_loaded",
            extra={"requested": len(account_ids), "found": len(rows), "driver": "async"},
        )
        return _keyed_by_request(wanted, rows)

    async def get_all_accounts_info(
        self, context: ActorContext
    ) -> Sequence[AccountSnapshot]:
        result = await self._session.scalars(_scoped(context).order_by(Account.code))
        return tuple(row.to_snapshot() for row in result.all())
