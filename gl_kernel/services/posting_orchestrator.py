"""
Posting Orchestrator - Runs a journal through every posting gate.

The orchestrator composes, in fixed order:
- SoD gate (authorization policy)
- Structural line validation
- Balance validation
- Journal currency and date gates
- Account snapshot fetch (the only await in the pipeline)
- Chart-of-accounts validation
- FX policy resolution (journal currency != base currency)

It performs no persistence. A PostingResult means "safe to persist"; the
caller owns the write (and its uniqueness / atomicity guarantees). Any gate
failure propagates immediately as a PostingError subclass; nothing is
written before every gate has passed, so retrying with corrected input is
always safe.
"""

import time
from uuid import uuid4

from gl_kernel.domain.accounts import AccountSnapshotSet
from gl_kernel.domain.balance_validator import validate_balanced
from gl_kernel.domain.clock import Clock, SystemClock
from gl_kernel.domain.coa_validator import validate_coa_flags
from gl_kernel.domain.dtos import (
    ActorContext,
    JournalPostingRequest,
    PostingResult,
)
from gl_kernel.domain.fx_policy import normalize_currency_code, validate_fx_policy
from gl_kernel.domain.lifecycle import PostingStage, PostingStageTracker
from gl_kernel.domain.line_validator import validate_journal_lines
from gl_kernel.domain.settings import PostingSettings
from gl_kernel.domain.sod import (
    AuthorizationPolicy,
    DEFAULT_AUTHORIZATION_POLICY,
    PostingAction,
    validate_sod_compliance,
)
from gl_kernel.exceptions import FutureJournalDateError, PostingError
from gl_kernel.logging_config import LogContext, get_logger
from gl_kernel.services.account_repository import AccountRepository

logger = get_logger("services.posting_orchestrator")


class PostingOrchestrator:
    """
    Orchestrates the journal posting validation pipeline.

    Holds only immutable collaborators and settings; every call builds its
    own AccountSnapshotSet, so one orchestrator may serve concurrent
    requests.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        authorization_policy: AuthorizationPolicy | None = None,
        settings: PostingSettings | None = None,
        clock: Clock | None = None,
    ):
        self._accounts = account_repository
        self._policy = authorization_policy or DEFAULT_AUTHORIZATION_POLICY
        self._settings = settings or PostingSettings()
        self._clock = clock or SystemClock()

    @property
    def settings(self) -> PostingSettings:
        return self._settings

    async def post_journal(self, request: JournalPostingRequest) -> PostingResult:
        """
        Validate a journal posting request.

        Returns:
            PostingResult with totals, approval requirement and warnings.

        Raises:
            PostingError: The first failing gate's typed error.
        """
        context = request.context
        with LogContext.bind(
            correlation_id=str(uuid4()),
            tenant_id=context.tenant_id,
            company_id=context.company_id,
            user_id=context.user_id,
            journal_number=request.journal_number,
        ):
            logger.info(
                "journal_posting_started",
                extra={
                    "role": context.role,
                    "line_count": len(request.lines),
                    "currency": request.currency,
                    "journal_date": request.journal_date,
                },
            )
            t0 = time.monotonic()
            tracker = PostingStageTracker()
            try:
                result = await self._run_gates(request, tracker)
            except PostingError as exc:
                failed_in = tracker.reject()
                logger.warning(
                    "journal_posting_rejected",
                    extra={
                        "code": exc.code,
                        "failed_stage": failed_in,
                        "details": exc.details,
                    },
                )
                raise

            logger.info(
                "journal_posting_validated",
                extra={
                    "stage_path": list(tracker.path),
                    "total_debit": result.total_debit,
                    "total_credit": result.total_credit,
                    "requires_approval": result.requires_approval,
                    "warning_count": len(result.warnings),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    async def _run_gates(
        self,
        request: JournalPostingRequest,
        tracker: PostingStageTracker,
    ) -> PostingResult:
        settings = self._settings

        # Fail fast on authorization before touching the lines
        sod = validate_sod_compliance(
            request.context, self._policy, action=PostingAction.JOURNAL_POST
        )

        validate_journal_lines(request.lines, max_lines=settings.max_lines)
        self._advance(tracker, PostingStage.STRUCTURALLY_VALID)

        balance = validate_balanced(request.lines, tolerance=settings.balance_tolerance)
        journal_currency = normalize_currency_code(request.currency, "journal")
        self._check_journal_date(request)
        self._advance(tracker, PostingStage.BALANCED)

        snapshot = await self._load_snapshot(request.context, request.account_ids)

        needs_fx = journal_currency != settings.base_currency
        permitted = (
            (settings.base_currency,) if needs_fx and settings.permit_fx_conversion else ()
        )
        coa = validate_coa_flags(
            request.lines,
            journal_currency,
            snapshot.accounts,
            snapshot.hierarchy,
            permitted_currencies=permitted,
        )
        self._advance(tracker, PostingStage.ACCOUNTS_VALID)

        fx = None
        if needs_fx:
            fx = validate_fx_policy(
                settings.base_currency, journal_currency, request.exchange_rate
            )
            self._advance(tracker, PostingStage.FX_RESOLVED)

        approver_roles = (
            self._policy.approver_roles(PostingAction.JOURNAL_POST)
            if sod.requires_approval
            else ()
        )
        self._advance(tracker, PostingStage.VALIDATED)
        return PostingResult(
            journal_number=request.journal_number,
            total_debit=balance.total_debit,
            total_credit=balance.total_credit,
            requires_approval=sod.requires_approval,
            approver_roles=approver_roles,
            warnings=coa.warnings,
            fx=fx,
        )

    def _advance(self, tracker: PostingStageTracker, stage: PostingStage) -> None:
        tracker.advance(stage)
        logger.debug("journal_posting_stage", extra={"stage": stage})

    def _check_journal_date(self, request: JournalPostingRequest) -> None:
        if not self._settings.reject_future_dates:
            return
        today = self._clock.today()
        if request.journal_date > today:
            raise FutureJournalDateError(
                journal_date=request.journal_date.isoformat(),
                today=today.isoformat(),
            )

    async def _load_snapshot(
        self, context: ActorContext, account_ids: tuple[str, ...]
    ) -> AccountSnapshotSet:
        accounts = await self._accounts.get_accounts_info(context, account_ids)
        all_accounts = await self._accounts.get_all_accounts_info(context)
        return AccountSnapshotSet.build(accounts, all_accounts)


async def post_journal(
    request: JournalPostingRequest,
    account_repository: AccountRepository,
    *,
    authorization_policy: AuthorizationPolicy | None = None,
    settings: PostingSettings | None = None,
    clock: Clock | None = None,
) -> PostingResult:
    """One-shot convenience wrapper around PostingOrchestrator.post_journal."""
    orchestrator = PostingOrchestrator(
        account_repository,
        authorization_policy=authorization_policy,
        settings=settings,
        clock=clock,
    )
    return await orchestrator.post_journal(request)
