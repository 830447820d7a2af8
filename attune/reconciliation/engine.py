"""Reconciliation engine.

Facade over the store, circuit breaker, gap analyzer, interpreter,
state machine, context share guard and event publisher. Each public
method is one participant-facing operation.

Concurrency: there is no lock. Every status change is a compare-and-set
on the direction's version, and every analysis pass claims its slot on
the atomic attempt counter before doing anything else. A caller that
loses either race is handling a duplicate and gets the current view.
"""

from datetime import timedelta
from uuid import UUID

from pydantic import ValidationError
from structlog.contextvars import bound_contextvars

from attune.notifications.models import Notification
from attune.notifications.publisher import EventPublisher
from attune.observability.logging import get_logger
from attune.observability.metrics import (
    ANALYSIS_PASSES,
    DUPLICATE_SUBMISSIONS,
    SHARE_OFFER_OUTCOMES,
    STALLED_ANALYSES_RECOVERED,
)
from attune.providers.llm import (
    ExecutionContext,
    clear_execution_context,
    set_execution_context,
)
from attune.reconciliation import state_machine
from attune.reconciliation.circuit_breaker import MAX_ANALYSIS_PASSES, CircuitBreaker
from attune.reconciliation.exceptions import (
    ContentRequiredError,
    DirectionNotFoundError,
    GapAnalysisUnavailableError,
    InvalidDirectionError,
    InvalidTransitionError,
    NoPendingOfferError,
    ReconciliationInvariantError,
)
from attune.reconciliation.gap_analysis import GapAnalyzerAdapter
from attune.reconciliation.guard import ContextShareGuard
from attune.reconciliation.interpreter import interpret
from attune.reconciliation.models import (
    Action,
    Direction,
    DirectionState,
    DirectionStatus,
    EmpathyAttempt,
    ExchangeStatus,
    ExchangeSummary,
    GapAnalysis,
    GuesserStatus,
    GuesserView,
    PendingOfferView,
    ReadyReason,
    ReconcilerResult,
    ShareDraft,
    ShareOffer,
    ShareOfferStatus,
    SubjectView,
    ValidationFeedback,
    ValidationVerdict,
    utc_now,
)
from attune.reconciliation.projection import guesser_status
from attune.reconciliation.share_draft import ShareDraftUnavailableError, ShareDraftWriter
from attune.reconciliation.store import ReconciliationStore
from attune.reconciliation.summary import (
    ExchangeSummarizer,
    SummaryUnavailableError,
    describe_direction,
)

logger = get_logger(__name__)


def _require_content(content: str, what: str) -> str:
    text = content.strip() if content else ""
    if not text:
        raise ContentRequiredError(f"{what} must not be empty")
    return text


class ReconciliationEngine:
    """Runs the empathy exchange for every direction of every session."""

    def __init__(
        self,
        store: ReconciliationStore,
        gap_analyzer: GapAnalyzerAdapter,
        publisher: EventPublisher,
        summarizer: ExchangeSummarizer | None = None,
        share_drafter: ShareDraftWriter | None = None,
        analysis_stall_seconds: int = 120,
        max_passes: int = MAX_ANALYSIS_PASSES,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Reconciliation persistence
            gap_analyzer: Bounded gap analysis
            publisher: Real-time event delivery
            summarizer: Optional closing-summary writer
            share_drafter: Optional writer of suggested context drafts
            analysis_stall_seconds: Age after which ANALYZING is failed open
            max_passes: Full analysis passes allowed per direction
        """
        self._store = store
        self._gap_analyzer = gap_analyzer
        self._publisher = publisher
        self._summarizer = summarizer
        self._share_drafter = share_drafter
        self._stall_after = timedelta(seconds=analysis_stall_seconds)
        self._breaker = CircuitBreaker(store, max_passes=max_passes)
        self._guard = ContextShareGuard(store)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def record_expressed_content(
        self, session_id: UUID, participant_id: UUID, content: str
    ) -> None:
        """Append something a participant said about their own feelings."""
        text = _require_content(content, "Expressed content")
        await self._store.append_expressed_content(session_id, participant_id, text)
        logger.debug(
            "expressed_content_recorded",
            session_id=str(session_id),
            participant_id=str(participant_id),
            length=len(text),
        )

    async def share_attempt(
        self,
        session_id: UUID,
        guesser_id: UUID,
        subject_id: UUID,
        content: str,
    ) -> GuesserView:
        """Share (or reshare after refinement) an attempt and analyze it.

        A share that arrives while the direction is not waiting for one is
        a duplicate and returns the current view unchanged.
        """
        text = _require_content(content, "Attempt")
        direction = self._direction(session_id, guesser_id, subject_id)

        with bound_contextvars(session_id=str(session_id), direction=direction.key):
            state = await self._get_or_create_direction(direction)

            if state.status not in state_machine.SUBMITTABLE_STATUSES:
                return await self._duplicate_share(state)

            transition = state_machine.submit_attempt(state, text)
            if not await self._commit(transition):
                current = await self._store.get_direction(direction.key)
                return await self._duplicate_share(current or state)

            logger.info("attempt_shared", revision=transition.state.revision)

            attempt = transition.attempt
            if attempt is None:
                raise ReconciliationInvariantError(
                    f"Sharing on {direction.key} produced no attempt record"
                )
            await self._run_analysis_pass(transition.state, attempt)

            current = await self._store.get_direction(direction.key)
            return await self._guesser_view(current or transition.state)

    async def respond_to_offer(
        self,
        session_id: UUID,
        subject_id: UUID,
        guesser_id: UUID,
        accepted: bool,
    ) -> ExchangeStatus:
        """Record the subject's answer to the open share offer."""
        direction = self._direction(session_id, guesser_id, subject_id)

        with bound_contextvars(session_id=str(session_id), direction=direction.key):
            state = await self._require_direction(direction)
            answer = ShareOfferStatus.ACCEPTED if accepted else ShareOfferStatus.DECLINED

            if state.status != DirectionStatus.OFFERING or state.open_offer_id is None:
                if await self._latest_offer_status(direction) == answer:
                    DUPLICATE_SUBMISSIONS.labels(operation="respond_to_offer").inc()
                    return await self.get_exchange_status(session_id, subject_id)
                raise NoPendingOfferError("There is no open share offer to respond to")

            offer = await self._store.get_offer(state.open_offer_id)
            if offer is None:
                raise NoPendingOfferError("There is no open share offer to respond to")

            if accepted:
                transition = state_machine.accept_offer(state, offer)
            else:
                attempt = await self._require_attempt(state)
                transition = state_machine.decline_offer(state, offer, attempt)

            if not await self._commit(transition):
                DUPLICATE_SUBMISSIONS.labels(operation="respond_to_offer").inc()
                return await self.get_exchange_status(session_id, subject_id)

            SHARE_OFFER_OUTCOMES.labels(
                strength=offer.strength.value, outcome=answer.value
            ).inc()
            logger.info(
                "share_offer_answered",
                outcome=answer.value,
                strength=offer.strength.value,
            )
            await self._publish(transition.notifications)
            return await self.get_exchange_status(session_id, subject_id)

    async def submit_context(
        self,
        session_id: UUID,
        subject_id: UUID,
        guesser_id: UUID,
        content: str,
    ) -> ExchangeStatus:
        """Share the subject's additional context after accepting an offer."""
        text = _require_content(content, "Context")
        direction = self._direction(session_id, guesser_id, subject_id)

        with bound_contextvars(session_id=str(session_id), direction=direction.key):
            state = await self._require_direction(direction)

            if state.status != DirectionStatus.CONTEXT_DRAFTING:
                if await self._guard.is_set(direction):
                    DUPLICATE_SUBMISSIONS.labels(operation="submit_context").inc()
                    return await self.get_exchange_status(session_id, subject_id)
                raise InvalidTransitionError(
                    "Context can only be shared after accepting an offer",
                    status=state.status.value,
                )

            offer = (
                await self._store.get_offer(state.open_offer_id)
                if state.open_offer_id
                else None
            )
            if offer is None:
                raise NoPendingOfferError("There is no accepted offer awaiting context")

            # Set before leaving CONTEXT_DRAFTING: a resubmission must see it.
            await self._guard.mark_shared(direction)

            transition = state_machine.share_context(state, offer, text)
            if not await self._commit(transition):
                DUPLICATE_SUBMISSIONS.labels(operation="submit_context").inc()
                return await self.get_exchange_status(session_id, subject_id)

            await self._store.append_expressed_content(session_id, subject_id, text)
            logger.info("context_shared", revision=state.revision)

            await self._publish(transition.notifications)
            return await self.get_exchange_status(session_id, subject_id)

    async def suggest_context_draft(
        self,
        session_id: UUID,
        subject_id: UUID,
        guesser_id: UUID,
    ) -> ShareDraft | None:
        """Draft context the subject could share for the open offer.

        Available while the offer is open or accepted and awaiting
        context. Returns None when drafting is disabled, the offer has no
        suggested focus, or the model call fails.

        Raises:
            DirectionNotFoundError: If the guesser never shared an attempt
            NoPendingOfferError: If no offer is awaiting the subject
        """
        direction = self._direction(session_id, guesser_id, subject_id)

        with bound_contextvars(session_id=str(session_id), direction=direction.key):
            state = await self._require_direction(direction)
            if (
                state.status not in (DirectionStatus.OFFERING, DirectionStatus.CONTEXT_DRAFTING)
                or state.open_offer_id is None
            ):
                raise NoPendingOfferError("There is no share offer to draft context for")

            offer = await self._store.get_offer(state.open_offer_id)
            if offer is None:
                raise NoPendingOfferError("There is no share offer to draft context for")

            if self._share_drafter is None or not offer.suggested_share_focus:
                return None

            expressed = await self._store.get_expressed_content(session_id, subject_id)
            set_execution_context(
                ExecutionContext(session_id=session_id, direction_key=direction.key)
            )
            try:
                text = await self._share_drafter.draft(offer.suggested_share_focus, expressed)
            except ShareDraftUnavailableError as e:
                logger.warning("share_draft_unavailable", error=str(e))
                return None
            finally:
                clear_execution_context()

            logger.info("share_draft_suggested", offer_id=str(offer.offer_id))
            return ShareDraft(
                offer_id=offer.offer_id,
                suggested_share_focus=offer.suggested_share_focus,
                draft=text,
            )

    async def submit_validation_feedback(
        self,
        session_id: UUID,
        subject_id: UUID,
        guesser_id: UUID,
        verdict: ValidationVerdict,
        note: str | None = None,
    ) -> ValidationFeedback:
        """Record the subject's judgment of a revealed attempt.

        Feedback is stored only; it never reopens the refine loop.
        """
        direction = self._direction(session_id, guesser_id, subject_id)

        with bound_contextvars(session_id=str(session_id), direction=direction.key):
            state = await self._require_direction(direction)
            if state.status != DirectionStatus.READY:
                raise InvalidTransitionError(
                    "Feedback can only be given once the attempt is revealed",
                    status=state.status.value,
                )

            feedback = ValidationFeedback(
                direction=direction,
                revision=state.revision,
                verdict=verdict,
                note=note.strip() if note and note.strip() else None,
            )
            await self._store.save_validation_feedback(feedback)
            logger.info(
                "validation_feedback_recorded",
                verdict=verdict.value,
                revision=state.revision,
            )
            return feedback

    async def get_exchange_status(
        self, session_id: UUID, participant_id: UUID
    ) -> ExchangeStatus:
        """Everything one participant may see about the session's exchange.

        Directions stuck in analysis past the stall threshold are failed
        open to READY first.
        """
        states = [
            await self._recover_if_stalled(state)
            for state in await self._store.list_directions(session_id)
        ]

        mine = next((s for s in states if s.direction.guesser_id == participant_id), None)
        theirs = next((s for s in states if s.direction.subject_id == participant_id), None)

        return ExchangeStatus(
            session_id=session_id,
            participant_id=participant_id,
            my_attempt=await self._guesser_view(mine) if mine else None,
            partner_attempt=await self._subject_view(theirs) if theirs else None,
            pending_offer=await self._pending_offer(theirs) if theirs else None,
            ready_to_proceed=self._both_ready(states),
        )

    async def summarize_exchange(self, session_id: UUID) -> ExchangeSummary | None:
        """Closing summary once both directions are READY.

        Returns None while a direction is still open, when summaries are
        disabled, or when the model call fails.
        """
        if self._summarizer is None:
            return None

        states = await self._store.list_directions(session_id)
        if not self._both_ready(states):
            return None

        labels = ("One direction", "The other direction")
        lines = []
        for label, state in zip(labels, sorted(states, key=lambda s: s.key)):
            result = await self._store.get_current_result(state.key)
            lines.append(describe_direction(label, result, state.revision))

        set_execution_context(ExecutionContext(session_id=session_id))
        try:
            return await self._summarizer.summarize(lines)
        except SummaryUnavailableError as e:
            logger.warning(
                "exchange_summary_unavailable",
                session_id=str(session_id),
                error=str(e),
            )
            return None
        finally:
            clear_execution_context()

    # ------------------------------------------------------------------
    # Analysis pass
    # ------------------------------------------------------------------

    async def _run_analysis_pass(
        self, state: DirectionState, attempt: EmpathyAttempt
    ) -> None:
        direction = state.direction
        verdict = await self._breaker.check_and_increment(
            direction, revision=attempt.revision
        )
        if not verdict.claimed:
            DUPLICATE_SUBMISSIONS.labels(operation="analysis_pass").inc()
            logger.info("analysis_slot_already_claimed", attempts=verdict.attempts)
            return

        analysis: GapAnalysis | None = None
        context_shared = False
        analysis_failed = False

        if not verdict.should_skip:
            context_shared = await self._guard.is_set(direction)
            subject_content = await self._store.get_expressed_content(
                direction.session_id, direction.subject_id
            )
            set_execution_context(
                ExecutionContext(session_id=direction.session_id, direction_key=direction.key)
            )
            try:
                analysis = await self._gap_analyzer.analyze(attempt.content, subject_content)
            except GapAnalysisUnavailableError as e:
                analysis_failed = True
                logger.warning("analysis_failed_open", reason=e.reason)
            finally:
                clear_execution_context()

        reason = ReadyReason.NO_GAP
        if analysis_failed:
            action = Action.READY
            reason = ReadyReason.ANALYSIS_UNAVAILABLE
        else:
            action = interpret(verdict, analysis, context_shared)
            if context_shared and action == Action.READY:
                reason = ReadyReason.CONTEXT_SHARED

        await self._guard.assert_can_offer(direction, action)

        result = ReconcilerResult(
            direction=direction,
            revision=attempt.revision,
            attempt_number=verdict.attempts,
            action=action,
            severity=analysis.severity if analysis else None,
            suggested_share_focus=analysis.suggested_share_focus if analysis else None,
            analysis=analysis,
        )
        transition = state_machine.apply_action(
            state,
            attempt,
            action,
            reason=reason,
            suggested_share_focus=result.suggested_share_focus,
            result=result,
        )
        if not await self._commit(transition):
            logger.warning("analysis_outcome_discarded", action=action.value)
            return

        ANALYSIS_PASSES.labels(action=action.value).inc()
        logger.info(
            "analysis_pass_completed",
            action=action.value,
            attempt_number=verdict.attempts,
            severity=result.severity.value if result.severity else None,
        )
        await self._publish(transition.notifications)

    async def _recover_if_stalled(self, state: DirectionState) -> DirectionState:
        if state.status != DirectionStatus.ANALYZING:
            return state
        if utc_now() - state.updated_at < self._stall_after:
            return state

        attempt = await self._store.get_attempt(state.key, state.revision)
        if attempt is None:
            logger.error(
                "stalled_analysis_missing_attempt",
                direction=state.key,
                revision=state.revision,
            )
            return state

        attempts = await self._breaker.attempts(state.direction)
        result = ReconcilerResult(
            direction=state.direction,
            revision=attempt.revision,
            attempt_number=max(attempts, 1),
            action=Action.READY,
        )
        transition = state_machine.apply_action(
            state,
            attempt,
            Action.READY,
            reason=ReadyReason.ANALYSIS_UNAVAILABLE,
            result=result,
        )
        if not await self._commit(transition):
            current = await self._store.get_direction(state.key)
            return current or state

        STALLED_ANALYSES_RECOVERED.inc()
        logger.warning(
            "stalled_analysis_failed_open",
            direction=state.key,
            stalled_since=state.updated_at.isoformat(),
        )
        await self._publish(transition.notifications)
        return transition.state

    # ------------------------------------------------------------------
    # Persistence and publishing
    # ------------------------------------------------------------------

    async def _commit(self, transition: state_machine.Transition) -> bool:
        """Persist a transition; the direction compare-and-set picks the winner.

        A brand-new offer is written before the compare-and-set so that
        open_offer_id never points at a missing record. Every other record,
        the pass result included, is written only by the winner.
        """
        new_offer = transition.offer is not None and transition.offer.status == (
            ShareOfferStatus.OFFERED
        )
        if new_offer:
            await self._store.save_offer(transition.offer)

        won = await self._store.compare_and_set_direction(
            transition.state, transition.expected_version
        )
        if not won:
            logger.info(
                "direction_write_conflict",
                direction=transition.state.key,
                expected_version=transition.expected_version,
            )
            return False

        if transition.attempt is not None:
            await self._store.save_attempt(transition.attempt)
        if transition.offer is not None and not new_offer:
            await self._store.save_offer(transition.offer)
        if transition.result is not None:
            await self._store.save_result(transition.result)
        return True

    async def _publish(self, notifications: list[Notification]) -> None:
        for notification in notifications:
            try:
                await self._publisher.publish(notification)
            except Exception as e:
                logger.error(
                    "notification_publish_failed",
                    event_type=notification.event_type.value,
                    event_id=str(notification.event_id),
                    error=str(e),
                    error_type=type(e).__name__,
                )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def _direction(session_id: UUID, guesser_id: UUID, subject_id: UUID) -> Direction:
        try:
            return Direction(
                session_id=session_id, guesser_id=guesser_id, subject_id=subject_id
            )
        except ValidationError as e:
            raise InvalidDirectionError(
                "A participant cannot be both guesser and subject"
            ) from e

    async def _get_or_create_direction(self, direction: Direction) -> DirectionState:
        state = await self._store.get_direction(direction.key)
        if state is not None:
            return state
        if await self._store.create_direction(DirectionState(direction=direction)):
            logger.info("direction_created")
        state = await self._store.get_direction(direction.key)
        if state is None:
            raise ReconciliationInvariantError(
                f"Direction {direction.key} is missing right after creation"
            )
        return state

    async def _require_direction(self, direction: Direction) -> DirectionState:
        state = await self._store.get_direction(direction.key)
        if state is None:
            raise DirectionNotFoundError(
                "Your partner has not shared an attempt about you yet"
            )
        return state

    async def _require_attempt(self, state: DirectionState) -> EmpathyAttempt:
        attempt = await self._store.get_attempt(state.key, state.revision)
        if attempt is None:
            raise DirectionNotFoundError("The attempt for this direction is missing")
        return attempt

    async def _latest_offer_status(self, direction: Direction) -> ShareOfferStatus | None:
        offers = await self._store.list_offers(direction.key)
        return offers[-1].status if offers else None

    async def _duplicate_share(self, state: DirectionState) -> GuesserView:
        DUPLICATE_SUBMISSIONS.labels(operation="share_attempt").inc()
        logger.info("share_attempt_duplicate", status=state.status.value)
        return await self._guesser_view(state)

    @staticmethod
    def _both_ready(states: list[DirectionState]) -> bool:
        return len(states) == 2 and all(
            s.status == DirectionStatus.READY for s in states
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    async def _guesser_view(self, state: DirectionState) -> GuesserView:
        """The guesser's view, built only from fields a decline cannot change."""
        status = guesser_status(state.status)
        attempt = (
            await self._store.get_attempt(state.key, state.revision)
            if state.revision
            else None
        )

        shared = [o for o in await self._store.list_offers(state.key) if o.shared_content]
        guidance = None
        if status == GuesserStatus.REFINEMENT_AVAILABLE:
            result = await self._store.get_current_result(state.key)
            if result and result.analysis:
                guidance = result.analysis.guidance

        return GuesserView(
            direction=state.direction,
            status=status,
            revision=state.revision,
            attempt_content=attempt.content if attempt else None,
            shared_context=shared[-1].shared_content if shared else None,
            refinement_guidance=guidance,
            moved_forward=(
                state.status == DirectionStatus.READY
                and state.ready_reason == ReadyReason.CIRCUIT_BREAKER
            ),
        )

    async def _subject_view(self, state: DirectionState) -> SubjectView:
        revealed = None
        if state.status == DirectionStatus.READY and state.revision:
            attempt = await self._store.get_attempt(state.key, state.revision)
            revealed = attempt.content if attempt else None

        feedback = await self._store.list_validation_feedback(state.key)
        return SubjectView(
            direction=state.direction,
            status=state.status,
            revision=state.revision,
            revealed_content=revealed,
            validation_verdict=feedback[-1].verdict if feedback else None,
        )

    async def _pending_offer(self, state: DirectionState) -> PendingOfferView | None:
        if state.open_offer_id is None:
            return None
        offer: ShareOffer | None = await self._store.get_offer(state.open_offer_id)
        if offer is None:
            return None
        return PendingOfferView(
            offer_id=offer.offer_id,
            direction=offer.direction,
            strength=offer.strength,
            status=offer.status,
            message=offer.message,
            suggested_share_focus=offer.suggested_share_focus,
        )
