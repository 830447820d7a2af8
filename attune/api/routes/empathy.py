"""Empathy exchange endpoints.

The caller is identified by the X-Participant-ID header. For attempts the
caller is the guesser; for offers, context and validation the caller is
the subject of the direction.
"""

from uuid import UUID

from fastapi import APIRouter, status

from attune.api.dependencies import EngineDep, ParticipantDep
from attune.api.models import (
    ExchangeSummaryResponse,
    ExpressedContentRequest,
    OfferResponseRequest,
    ShareAttemptRequest,
    ShareContextRequest,
    ShareDraftRequest,
    ShareDraftResponse,
    ValidationFeedbackRequest,
    ValidationFeedbackResponse,
)
from attune.observability.logging import get_logger
from attune.reconciliation.models import ExchangeStatus, GuesserView

logger = get_logger(__name__)

router = APIRouter(prefix="/sessions/{session_id}")


@router.post(
    "/participants/me/expressed",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def record_expressed_content(
    session_id: UUID,
    request: ExpressedContentRequest,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> None:
    """Record something the caller said about their own feelings."""
    await engine.record_expressed_content(session_id, participant_id, request.content)


@router.post("/empathy/attempts", response_model=GuesserView)
async def share_attempt(
    session_id: UUID,
    request: ShareAttemptRequest,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> GuesserView:
    """Share (or reshare) the caller's attempt to understand the subject.

    A repeated share while the attempt is being processed returns the
    current view instead of starting a new pass.
    """
    return await engine.share_attempt(
        session_id=session_id,
        guesser_id=participant_id,
        subject_id=request.subject_id,
        content=request.content,
    )


@router.post("/empathy/offers/respond", response_model=ExchangeStatus)
async def respond_to_offer(
    session_id: UUID,
    request: OfferResponseRequest,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> ExchangeStatus:
    """Accept or decline the open share offer about the guesser's attempt."""
    return await engine.respond_to_offer(
        session_id=session_id,
        subject_id=participant_id,
        guesser_id=request.guesser_id,
        accepted=request.accepted,
    )


@router.post("/empathy/context", response_model=ExchangeStatus)
async def share_context(
    session_id: UUID,
    request: ShareContextRequest,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> ExchangeStatus:
    """Share additional context after accepting an offer."""
    return await engine.submit_context(
        session_id=session_id,
        subject_id=participant_id,
        guesser_id=request.guesser_id,
        content=request.content,
    )


@router.post("/empathy/context/draft", response_model=ShareDraftResponse)
async def suggest_context_draft(
    session_id: UUID,
    request: ShareDraftRequest,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> ShareDraftResponse:
    """Suggest a message the caller could share for the open offer."""
    draft = await engine.suggest_context_draft(
        session_id=session_id,
        subject_id=participant_id,
        guesser_id=request.guesser_id,
    )
    return ShareDraftResponse(available=draft is not None, draft=draft)

@router.post(
    "/empathy/validation",
    response_model=ValidationFeedbackResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_validation_feedback(
    session_id: UUID,
    request: ValidationFeedbackRequest,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> ValidationFeedbackResponse:
    """Judge how accurately a revealed attempt described the caller."""
    feedback = await engine.submit_validation_feedback(
        session_id=session_id,
        subject_id=participant_id,
        guesser_id=request.guesser_id,
        verdict=request.verdict,
        note=request.note,
    )
    return ValidationFeedbackResponse(
        feedback_id=feedback.feedback_id,
        verdict=feedback.verdict,
        revision=feedback.revision,
        created_at=feedback.created_at,
    )


@router.get("/empathy/status", response_model=ExchangeStatus)
async def get_exchange_status(
    session_id: UUID,
    participant_id: ParticipantDep,
    engine: EngineDep,
) -> ExchangeStatus:
    """The caller's view of both directions and any offer addressed to them."""
    return await engine.get_exchange_status(session_id, participant_id)


@router.get("/empathy/summary", response_model=ExchangeSummaryResponse)
async def get_exchange_summary(
    session_id: UUID,
    _participant_id: ParticipantDep,
    engine: EngineDep,
) -> ExchangeSummaryResponse:
    """Closing summary once both directions are ready."""
    summary = await engine.summarize_exchange(session_id)
    return ExchangeSummaryResponse(available=summary is not None, summary=summary)
