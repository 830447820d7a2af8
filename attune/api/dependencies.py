"""Dependency injection for API routes.

Provides FastAPI dependencies for the store, publisher and engine used by
API endpoints. Instances are built once from settings and can be
overridden for testing.
"""

from typing import Annotated
from uuid import UUID

import redis.asyncio as redis
from fastapi import Depends, Header

from attune.api.exceptions import InvalidRequestError
from attune.config import Settings, get_settings
from attune.notifications import EventPublisher, InMemoryEventPublisher, RedisEventPublisher
from attune.observability.logging import get_logger
from attune.providers.llm import CallKind, create_executor
from attune.reconciliation.engine import ReconciliationEngine
from attune.reconciliation.gap_analysis import (
    GapAnalyzerAdapter,
    LLMGapAnalysisService,
    StaticGapAnalysisService,
)
from attune.reconciliation.share_draft import ShareDraftWriter
from attune.reconciliation.store import ReconciliationStore
from attune.reconciliation.stores import (
    InMemoryReconciliationStore,
    RedisReconciliationStore,
)
from attune.reconciliation.summary import ExchangeSummarizer

logger = get_logger(__name__)

# Client and component instances - created once and reused
_redis_clients: dict[str, redis.Redis] = {}
_store: ReconciliationStore | None = None
_publisher: EventPublisher | None = None
_engine: ReconciliationEngine | None = None


def get_redis_client(url: str) -> redis.Redis:
    """Get the shared Redis client for a URL, creating it on first access."""
    if url not in _redis_clients:
        _redis_clients[url] = redis.from_url(url, decode_responses=True)
        # Log without credentials
        logger.info("redis_client_created", url=url.split("@")[-1])
    return _redis_clients[url]


def get_reconciliation_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReconciliationStore:
    """Get the ReconciliationStore selected by settings.storage.backend."""
    global _store
    if _store is None:
        if settings.storage.backend == "redis":
            _store = RedisReconciliationStore(
                get_redis_client(settings.storage.redis_url),
                key_prefix=settings.storage.key_prefix,
            )
        else:
            _store = InMemoryReconciliationStore()
        logger.info("reconciliation_store_initialized", backend=settings.storage.backend)
    return _store


def get_event_publisher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> EventPublisher:
    """Get the EventPublisher selected by settings.notifications.backend."""
    global _publisher
    if _publisher is None:
        config = settings.notifications
        if config.backend == "redis":
            url = config.redis_url or settings.storage.redis_url
            _publisher = RedisEventPublisher(
                get_redis_client(url), channel_prefix=config.channel_prefix
            )
        else:
            _publisher = InMemoryEventPublisher()
        logger.info("event_publisher_initialized", backend=config.backend)
    return _publisher


def build_gap_analyzer(settings: Settings) -> GapAnalyzerAdapter:
    """Build the gap analyzer from settings.reconciler.gap_analysis."""
    config = settings.reconciler.gap_analysis
    if config.service == "static":
        service = StaticGapAnalysisService([config.static_severity])
    else:
        executor = create_executor(
            model=config.model,
            call_kind=CallKind.GAP_ANALYSIS,
            fallback_models=config.fallback_models,
            timeout=config.timeout_seconds,
        )
        service = LLMGapAnalysisService(executor)
    return GapAnalyzerAdapter(
        service,
        timeout_seconds=config.timeout_seconds,
        max_retries=config.max_retries,
    )


def build_summarizer(settings: Settings) -> ExchangeSummarizer | None:
    """Build the exchange summarizer, or None when summaries are disabled."""
    config = settings.reconciler.summary
    if not config.enabled:
        return None
    executor = create_executor(
        model=config.model,
        call_kind=CallKind.EXCHANGE_SUMMARY,
        timeout=config.timeout_seconds,
    )
    return ExchangeSummarizer(executor)


def build_share_drafter(settings: Settings) -> ShareDraftWriter | None:
    """Build the share draft writer, or None when drafts are disabled."""
    config = settings.reconciler.share_draft
    if not config.enabled:
        return None
    executor = create_executor(
        model=config.model,
        call_kind=CallKind.SHARE_DRAFT,
        timeout=config.timeout_seconds,
    )
    return ShareDraftWriter(executor)


def get_engine(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[ReconciliationStore, Depends(get_reconciliation_store)],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
) -> ReconciliationEngine:
    """Get the ReconciliationEngine instance."""
    global _engine
    if _engine is None:
        _engine = ReconciliationEngine(
            store=store,
            gap_analyzer=build_gap_analyzer(settings),
            publisher=publisher,
            summarizer=build_summarizer(settings),
            share_drafter=build_share_drafter(settings),
            analysis_stall_seconds=settings.reconciler.analysis_stall_seconds,
        )
        logger.info(
            "reconciliation_engine_initialized",
            gap_analysis_service=settings.reconciler.gap_analysis.service,
        )
    return _engine


async def get_participant_id(
    x_participant_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Identify the caller from the X-Participant-ID header."""
    if not x_participant_id:
        raise InvalidRequestError("X-Participant-ID header is required")
    try:
        return UUID(x_participant_id)
    except ValueError as e:
        raise InvalidRequestError("X-Participant-ID must be a UUID") from e


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[ReconciliationStore, Depends(get_reconciliation_store)]
PublisherDep = Annotated[EventPublisher, Depends(get_event_publisher)]
EngineDep = Annotated[ReconciliationEngine, Depends(get_engine)]
ParticipantDep = Annotated[UUID, Depends(get_participant_id)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used for testing to ensure fresh instances.
    Closes connections before resetting.
    """
    global _store, _publisher, _engine

    for client in _redis_clients.values():
        await client.aclose()
    _redis_clients.clear()

    _store = None
    _publisher = None
    _engine = None
    get_settings.cache_clear()
