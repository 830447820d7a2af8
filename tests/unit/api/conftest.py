"""Fixtures for API tests: the real app wired to in-memory components."""

from collections.abc import AsyncIterator
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from attune.api.app import create_app
from attune.api.dependencies import (
    get_engine,
    get_event_publisher,
    get_reconciliation_store,
    reset_dependencies,
)
from attune.notifications import InMemoryEventPublisher
from attune.providers.llm import CallKind, LLMExecutor
from attune.reconciliation.engine import ReconciliationEngine
from attune.reconciliation.gap_analysis import GapAnalyzerAdapter, StaticGapAnalysisService
from attune.reconciliation.share_draft import ShareDraftWriter
from attune.reconciliation.stores import InMemoryReconciliationStore


@pytest.fixture
def store() -> InMemoryReconciliationStore:
    return InMemoryReconciliationStore()


@pytest.fixture
def publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def gap_service() -> StaticGapAnalysisService:
    """Scripted service; test classes override this fixture for other verdicts."""
    return StaticGapAnalysisService(["none"])


@pytest.fixture
def engine(
    store: InMemoryReconciliationStore,
    publisher: InMemoryEventPublisher,
    gap_service: StaticGapAnalysisService,
) -> ReconciliationEngine:
    return ReconciliationEngine(
        store=store,
        gap_analyzer=GapAnalyzerAdapter(gap_service, timeout_seconds=1.0),
        publisher=publisher,
        share_drafter=ShareDraftWriter(
            LLMExecutor(
                model="mock/share-draft",
                call_kind=CallKind.SHARE_DRAFT,
                mock_response="I felt left out of the plans.",
            )
        ),
    )


@pytest.fixture
async def app(
    store: InMemoryReconciliationStore,
    publisher: InMemoryEventPublisher,
    engine: ReconciliationEngine,
) -> AsyncIterator[FastAPI]:
    await reset_dependencies()

    app = create_app()
    app.dependency_overrides[get_reconciliation_store] = lambda: store
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_engine] = lambda: engine

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def session_id() -> UUID:
    return uuid4()


@pytest.fixture
def guesser_id() -> UUID:
    return uuid4()


@pytest.fixture
def subject_id() -> UUID:
    return uuid4()
