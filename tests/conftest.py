"""
Shared pytest fixtures for the Assistant-Lite test suite.

Provides reusable fixtures for:
- In-memory SQLite engines with the full schema
- Seeded demo channels (C1, C2)
- A fixed clock and explicit assistant settings
- A ready AssistantLiteService
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from config import (
    DEFAULT_RISK_KEYWORDS,
    DEFAULT_VIDEO_KEYWORDS,
    AssistantConfig,
    _split_keywords,
)
from db.seed import create_tables, seed_demo_channel
from db.session import build_engine, build_session_factory
from executor.clock import FixedClock
from executor.execute import AssistantLiteService
from executor.planner import ExecutionPlanner

FIXED_NOW = datetime(2026, 2, 16, 10, 0, 0, tzinfo=timezone.utc)


def make_seeded_session_factory():
    """Fresh in-memory database with channels C1 and C2 seeded."""
    engine = build_engine("sqlite://", echo=False)
    create_tables(engine)
    session_factory = build_session_factory(engine)
    seed_demo_channel(session_factory, channel_id="C1", name="Channel One")
    seed_demo_channel(session_factory, channel_id="C2", name="Channel Two")
    return engine, session_factory


def count_rows(session_factory, model) -> int:
    session = session_factory()
    try:
        return session.scalar(select(func.count()).select_from(model))
    finally:
        session.close()


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Assistant settings with the built-in defaults, independent of the environment."""
    return AssistantConfig(
        video_keywords=_split_keywords(DEFAULT_VIDEO_KEYWORDS),
        risk_keywords=_split_keywords(DEFAULT_RISK_KEYWORDS),
        high_confidence_min_evidence=5,
        medium_confidence_min_evidence=3,
        top_videos_limit=3,
        anomalies_limit=3,
        default_range_days=30,
        thousands_separator=",",
    )


@pytest.fixture
def planner(settings):
    """Fresh ExecutionPlanner instance."""
    return ExecutionPlanner(settings)


@pytest.fixture
def fixed_clock():
    return FixedClock(FIXED_NOW)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def session_factory():
    """Seeded in-memory database, one per test."""
    engine, factory = make_seeded_session_factory()
    yield factory
    engine.dispose()


@pytest.fixture
def service(session_factory, fixed_clock, settings):
    """AssistantLiteService over the seeded database."""
    return AssistantLiteService(
        session_factory=session_factory,
        clock=fixed_clock,
        settings=settings,
    )
