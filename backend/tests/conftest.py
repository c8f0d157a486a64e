"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from recall.repositories import reset_learning_day_logs, reset_state_stores
from recall.services import reset_item_locks, reset_session_store
from recall.srs import SchedulerConfig, get_scheduler_config


@pytest.fixture(autouse=True)
def _isolate_globals(monkeypatch):
    """Fresh config cache, stores and sessions for every test."""
    for name in SchedulerConfig.model_fields:
        monkeypatch.delenv("SRS_" + name.upper(), raising=False)
    get_scheduler_config.cache_clear()
    reset_state_stores()
    reset_learning_day_logs()
    reset_session_store()
    reset_item_locks()
    yield
    get_scheduler_config.cache_clear()
    reset_state_stores()
    reset_learning_day_logs()
    reset_session_store()
    reset_item_locks()


@pytest.fixture
def t0() -> datetime:
    return datetime(2025, 12, 13, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def config() -> SchedulerConfig:
    return SchedulerConfig()
