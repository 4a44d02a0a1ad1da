"""Shared test fixtures for n8n-bootstrap tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from n8n_bootstrap.contracts.config import BootstrapConfig
from n8n_bootstrap.events import EventBus
from tests.fakes.observer import RecordingObserver
from tests.fakes.services import fast_timings


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def config(tmp_path: Path) -> BootstrapConfig:
    """Config rooted in a temp dir with fast timings."""
    return BootstrapConfig(data_dir=tmp_path / "data", timings=fast_timings())
