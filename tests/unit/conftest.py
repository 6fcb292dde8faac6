"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from movedao.reads.core import BatchConfig, GateConfig, ReadLayerConfig, RetryConfig
from tests.unit.fakes import FakeClock, RecordingSleep


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fast_config() -> ReadLayerConfig:
    """Config with every delay disabled."""
    return ReadLayerConfig(
        gate=GateConfig(min_spacing=0.0),
        retry=RetryConfig(base_delay=0.0, cap_delay=0.0),
        batch=BatchConfig(inter_batch_delay=0.0),
    )
