"""Shared test fixtures for all test modules."""

from collections.abc import Callable

import pytest

from promscope.core.models import FetchResult, Observation, ObservationKind, Snapshot
from tests.helpers import EXPOSITION


@pytest.fixture
def exposition() -> bytes:
    """A payload covering every supported family type plus an untyped one."""
    return EXPOSITION.encode()


@pytest.fixture
def ok_response(exposition: bytes) -> FetchResult:
    """A 200 response carrying the shared exposition payload."""
    return FetchResult(
        status=200,
        body=exposition,
        headers={"Content-Type": "text/plain; version=0.0.4; charset=utf-8"},
    )


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    """Clock starting at 1702300000.0 and advancing one second per call."""
    state = {"now": 1702300000.0}

    def _clock() -> float:
        now = state["now"]
        state["now"] += 1.0
        return now

    return _clock


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    """Factory for gauge snapshots: make_snapshot(10.0, a=1, b=2)."""

    def _make(
        timestamp: float = 0.0,
        kind: ObservationKind = ObservationKind.GAUGE,
        **values: float,
    ) -> Snapshot:
        return {
            name: Observation(name, kind, timestamp, float(value))
            for name, value in values.items()
        }

    return _make
