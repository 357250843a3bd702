"""Tests for hfsupload.transfer.estimator module."""

from __future__ import annotations

import threading

import pytest

from hfsupload.models.upload import QueueEntry, UploadState
from hfsupload.transfer.estimator import TransferEstimator


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state(make_item) -> UploadState:
    state = UploadState()
    state.queue.append(QueueEntry("/docs/", [make_item("a", size=1000), make_item("b", size=500)]))
    return state


@pytest.fixture
def estimator(state: UploadState, clock: FakeClock) -> TransferEstimator:
    return TransferEstimator(state, threading.RLock(), clock=clock)


class TestTick:
    """Tests for TransferEstimator.tick."""

    def test_speed_and_eta(self, estimator, state, clock):
        state.partial_bytes = 500
        estimator.add_bytes(500)
        clock.now = 5.0

        estimator.tick()

        assert state.speed == 100.0
        assert state.eta_seconds == 10

    def test_short_window_accumulates_once_speed_known(self, estimator, state, clock):
        estimator.add_bytes(500)
        clock.now = 5.0
        estimator.tick()

        estimator.add_bytes(400)
        clock.now = 7.0
        estimator.tick()
        assert state.speed == 100.0

        estimator.add_bytes(200)
        clock.now = 8.0
        estimator.tick()
        assert state.speed == 200.0

    def test_short_window_sampled_when_speed_unknown(self, estimator, state, clock):
        estimator.add_bytes(100)
        clock.now = 1.0

        estimator.tick()

        assert state.speed == 100.0

    def test_zero_speed_gives_zero_eta(self, estimator, state, clock):
        clock.now = 5.0
        estimator.tick()

        assert state.speed == 0.0
        assert state.eta_seconds == 0

    def test_no_time_passed(self, estimator, state):
        estimator.add_bytes(100)
        estimator.tick()

        assert state.speed == 0.0

    def test_eta_rounds(self, estimator, state, clock):
        estimator.add_bytes(400)
        clock.now = 3.0

        estimator.tick()

        assert state.eta_seconds == round(1500 / (400 / 3.0))


class TestThread:
    """Tests for the sampling thread."""

    def test_start_stop(self, state):
        estimator = TransferEstimator(state, threading.RLock(), interval=0.01)
        estimator.start()
        estimator.start()
        estimator.stop()

        assert estimator._thread is None
