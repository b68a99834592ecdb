"""Tests for the render loop clocks and cancellation flag."""

import asyncio
import threading

import pytest

from shorts_engine.video_assembly import frame_clock
from shorts_engine.video_assembly.frame_clock import CancellationToken, RealtimeClock, SteppedClock


class FakeTime:
    """Manually advanced monotonic clock"""

    def __init__(self, start=100.0):
        self.value = start

    def __call__(self):
        return self.value

    def advance(self, seconds):
        self.value += seconds


@pytest.fixture
def fake_time(monkeypatch):
    clock = FakeTime()
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)
        clock.advance(delay)

    monkeypatch.setattr(frame_clock.asyncio, "sleep", fake_sleep)
    clock.sleeps = sleeps
    return clock


def test_realtime_clock_waits_one_interval_per_frame(fake_time):
    clock = RealtimeClock(10, time_source=fake_time)

    async def run():
        for _ in range(3):
            await clock.next_frame()

    asyncio.run(run())

    assert fake_time.sleeps == [pytest.approx(0.1)] * 3
    assert clock.now() == pytest.approx(100.3)


def test_realtime_clock_absorbs_slow_frame_work(fake_time):
    clock = RealtimeClock(10, time_source=fake_time)

    async def run():
        fake_time.advance(0.04)  # frame work shorter than the interval
        await clock.next_frame()

    asyncio.run(run())

    assert fake_time.sleeps == [pytest.approx(0.06)]


def test_realtime_clock_resyncs_after_falling_behind(fake_time):
    clock = RealtimeClock(10, time_source=fake_time)

    async def run():
        await clock.next_frame()
        fake_time.advance(0.5)  # a stall several frames long
        await clock.next_frame()
        await clock.next_frame()

    asyncio.run(run())

    # No burst of zero-delay frames to catch up: one immediate frame, then normal pacing
    assert fake_time.sleeps == [pytest.approx(0.1), 0.0, pytest.approx(0.1)]


def test_stepped_clock_advances_exactly_one_frame():
    clock = SteppedClock(30)

    async def run():
        for _ in range(90):
            await clock.next_frame()

    asyncio.run(run())

    assert clock.ticks == 90
    assert clock.now() == 3.0


@pytest.mark.parametrize("clock_type", [SteppedClock, RealtimeClock])
def test_fps_must_be_positive(clock_type):
    with pytest.raises(ValueError):
        clock_type(0)


def test_cancellation_from_another_thread():
    token = CancellationToken()
    assert not token.cancelled

    worker = threading.Thread(target=token.cancel)
    worker.start()
    worker.join()

    assert token.cancelled
