"""Frame clocks and cooperative cancellation for the render loop.

The render loop never reads the wall clock directly: it asks a clock for
`now()` and awaits `next_frame()` between frames. SteppedClock advances by
exactly one frame interval per tick, which makes renders deterministic and
faster than real time. RealtimeClock paces frames against the monotonic
clock, for previews that must play at display rate.
"""

import asyncio
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable


class FrameClock(ABC):

    def __init__(self, fps: int):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.fps = fps
        self.frame_interval = 1.0 / fps

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds"""

    @abstractmethod
    async def next_frame(self) -> None:
        """Suspend until the next frame is due"""


class SteppedClock(FrameClock):
    """Simulated clock: one tick per frame, no real waiting"""

    def __init__(self, fps: int, start: float = 0.0):
        super().__init__(fps)
        self.start = start
        self.ticks = 0

    def now(self) -> float:
        # Multiply rather than accumulate so frame times never drift
        return self.start + self.ticks / self.fps

    async def next_frame(self) -> None:
        self.ticks += 1
        await asyncio.sleep(0)


class RealtimeClock(FrameClock):
    """Monotonic wall clock, ticking at the frame rate"""

    def __init__(self, fps: int, time_source: Callable[[], float] = time.monotonic):
        super().__init__(fps)
        self.time_source = time_source
        self._origin = time_source()
        self._frames = 0

    def now(self) -> float:
        return self.time_source()

    async def next_frame(self) -> None:
        self._frames += 1
        due = self._origin + self._frames * self.frame_interval
        delay = due - self.time_source()
        if delay < 0:
            # Fell behind; resync instead of bursting to catch up
            self._origin = self.time_source()
            self._frames = 0
            delay = 0.0
        await asyncio.sleep(delay)


class CancellationToken:
    """Thread-safe flag checked by the render loop once per frame"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
