"""
Clip Loader

Opens stock footage locators as looping, muted video sources. Each source
gets a bounded wait to become playable; sources that never do are skipped.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Sequence

import cv2
import numpy as np

from ..errors import ClipUnavailableError, FatalInputError
from ..utils.logger import LoggerMixin

logger = logging.getLogger(__name__)

DEFAULT_LOAD_TIMEOUT_MS = 3000
DEFAULT_SOURCE_FPS = 30.0


class ClipSource:
    """
    A loop-seekable video source.

    All sources start playing at time zero and loop forever, so the frame
    shown for a clip depends only on how long the render has been running.
    """

    def __init__(self, capture: Any, locator: str = ""):
        self.capture = capture
        self.locator = locator
        self.width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = float(capture.get(cv2.CAP_PROP_FPS)) or DEFAULT_SOURCE_FPS
        self.frame_count = max(0, int(capture.get(cv2.CAP_PROP_FRAME_COUNT)))

        self._position = -1  # index of the frame returned by the last read
        self._last_frame: Optional[np.ndarray] = None

    @property
    def size(self) -> tuple:
        return (self.width, self.height)

    def _frame_index(self, elapsed: float) -> int:
        index = int(max(0.0, elapsed) * self.fps)
        if self.frame_count > 0:
            index %= self.frame_count
        return index

    def _read(self) -> Optional[np.ndarray]:
        ok, frame = self.capture.read()
        return frame if ok and frame is not None else None

    def rewind(self) -> None:
        self.capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
        self._position = -1
        self._last_frame = None

    def frame_at(self, elapsed: float) -> Optional[np.ndarray]:
        """Frame shown at elapsed seconds of looping playback, or None."""
        index = self._frame_index(elapsed)
        if index == self._position and self._last_frame is not None:
            return self._last_frame

        if index != self._position + 1:
            self.capture.set(cv2.CAP_PROP_POS_FRAMES, index)
        frame = self._read()

        if frame is None:
            # Past the real end of a stream that misreported its length;
            # the failed index is an upper bound on the loop length
            if index > 0:
                self.frame_count = index
            self.capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
            frame = self._read()
            index = 0
            if frame is None:
                return self._last_frame

        self._position = index
        self._last_frame = frame
        if self.width <= 0 or self.height <= 0:
            self.height, self.width = frame.shape[:2]
        return frame

    def release(self) -> None:
        try:
            self.capture.release()
        except cv2.error as e:
            logger.debug(f"Releasing {self.locator} failed: {e}")


def open_capture(locator: str, timeout_ms: int = DEFAULT_LOAD_TIMEOUT_MS) -> ClipSource:
    """
    Open a locator and decode its first frame. Blocking; run in a worker thread.

    Raises:
        ClipUnavailableError: The source cannot be opened or decoded
    """
    params = [
        cv2.CAP_PROP_OPEN_TIMEOUT_MSEC, timeout_ms,
        cv2.CAP_PROP_READ_TIMEOUT_MSEC, timeout_ms,
    ]
    capture = cv2.VideoCapture(locator, cv2.CAP_FFMPEG, params)
    if not capture.isOpened():
        capture.release()
        raise ClipUnavailableError(f"Could not open clip: {locator}")

    ok, frame = capture.read()
    if not ok or frame is None:
        capture.release()
        raise ClipUnavailableError(f"Clip has no decodable frames: {locator}")

    source = ClipSource(capture, locator)
    source.rewind()
    return source


class ClipLoader(LoggerMixin):
    """Resolves clip locators into playable sources, one at a time"""

    def __init__(self,
                 timeout_ms: int = DEFAULT_LOAD_TIMEOUT_MS,
                 opener: Optional[Callable[[str, int], ClipSource]] = None):
        self.timeout_ms = timeout_ms
        self.opener = opener or open_capture

    async def load(self, locators: Sequence[str]) -> List[ClipSource]:
        """
        Open every locator in order, skipping those that fail or time out.

        Raises:
            FatalInputError: No locator produced a usable source
        """
        sources: List[ClipSource] = []
        for locator in locators:
            source = await self._load_one(locator)
            if source is not None:
                sources.append(source)

        if not sources:
            self.logger.error(f"None of {len(locators)} clips could be loaded")
            raise FatalInputError("Failed to load background footage.")

        self.logger.info(f"Loaded {len(sources)}/{len(locators)} clips")
        return sources

    async def _load_one(self, locator: str) -> Optional[ClipSource]:
        task = asyncio.ensure_future(asyncio.to_thread(self.opener, locator, self.timeout_ms))
        done, _ = await asyncio.wait({task}, timeout=self.timeout_ms / 1000.0)

        if task not in done:
            self.logger.warning(f"Clip not ready after {self.timeout_ms}ms, skipping: {locator}")
            task.add_done_callback(_release_late_source)
            return None

        try:
            return task.result()
        except (ClipUnavailableError, cv2.error, OSError) as e:
            self.logger.warning(f"Skipping clip {locator}: {e}")
            return None


def _release_late_source(task: asyncio.Future) -> None:
    """Close a source that finished opening after its wait had expired"""
    if task.cancelled() or task.exception() is not None:
        return
    task.result().release()


def release_all(sources: Sequence[ClipSource]) -> None:
    for source in sources:
        source.release()
