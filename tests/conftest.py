"""Shared fixtures: a small render config, fake OpenCV captures and an in-memory encoder sink."""

from typing import List

import cv2
import numpy as np
import pytest

from shorts_engine.content_generation.content_models import Mood, Script
from shorts_engine.errors import ClipUnavailableError
from shorts_engine.media_generation.clip_loader import ClipLoader, ClipSource
from shorts_engine.utils.config import (
    CaptionConfig, Config, MusicConfig, PathsConfig, RenderConfig
)
from shorts_engine.video_assembly.encoder import EncoderSink

SAMPLE_RATE = 24000


class FakeCapture:
    """Stands in for cv2.VideoCapture; frame n is filled with a gray level derived from n"""

    def __init__(self, width=64, height=36, fps=10.0, frame_count=5, readable=True):
        self.width = width
        self.height = height
        self.fps = fps
        self.frame_count = frame_count
        self.readable = readable
        self.position = 0
        self.released = False
        self.seeks = 0

    def isOpened(self):
        return True

    def get(self, prop):
        values = {
            cv2.CAP_PROP_FRAME_WIDTH: self.width,
            cv2.CAP_PROP_FRAME_HEIGHT: self.height,
            cv2.CAP_PROP_FPS: self.fps,
            cv2.CAP_PROP_FRAME_COUNT: self.frame_count,
            cv2.CAP_PROP_POS_FRAMES: self.position,
        }
        return values.get(prop, 0)

    def set(self, prop, value):
        if prop == cv2.CAP_PROP_POS_FRAMES:
            self.position = int(value)
            self.seeks += 1
        return True

    def read(self):
        if not self.readable or self.position >= self.frame_count:
            return False, None
        frame = np.full((self.height, self.width, 3), (self.position * 40 + 20) % 256, dtype=np.uint8)
        self.position += 1
        return True, frame

    def release(self):
        self.released = True


class FakeSink(EncoderSink):
    """Collects frames and audio in memory"""

    def __init__(self):
        self.opened = False
        self.finalized = False
        self.aborted = False
        self.frames: List[np.ndarray] = []
        self.audio: List[np.ndarray] = []

    async def open(self):
        self.opened = True

    async def write(self, frame, audio):
        self.frames.append(frame.copy())
        self.audio.append(np.asarray(audio))

    async def write_audio(self, audio):
        self.audio.append(np.asarray(audio))

    async def finalize(self):
        self.finalized = True
        return b"fake-video"

    async def abort(self):
        self.aborted = True

    @property
    def audio_samples(self) -> int:
        return sum(len(chunk) for chunk in self.audio)


def fake_opener(locator: str, timeout_ms: int) -> ClipSource:
    """Opens any locator except those starting with 'bad'"""
    if locator.startswith("bad"):
        raise ClipUnavailableError(f"Could not open clip: {locator}")
    return ClipSource(FakeCapture(), locator)


def make_pcm(seconds: float, sample_rate: int = SAMPLE_RATE, amplitude: float = 0.3) -> bytes:
    """Sine tone as raw s16le PCM"""
    t = np.arange(int(round(seconds * sample_rate))) / sample_rate
    samples = (np.sin(2 * np.pi * 220.0 * t) * amplitude * 32767).astype('<i2')
    return samples.tobytes()


@pytest.fixture
def small_config(tmp_path):
    return Config(
        render=RenderConfig(width=108, height=192, fps=10, progress_every_frames=5),
        captions=CaptionConfig(font_size=24, stroke_width=3, glitch_offset=2),
        music=MusicConfig(enabled=False),
        paths=PathsConfig(output=str(tmp_path / "output"), logs=str(tmp_path / "logs")),
    )


@pytest.fixture
def script():
    return Script(
        topic="space",
        title="The Silent Planet",
        description="A fact about space",
        hook="Stop! You won't believe this.",
        body="Space is completely silent.",
        cta="Subscribe for more.",
        tags=["space", "facts"],
        visualKeywords=["space", "stars"],
        mood=Mood.DRAMATIC,
    )


@pytest.fixture
def fake_clip_loader():
    return ClipLoader(timeout_ms=1000, opener=fake_opener)
