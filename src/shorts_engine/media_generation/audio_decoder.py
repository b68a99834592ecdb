"""Narration audio decoding

The narration synthesizer returns headerless 16-bit little-endian mono PCM.
The decoded duration is the master clock bound for the whole render.
"""

import logging
from dataclasses import dataclass

import numpy as np

from ..errors import FatalInputError

logger = logging.getLogger(__name__)

NARRATION_SAMPLE_RATE = 24000
PCM_SCALE = 32768.0


@dataclass(frozen=True)
class NarrationAudio:
    """Mono float32 samples in [-1, 1) plus their sample rate"""
    samples: np.ndarray
    sample_rate: int

    @property
    def sample_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        return self.sample_count / self.sample_rate


def decode_pcm(buffer: bytes, sample_rate: int = NARRATION_SAMPLE_RATE) -> NarrationAudio:
    """
    Decode raw s16le PCM into normalized float samples.

    A dangling odd byte is dropped. Empty audio means synthesis failed
    upstream and is fatal for the render.
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")

    usable = len(buffer) - (len(buffer) % 2)
    pcm = np.frombuffer(buffer[:usable], dtype='<i2')
    samples = pcm.astype(np.float32) / PCM_SCALE
    samples.setflags(write=False)

    audio = NarrationAudio(samples=samples, sample_rate=sample_rate)
    if audio.sample_count == 0 or audio.duration <= 0:
        logger.error("Narration buffer decoded to zero samples")
        raise FatalInputError("Voice generation failed. Zero duration.")

    logger.debug(f"Decoded narration: {audio.sample_count} samples, {audio.duration:.2f}s")
    return audio
