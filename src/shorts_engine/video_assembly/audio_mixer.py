"""
Audio mixing for the shorts renderer.

Two sources feed one output: narration (plays once) and an optional
background track (loops for as long as the render runs). The graph is wired
once and started once, at the same instant as the frame loop.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

NARRATION_GAIN = 1.0
MUSIC_GAIN = 0.15


class MixGraph:
    """Narration plus looping background music at fixed relative gains"""

    def __init__(self,
                 narration: np.ndarray,
                 sample_rate: int,
                 music: Optional[np.ndarray] = None,
                 narration_gain: float = NARRATION_GAIN,
                 music_gain: float = MUSIC_GAIN):
        self.narration = np.asarray(narration, dtype=np.float32)
        self.music = np.asarray(music, dtype=np.float32) if music is not None and len(music) else None
        self.sample_rate = sample_rate
        self.narration_gain = narration_gain
        self.music_gain = music_gain
        self.started = False

    @property
    def has_music(self) -> bool:
        return self.music is not None

    def start(self) -> None:
        """Mark logical time zero; a graph can only be started once"""
        if self.started:
            raise RuntimeError("Mix graph already started")
        self.started = True
        logger.debug(f"Mix started (music: {self.has_music})")

    def mix(self, start_sample: int, count: int) -> np.ndarray:
        """
        Mixed samples [start_sample, start_sample + count).

        Narration is silent past its end; music wraps around.
        """
        if not self.started:
            raise RuntimeError("Mix graph not started")
        count = max(0, int(count))
        output = np.zeros(count, dtype=np.float32)
        if count == 0:
            return output

        narration_end = min(start_sample + count, len(self.narration))
        if narration_end > start_sample:
            span = narration_end - start_sample
            output[:span] += self.narration[start_sample:narration_end] * self.narration_gain

        if self.music is not None:
            indices = np.arange(start_sample, start_sample + count) % len(self.music)
            output += self.music[indices] * self.music_gain

        return np.clip(output, -1.0, 1.0)

    def mix_seconds(self, start: float, end: float) -> np.ndarray:
        start_sample = int(round(start * self.sample_rate))
        end_sample = int(round(end * self.sample_rate))
        return self.mix(start_sample, end_sample - start_sample)
