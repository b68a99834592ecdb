"""Background music lookup and decoding.

Music is optional: any failure to fetch or decode a track leaves the render
with narration-only audio.
"""

import asyncio
import io
from typing import Dict, Optional

import aiohttp
import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from ..errors import MusicUnavailableError
from ..utils.config import DEFAULT_MUSIC_TRACKS, MusicConfig
from ..utils.logger import LoggerMixin


class MusicLibrary(LoggerMixin):
    """Mood-indexed background tracks"""

    def __init__(self, config: Optional[MusicConfig] = None):
        self.config = config or MusicConfig()
        self.tracks: Dict[str, str] = dict(self.config.tracks or DEFAULT_MUSIC_TRACKS)

    def track_for(self, mood: str) -> Optional[str]:
        mood = getattr(mood, 'value', mood)
        return self.tracks.get(mood) or self.tracks.get(self.config.default_mood)

    async def load(self, mood: str, sample_rate: int) -> Optional[np.ndarray]:
        """
        Fetch and decode the track for a mood.

        Returns:
            Mono float32 samples at sample_rate, or None when no music is available
        """
        if not self.config.enabled:
            return None

        url = self.track_for(mood)
        if not url:
            self.logger.warning(f"No background track configured for mood '{mood}'")
            return None

        try:
            data = await self._download(url)
            samples = await asyncio.to_thread(decode_track, data, sample_rate)
        except (MusicUnavailableError, aiohttp.ClientError, asyncio.TimeoutError,
                CouldntDecodeError, OSError) as e:
            self.logger.warning(f"No music loaded ({url}): {e}")
            return None

        self.logger.info(f"Background music loaded: {len(samples) / sample_rate:.1f}s")
        return samples

    async def _download(self, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise MusicUnavailableError(f"HTTP {response.status} for {url}")
                return await response.read()


def decode_track(data: bytes, sample_rate: int) -> np.ndarray:
    """Decode any ffmpeg-readable track into mono float32 at sample_rate"""
    segment = AudioSegment.from_file(io.BytesIO(data))
    segment = segment.set_channels(1).set_frame_rate(sample_rate).set_sample_width(2)

    samples = np.array(segment.get_array_of_samples(), dtype=np.float32) / 32768.0
    if samples.size == 0:
        raise MusicUnavailableError("Background track decoded to zero samples")
    return samples
