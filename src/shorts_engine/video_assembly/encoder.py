"""
Encoder sinks

The render loop hands every finished frame, together with the audio mixed
for that frame's time window, to an EncoderSink. FfmpegEncoderSink streams
raw frames into an ffmpeg process while audio is collected in memory; on
finalize the audio is written to WAV and muxed into the video container.
"""

import asyncio
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

import ffmpeg
import numpy as np
import soundfile as sf

from ..errors import EncoderError
from ..utils.config import EncoderConfig

logger = logging.getLogger(__name__)

AUDIO_CODEC_FOR_CONTAINER = {"mp4": "aac", "mov": "aac", "webm": "libopus", "mkv": "aac"}


class EncoderSink(ABC):
    """Consumes (frame, audio window) pairs and produces one encoded stream"""

    @abstractmethod
    async def open(self) -> None:
        pass

    @abstractmethod
    async def write(self, frame: np.ndarray, audio: np.ndarray) -> None:
        """Append one BGR frame and the mono float audio that plays with it"""

    @abstractmethod
    async def write_audio(self, audio: np.ndarray) -> None:
        """Append trailing audio that has no frame of its own"""

    @abstractmethod
    async def finalize(self) -> bytes:
        """Flush and return the encoded container bytes"""

    @abstractmethod
    async def abort(self) -> None:
        """Discard everything written so far"""


class FfmpegEncoderSink(EncoderSink):
    """
    Encodes with an ffmpeg subprocess.

    Features:
    - Raw BGR frames piped to stdin, no intermediate image files
    - Fixed frame rate and target bit rate
    - Audio muxed on finalize with +faststart for streaming
    """

    def __init__(self,
                 width: int,
                 height: int,
                 fps: int,
                 sample_rate: int,
                 settings: Optional[EncoderConfig] = None,
                 work_dir: Optional[Path] = None):
        self.width = width
        self.height = height
        self.fps = fps
        self.sample_rate = sample_rate
        self.settings = settings or EncoderConfig()
        self.work_dir = work_dir

        self.process: Optional[asyncio.subprocess.Process] = None
        self._temp_dir: Optional[Path] = None
        self._audio_chunks: List[np.ndarray] = []
        self.frames_written = 0

    @property
    def container(self) -> str:
        return self.settings.container

    def video_command(self, output_path: Path) -> List[str]:
        """ffmpeg arguments for the video-only pass"""
        stream = ffmpeg.input(
            'pipe:', format='rawvideo', pix_fmt='bgr24',
            s=f'{self.width}x{self.height}', framerate=self.fps
        )
        stream = ffmpeg.output(
            stream, str(output_path),
            vcodec=self.settings.video_codec,
            video_bitrate=self.settings.video_bitrate,
            preset=self.settings.preset,
            pix_fmt=self.settings.pix_fmt,
            r=self.fps,
        )
        return (
            stream
            .global_args('-loglevel', 'error')
            .overwrite_output()
            .compile(cmd=self.settings.ffmpeg_binary)
        )

    async def open(self) -> None:
        self._temp_dir = Path(tempfile.mkdtemp(prefix='shorts_render_', dir=self.work_dir))
        cmd = self.video_command(self._video_path)
        logger.debug(' '.join(cmd))
        logger.info(f"Starting encoder: {self.width}x{self.height}@{self.fps} "
                    f"{self.settings.video_codec} {self.settings.video_bitrate}")

        try:
            self.process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            self._cleanup()
            raise EncoderError(f"Could not start ffmpeg ({self.settings.ffmpeg_binary}): {e}") from e

    @property
    def _video_path(self) -> Path:
        return self._temp_dir / f"video_only.{self.container}"

    async def write(self, frame: np.ndarray, audio: np.ndarray) -> None:
        if self.process is None:
            raise EncoderError("Encoder not opened")
        if frame.shape != (self.height, self.width, 3):
            raise ValueError(f"Frame shape {frame.shape} does not match {self.height}x{self.width}x3")

        try:
            self.process.stdin.write(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
            await self.process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            stderr = await self.process.stderr.read()
            raise EncoderError(f"ffmpeg stopped accepting frames: {stderr.decode(errors='replace')}") from e

        self._audio_chunks.append(np.asarray(audio, dtype=np.float32))
        self.frames_written += 1

    async def write_audio(self, audio: np.ndarray) -> None:
        self._audio_chunks.append(np.asarray(audio, dtype=np.float32))

    async def finalize(self) -> bytes:
        if self.process is None:
            raise EncoderError("Encoder not opened")

        try:
            _, stderr = await self.process.communicate()
            if self.process.returncode != 0:
                raise EncoderError(f"ffmpeg video pass failed: {stderr.decode(errors='replace')}")

            audio_path = self._temp_dir / "mix.wav"
            output_path = self._temp_dir / f"short.{self.container}"
            audio = np.concatenate(self._audio_chunks) if self._audio_chunks else np.zeros(0, dtype=np.float32)
            sf.write(str(audio_path), audio, self.sample_rate, subtype='PCM_16')

            await asyncio.to_thread(self._mux, audio_path, output_path)

            data = output_path.read_bytes()
            logger.info(f"Encoded {self.frames_written} frames, {len(audio) / self.sample_rate:.2f}s audio, "
                        f"{len(data) / (1024 ** 2):.1f} MB")
            return data
        finally:
            self._cleanup()

    def _mux(self, audio_path: Path, output_path: Path) -> None:
        video = ffmpeg.input(str(self._video_path))
        audio = ffmpeg.input(str(audio_path))
        output_args = {
            'vcodec': 'copy',
            'acodec': self.settings.audio_codec or AUDIO_CODEC_FOR_CONTAINER.get(self.container, 'aac'),
            'audio_bitrate': self.settings.audio_bitrate,
        }
        if self.container in ('mp4', 'mov'):
            output_args['movflags'] = '+faststart'

        try:
            (
                ffmpeg
                .output(video.video, audio.audio, str(output_path), **output_args)
                .overwrite_output()
                .run(cmd=self.settings.ffmpeg_binary, quiet=True)
            )
        except ffmpeg.Error as e:
            error_msg = e.stderr.decode(errors='replace') if e.stderr else str(e)
            raise EncoderError(f"Muxing audio failed: {error_msg}") from e

        if not output_path.exists():
            raise EncoderError("FFmpeg did not create output file")

    async def abort(self) -> None:
        if self.process is not None and self.process.returncode is None:
            self.process.kill()
            await self.process.wait()
        self._cleanup()

    def _cleanup(self) -> None:
        self._audio_chunks = []
        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self._temp_dir = None
