"""
Video Assembler

Main render engine for vertical shorts. Combines:
- Narration decoding (the narration length bounds the whole video)
- Word-level caption timing
- Stock clip loading
- Narration + background music mixing
- The frame loop: clip cycle, Ken Burns, transitions, kinetic captions
- Encoding of frames and audio into one stream
"""

import math
import time
from typing import Callable, List, Optional, Sequence, Tuple

from ..content_generation.caption_timing import generate_timed_captions
from ..content_generation.content_models import Script
from ..errors import FatalInputError
from ..media_generation.audio_decoder import NarrationAudio, decode_pcm
from ..media_generation.clip_loader import ClipLoader, ClipSource, release_all
from ..media_generation.music_library import MusicLibrary
from ..utils.config import Config
from ..utils.logger import LoggerMixin
from .audio_mixer import MixGraph
from .compositor import FrameCompositor
from .encoder import EncoderSink, FfmpegEncoderSink
from .frame_clock import CancellationToken, FrameClock, RealtimeClock, SteppedClock
from .kinetic_text import KineticTextRenderer
from .video_effects import EffectsEngine
from .video_models import RenderOutcome, VideoAssemblyResult

ProgressCallback = Callable[[str], None]
EncoderFactory = Callable[[Config, int], EncoderSink]
ClockFactory = Callable[[Config], FrameClock]


def default_encoder_factory(config: Config, sample_rate: int) -> EncoderSink:
    render = config.render
    return FfmpegEncoderSink(render.width, render.height, render.fps, sample_rate, config.encoder)


def default_clock_factory(config: Config) -> FrameClock:
    if config.render.realtime:
        return RealtimeClock(config.render.fps)
    return SteppedClock(config.render.fps)


def _ignore_progress(message: str) -> None:
    pass


class ShortVideoAssembler(LoggerMixin):
    """
    Renders one short from a script, a narration buffer and clip locators.

    Features:
    - Deterministic output with the default stepped clock
    - Cooperative cancellation checked at every frame boundary
    - Optional resources (music, individual clips) degrade gracefully
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 clip_loader: Optional[ClipLoader] = None,
                 music_library: Optional[MusicLibrary] = None,
                 encoder_factory: EncoderFactory = default_encoder_factory,
                 clock_factory: ClockFactory = default_clock_factory):
        self.config = config or Config()

        self.clip_loader = clip_loader or ClipLoader(self.config.clips.load_timeout_ms)
        self.music_library = music_library or MusicLibrary(self.config.music)
        self.encoder_factory = encoder_factory
        self.clock_factory = clock_factory

        self.effects_engine = EffectsEngine(self.config)
        self.text_renderer = KineticTextRenderer(self.config.captions)

    async def render(self,
                     script: Script,
                     narration_pcm: bytes,
                     clip_locators: Sequence[str],
                     progress_callback: Optional[ProgressCallback] = None,
                     cancel_token: Optional[CancellationToken] = None) -> VideoAssemblyResult:
        """
        Render a complete short.

        Args:
            script: Script whose hook, body and call to action are narrated
            narration_pcm: Raw s16le mono PCM at the configured sample rate
            clip_locators: Ordered footage URLs or paths
            progress_callback: Receives human-readable stage messages
            cancel_token: Stops the render at the next frame boundary

        Returns:
            VideoAssemblyResult; fatal inputs are reported as FATAL_INPUT
            rather than raised. Encoder and other failures propagate.
        """
        start_time = time.time()
        notify = progress_callback or _ignore_progress
        cancel_token = cancel_token or CancellationToken()
        clips: List[ClipSource] = []

        try:
            notify("Analyzing Voiceover...")
            narration = decode_pcm(narration_pcm, self.config.audio.sample_rate)
            captions = generate_timed_captions(script.narration_text, narration.duration)
            self.logger.info(f"Narration {narration.duration:.2f}s, {len(captions)} caption words")

            notify("Buffering Video Clips...")
            clips = await self.clip_loader.load(clip_locators)
        except FatalInputError as e:
            self.logger.error(f"Render aborted: {e}")
            return VideoAssemblyResult(
                outcome=RenderOutcome.FATAL_INPUT,
                error=str(e),
                render_time_seconds=time.time() - start_time
            )

        try:
            notify("Loading background music...")
            music = await self.music_library.load(script.mood, narration.sample_rate)
            warnings = [] if music is not None or not self.config.music.enabled else [
                "Background music unavailable; rendered with narration only"
            ]
            mix = MixGraph(
                narration.samples,
                narration.sample_rate,
                music=music,
                narration_gain=self.config.audio.narration_gain,
                music_gain=self.config.audio.music_gain
            )

            compositor = FrameCompositor(
                self.config, clips, captions, self.effects_engine, self.text_renderer
            )

            result = await self._encode(compositor, mix, narration, notify, cancel_token)
            result.clips_loaded = len(clips)
            result.captions = len(captions)
            result.music_loaded = mix.has_music
            result.warnings.extend(warnings)
            result.render_time_seconds = time.time() - start_time

            self.logger.info(
                f"Render {result.outcome.value}: {result.frames_rendered} frames "
                f"in {result.render_time_seconds:.1f}s"
            )
            return result
        finally:
            release_all(clips)

    async def _encode(self,
                      compositor: FrameCompositor,
                      mix: MixGraph,
                      narration: NarrationAudio,
                      notify: ProgressCallback,
                      cancel_token: CancellationToken) -> VideoAssemblyResult:
        """Run the frame loop into a fresh encoder sink"""
        sink = self.encoder_factory(self.config, narration.sample_rate)
        await sink.open()

        try:
            notify("Rendering video...")
            frames, completed = await self._run_frame_loop(compositor, mix, narration, sink, notify, cancel_token)
        except BaseException:
            await sink.abort()
            raise

        if not completed:
            await sink.abort()
            self.logger.warning(f"Render cancelled after {frames} frames")
            return VideoAssemblyResult(
                outcome=RenderOutcome.CANCELLED,
                total_duration=narration.duration,
                frames_rendered=frames,
                container=self.config.encoder.container
            )

        notify("Finalizing video...")
        video_bytes = await sink.finalize()
        return VideoAssemblyResult(
            outcome=RenderOutcome.COMPLETED,
            video_bytes=video_bytes,
            container=self.config.encoder.container,
            total_duration=narration.duration,
            frames_rendered=frames
        )

    async def _run_frame_loop(self,
                              compositor: FrameCompositor,
                              mix: MixGraph,
                              narration: NarrationAudio,
                              sink: EncoderSink,
                              notify: ProgressCallback,
                              cancel_token: CancellationToken) -> Tuple[int, bool]:
        """
        Produce frames until elapsed time passes narration + tail.

        Returns:
            (frames written, True if the loop ran to its end)
        """
        render = self.config.render
        clock = self.clock_factory(self.config)
        bound = narration.duration + render.tail_seconds
        total_samples = int(round(bound * mix.sample_rate))
        expected_frames = max(1, math.ceil(bound * render.fps))

        frames = 0
        audio_cursor = 0

        mix.start()
        run_start = clock.now()

        while True:
            if cancel_token.cancelled:
                return frames, False

            elapsed = clock.now() - run_start
            if elapsed >= bound:
                break

            frame = compositor.compose(elapsed)

            window_end = min(total_samples, int(round((elapsed + clock.frame_interval) * mix.sample_rate)))
            audio = mix.mix(audio_cursor, window_end - audio_cursor)
            audio_cursor = max(audio_cursor, window_end)

            await sink.write(frame, audio)
            frames += 1

            if frames % render.progress_every_frames == 0:
                percent = min(99, int(100 * frames / expected_frames))
                notify(f"Rendering frames: {percent}%")

            await clock.next_frame()

        if audio_cursor < total_samples:
            await sink.write_audio(mix.mix(audio_cursor, total_samples - audio_cursor))

        return frames, True
