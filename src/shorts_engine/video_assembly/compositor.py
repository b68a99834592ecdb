"""Frame compositor: builds one output frame from the clip set and captions.

Layer order, bottom to top: black fill, current clip (Ken Burns), incoming
clip during a transition, darkening gradient, active caption.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from ..content_generation.caption_timing import CaptionTrack
from ..content_generation.content_models import CaptionWord
from ..media_generation.clip_loader import ClipSource
from ..utils.config import Config
from .kinetic_text import KineticTextRenderer, caption_pose
from .timeline import clip_state_at
from .transitions import transition_layer
from .video_effects import EffectsEngine
from .video_models import ClipState

logger = logging.getLogger(__name__)


class FrameCompositor:

    def __init__(self,
                 config: Config,
                 clips: Sequence[ClipSource],
                 captions: Sequence[CaptionWord],
                 effects: Optional[EffectsEngine] = None,
                 text_renderer: Optional[KineticTextRenderer] = None):
        if not clips:
            raise ValueError("Compositor needs at least one clip")
        self.config = config
        self.clips = list(clips)
        self.captions = CaptionTrack(captions)
        self.effects = effects or EffectsEngine(config)
        self.text_renderer = text_renderer or KineticTextRenderer(config.captions)

    def state_at(self, elapsed: float) -> ClipState:
        render = self.config.render
        return clip_state_at(elapsed, len(self.clips), render.clip_duration, render.transition_duration)

    def compose(self, elapsed: float) -> np.ndarray:
        """Render the frame shown at elapsed seconds"""
        state = self.state_at(elapsed)
        canvas = self.effects.new_canvas()

        current = self.clips[state.clip_index]
        self.effects.draw_ken_burns(canvas, current.frame_at(elapsed), state.clip_index, state.clip_progress)

        if state.in_transition:
            incoming = self.clips[state.next_index]
            layer = transition_layer(state.transition_type, state.eased, self.effects.canvas_size)
            # The incoming clip has not started its own window yet
            self.effects.draw_ken_burns(
                canvas, incoming.frame_at(elapsed), state.next_index, 0.0,
                layer=layer.matrix, opacity=layer.opacity
            )

        self.effects.apply_gradient_overlay(canvas)

        caption = self.captions.at(elapsed)
        if caption is not None:
            self.text_renderer.render(canvas, caption_pose(caption, elapsed, self.config.captions))

        return canvas
