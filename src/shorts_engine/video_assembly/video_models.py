"""
Video Assembly Data Models

Geometry, clip timeline state and render results for the shorts compositor.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum

from ..errors import FatalInputError


class TransitionType(str, Enum):
    """Transitions between consecutive clips, assigned cyclically"""
    SLIDE_UP = "slide_up"
    SLIDE_LEFT = "slide_left"
    CROSS_ZOOM = "cross_zoom"

    @classmethod
    def for_index(cls, next_clip_index: int) -> "TransitionType":
        """Transition used when entering the clip at next_clip_index"""
        return _TRANSITION_CYCLE[next_clip_index % len(_TRANSITION_CYCLE)]


_TRANSITION_CYCLE = (TransitionType.SLIDE_UP, TransitionType.SLIDE_LEFT, TransitionType.CROSS_ZOOM)


class ClipPhase(str, Enum):
    DISPLAY = "display"
    TRANSITION = "transition"


@dataclass(frozen=True)
class KenBurnsVariant:
    """Movement directions for one clip"""
    zoom_in: bool
    pan_x: int  # +1 or -1
    pan_y: int


@dataclass(frozen=True)
class Placement:
    """Where a source frame is drawn on the canvas, in canvas pixels"""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ClipState:
    """Which clips are on screen at one instant"""
    phase: ClipPhase
    clip_index: int
    next_index: int
    clip_progress: float  # 0..1 through the current clip window
    transition_progress: float  # 0..1 through the transition window, 0 when displaying
    eased: float
    transition_type: TransitionType

    @property
    def in_transition(self) -> bool:
        return self.phase == ClipPhase.TRANSITION


class RenderOutcome(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FATAL_INPUT = "fatal_input"


class VideoAssemblyResult(BaseModel):
    """Result of one render call"""
    outcome: RenderOutcome
    video_bytes: Optional[bytes] = None
    container: str = "mp4"

    # Render statistics
    total_duration: float = 0.0  # seconds of narration
    frames_rendered: int = 0
    clips_loaded: int = 0
    captions: int = 0
    music_loaded: bool = False
    render_time_seconds: float = 0.0

    # Logs and errors
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.outcome == RenderOutcome.COMPLETED

    def raise_for_outcome(self) -> "VideoAssemblyResult":
        """Re-raise a fatal input condition for callers that prefer exceptions"""
        if self.outcome == RenderOutcome.FATAL_INPUT:
            raise FatalInputError(self.error or "Render aborted on fatal input")
        return self
