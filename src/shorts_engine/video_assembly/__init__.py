"""
Video Assembly Pipeline

This module handles the frame-by-frame render of a short, combining:
- Narration and background music mixing
- Stock clips cycled with transitions
- Visual effects (Ken Burns, darkening gradient)
- Kinetic captions synchronized to the narration
- Encoding to a single video stream
"""

from .video_assembler import ShortVideoAssembler
from .video_models import RenderOutcome, TransitionType, VideoAssemblyResult
from .video_effects import EffectsEngine
from .frame_clock import CancellationToken, RealtimeClock, SteppedClock

__all__ = [
    'ShortVideoAssembler',
    'RenderOutcome',
    'TransitionType',
    'VideoAssemblyResult',
    'EffectsEngine',
    'CancellationToken',
    'RealtimeClock',
    'SteppedClock'
]
