"""Clip timeline

Clips are shown in a fixed cycle, one clip window each. The tail of every
window overlaps the start of the next clip with a transition. State is a
pure function of elapsed time, so any frame can be reproduced on its own.
"""

from __future__ import annotations

from .video_effects import smoothstep
from .video_models import ClipPhase, ClipState, TransitionType

DEFAULT_CLIP_DURATION = 3.0
DEFAULT_TRANSITION_DURATION = 0.5


def clip_state_at(elapsed: float,
                  clip_count: int,
                  clip_duration: float = DEFAULT_CLIP_DURATION,
                  transition_duration: float = DEFAULT_TRANSITION_DURATION) -> ClipState:
    """Return the display/transition state of the clip cycle at elapsed seconds."""
    if clip_count < 1:
        raise ValueError("Clip timeline needs at least one clip")

    cycle = clip_count * clip_duration
    normalized = elapsed % cycle
    clip_index = int(normalized // clip_duration) % clip_count
    next_index = (clip_index + 1) % clip_count

    clip_time = normalized % clip_duration
    transition_start = clip_duration - transition_duration
    transition_type = TransitionType.for_index(next_index)

    if transition_duration > 0 and clip_time > transition_start:
        transition_progress = (clip_time - transition_start) / transition_duration
        return ClipState(
            phase=ClipPhase.TRANSITION,
            clip_index=clip_index,
            next_index=next_index,
            clip_progress=clip_time / clip_duration,
            transition_progress=transition_progress,
            eased=smoothstep(transition_progress),
            transition_type=transition_type,
        )

    return ClipState(
        phase=ClipPhase.DISPLAY,
        clip_index=clip_index,
        next_index=next_index,
        clip_progress=clip_time / clip_duration,
        transition_progress=0.0,
        eased=0.0,
        transition_type=transition_type,
    )
