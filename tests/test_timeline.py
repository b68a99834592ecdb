"""Tests for the clip cycle and transition state machine."""

import pytest

from shorts_engine.video_assembly.timeline import clip_state_at
from shorts_engine.video_assembly.video_effects import smoothstep
from shorts_engine.video_assembly.video_models import ClipPhase, TransitionType


def test_transition_window_with_five_clips():
    """At 2.7s the first clip is handing over to the second with a slide-left."""
    state = clip_state_at(2.7, 5)

    assert state.phase == ClipPhase.TRANSITION
    assert state.clip_index == 0
    assert state.next_index == 1
    assert state.transition_type == TransitionType.SLIDE_LEFT
    assert state.transition_progress == pytest.approx(0.4)
    assert state.eased == pytest.approx(smoothstep(0.4))


def test_display_before_transition_window():
    """2.4s is before the window that starts at 2.5s."""
    state = clip_state_at(2.4, 5)

    assert state.phase == ClipPhase.DISPLAY
    assert not state.in_transition
    assert state.clip_index == 0
    assert state.clip_progress == pytest.approx(0.8)
    assert state.eased == 0.0


def test_cycle_wraps_to_first_clip():
    """Five clips make a 15s cycle; the last clip hands back to clip 0."""
    last = clip_state_at(14.9, 5)
    assert last.clip_index == 4
    assert last.next_index == 0
    assert last.transition_type == TransitionType.SLIDE_UP

    wrapped = clip_state_at(15.1, 5)
    assert wrapped.clip_index == 0
    assert wrapped.phase == ClipPhase.DISPLAY


def test_transition_types_repeat_every_three():
    """Transition type depends only on the incoming clip index mod 3."""
    types = [TransitionType.for_index(i) for i in range(9)]

    assert types[:3] == [TransitionType.SLIDE_UP, TransitionType.SLIDE_LEFT, TransitionType.CROSS_ZOOM]
    for i in range(6):
        assert types[i] == types[i + 3]


def test_single_clip_transitions_into_itself():
    state = clip_state_at(2.9, 1)

    assert state.clip_index == 0
    assert state.next_index == 0
    assert state.in_transition
    assert state.transition_type == TransitionType.SLIDE_UP


def test_no_clips_is_an_error():
    with pytest.raises(ValueError):
        clip_state_at(1.0, 0)
