"""Transition renderings between consecutive clips.

Each transition type maps eased progress to a canvas-space layer transform
for the incoming clip. The outgoing clip is always drawn underneath at full
opacity.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

from .video_models import TransitionType

CROSS_ZOOM_START_SCALE = 0.85


@dataclass(frozen=True)
class LayerTransform:
    matrix: np.ndarray  # 3x3 affine in canvas pixels
    opacity: float = 1.0


def _translation(dx: float, dy: float) -> np.ndarray:
    return np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]])


def _scale_about(cx: float, cy: float, scale: float) -> np.ndarray:
    return _translation(cx, cy) @ np.diag([scale, scale, 1.0]) @ _translation(-cx, -cy)


def slide_up(eased: float, canvas_size: Tuple[int, int]) -> LayerTransform:
    """Incoming clip rises from below the frame"""
    _, height = canvas_size
    return LayerTransform(_translation(0.0, height * (1.0 - eased)))


def slide_left(eased: float, canvas_size: Tuple[int, int]) -> LayerTransform:
    """Incoming clip swipes in from the right"""
    width, _ = canvas_size
    return LayerTransform(_translation(width * (1.0 - eased), 0.0))


def cross_zoom(eased: float, canvas_size: Tuple[int, int]) -> LayerTransform:
    """Incoming clip fades in while growing to full size about the center"""
    width, height = canvas_size
    scale = CROSS_ZOOM_START_SCALE + (1.0 - CROSS_ZOOM_START_SCALE) * eased
    return LayerTransform(_scale_about(width / 2, height / 2, scale), opacity=eased)


TRANSITION_RENDERERS: Dict[TransitionType, Callable[[float, Tuple[int, int]], LayerTransform]] = {
    TransitionType.SLIDE_UP: slide_up,
    TransitionType.SLIDE_LEFT: slide_left,
    TransitionType.CROSS_ZOOM: cross_zoom,
}


def transition_layer(transition_type: TransitionType,
                     eased: float,
                     canvas_size: Tuple[int, int]) -> LayerTransform:
    return TRANSITION_RENDERERS[transition_type](eased, canvas_size)
