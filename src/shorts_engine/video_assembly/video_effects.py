"""
Video Effects Engine

Handles visual effects for the shorts compositor:
- Ken Burns effect (slow zoom/pan) with per-clip deterministic directions
- Layered drawing of transformed clip frames onto the canvas
- Caption legibility gradient
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ..utils.config import Config, KenBurnsConfig
from ..utils.seed import seeded_flag, seeded_sign
from .video_models import KenBurnsVariant, Placement

logger = logging.getLogger(__name__)

# (position, alpha) stops of the darkening overlay, top to bottom
GRADIENT_STOPS = ((0.0, 0.1), (0.5, 0.2), (0.8, 0.6), (1.0, 0.9))


def ken_burns_variant(seed: int) -> KenBurnsVariant:
    """Zoom and pan directions derived from a clip index"""
    return KenBurnsVariant(
        zoom_in=seeded_flag(seed, 1),
        pan_x=seeded_sign(seed, 2),
        pan_y=seeded_sign(seed, 3),
    )


def ken_burns_placement(seed: int,
                        progress: float,
                        source_size: Tuple[int, int],
                        canvas_size: Tuple[int, int],
                        settings: Optional[KenBurnsConfig] = None) -> Placement:
    """
    Placement of a clip frame at a point in its display window.

    Pure: the same (seed, progress, sizes) always gives the same geometry.

    Args:
        seed: Clip index
        progress: 0.0 to 1.0 through the clip window
        source_size: (width, height) of the source video
        canvas_size: (width, height) of the output frame
    """
    settings = settings or KenBurnsConfig()
    progress = min(max(progress, 0.0), 1.0)
    source_w, source_h = source_size
    canvas_w, canvas_h = canvas_size
    variant = ken_burns_variant(seed)

    base_scale = max(canvas_w / source_w, canvas_h / source_h) * settings.cover_slack
    zoom_span = base_scale * settings.zoom_amount
    if variant.zoom_in:
        scale = base_scale + progress * zoom_span
    else:
        scale = base_scale + zoom_span - progress * zoom_span

    width = source_w * scale
    height = source_h * scale

    x = (canvas_w - width) / 2
    y = (canvas_h - height) / 2

    max_pan_x = (width - canvas_w) * settings.pan_fraction
    max_pan_y = (height - canvas_h) * settings.pan_fraction
    x += progress * max_pan_x * variant.pan_x
    y += progress * max_pan_y * variant.pan_y

    return Placement(x=x, y=y, width=width, height=height)


def placement_matrix(placement: Placement, source_size: Tuple[int, int]) -> np.ndarray:
    """3x3 affine mapping source pixels onto the canvas"""
    source_w, source_h = source_size
    return np.array([
        [placement.width / source_w, 0.0, placement.x],
        [0.0, placement.height / source_h, placement.y],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


def smoothstep(t: float) -> float:
    t = min(max(t, 0.0), 1.0)
    return t * t * (3.0 - 2.0 * t)


def vertical_gradient_alpha(height: int) -> np.ndarray:
    """Per-row overlay alpha, shape (height, 1, 1)"""
    positions = np.linspace(0.0, 1.0, height, dtype=np.float32)
    stops_x, stops_alpha = zip(*GRADIENT_STOPS)
    alpha = np.interp(positions, stops_x, stops_alpha).astype(np.float32)
    return alpha.reshape(height, 1, 1)


class EffectsEngine:
    """
    Draws clip frames onto the canvas.

    Handles:
    - Ken Burns placement per clip
    - Extra layer transforms and opacity for transitions
    - The fixed darkening gradient behind captions
    """

    def __init__(self, config: Config):
        self.config = config
        self.canvas_size = (config.render.width, config.render.height)
        self.ken_burns_settings = config.ken_burns

        # Darkening overlay is the same for every frame
        self._gradient_keep = 1.0 - vertical_gradient_alpha(config.render.height)

    def new_canvas(self) -> np.ndarray:
        """Opaque black BGR frame buffer"""
        width, height = self.canvas_size
        return np.zeros((height, width, 3), dtype=np.uint8)

    def draw_ken_burns(self,
                       canvas: np.ndarray,
                       frame: Optional[np.ndarray],
                       seed: int,
                       progress: float,
                       layer: Optional[np.ndarray] = None,
                       opacity: float = 1.0) -> np.ndarray:
        """
        Draw one clip frame with its Ken Burns placement.

        Args:
            canvas: BGR frame buffer, modified in place
            frame: Source frame; None means the source is not ready and nothing is drawn
            seed: Clip index
            progress: 0.0 to 1.0 through the clip window
            layer: Optional 3x3 canvas-space transform applied after placement
            opacity: 0.0 to 1.0
        """
        if frame is None:
            return canvas

        source_h, source_w = frame.shape[:2]
        placement = ken_burns_placement(
            seed, progress, (source_w, source_h), self.canvas_size, self.ken_burns_settings
        )
        matrix = placement_matrix(placement, (source_w, source_h))
        if layer is not None:
            matrix = layer @ matrix

        return self.composite(canvas, frame, matrix, opacity)

    def composite(self,
                  canvas: np.ndarray,
                  source: np.ndarray,
                  matrix: np.ndarray,
                  opacity: float = 1.0) -> np.ndarray:
        """Warp source by a 3x3 affine and blend it over the canvas in place"""
        if opacity <= 0.0:
            return canvas

        width, height = self.canvas_size
        affine = matrix[:2, :]

        if opacity >= 1.0:
            # Transparent border leaves canvas pixels outside the source untouched
            cv2.warpAffine(source, affine, (width, height), dst=canvas,
                           flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_TRANSPARENT)
            return canvas

        warped = cv2.warpAffine(source, affine, (width, height),
                                flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_CONSTANT)
        coverage = cv2.warpAffine(np.ones(source.shape[:2], dtype=np.float32), affine, (width, height),
                                  flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_CONSTANT)
        alpha = (coverage * opacity)[:, :, np.newaxis]
        blended = canvas.astype(np.float32) * (1.0 - alpha) + warped.astype(np.float32) * alpha
        np.copyto(canvas, np.clip(blended, 0, 255).astype(np.uint8))
        return canvas

    def apply_gradient_overlay(self, canvas: np.ndarray) -> np.ndarray:
        """Darken toward the bottom so captions stay readable"""
        darkened = canvas.astype(np.float32) * self._gradient_keep
        np.copyto(canvas, darkened.astype(np.uint8))
        return canvas
