"""
Kinetic captions

One word on screen at a time, centered, popping in with an elastic scale
and a slow wobble. Attention words shake and glitch; pronouns are
highlighted. Every style draws the outline first and the fill on top so
the word reads over any footage.
"""

import logging
import math
import os
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..content_generation.content_models import CaptionWord
from ..utils.config import CaptionConfig

logger = logging.getLogger(__name__)

VIRAL_KEYWORDS = frozenset({
    'SUBSCRIBE', 'LIKE', 'WARNING', 'STOP', 'MONEY', 'SECRET', 'FACT', 'CRAZY', 'WTF',
})
VIRAL_KEYWORDS_NON_LATIN = frozenset({'सब्सक्राइब', 'लाइक', 'पैसा', 'सच'})
PRONOUNS = frozenset({'YOU', 'I', 'WE', 'THEY'})

# RGBA
VIRAL_FILL = (255, 0, 51, 255)
GLITCH_FILL = (0, 255, 255, 128)
PRONOUN_FILL = (0, 240, 255, 255)
PLAIN_FILL = (255, 255, 255, 255)
SOLID_OUTLINE = (0, 0, 0, 255)
SOFT_OUTLINE = (0, 0, 0, 204)

FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/noto/NotoSans-Black.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "/Library/Fonts/Arial Bold.ttf",
]

_NON_LATIN_LETTERS = re.compile(r'[^A-Za-z]')


class CaptionStyle(str, Enum):
    VIRAL = "viral"
    PRONOUN = "pronoun"
    PLAIN = "plain"


def latin_letters(text: str) -> str:
    return _NON_LATIN_LETTERS.sub('', text)


def script_letters(text: str) -> str:
    """Letters plus combining marks, which Indic scripts need to spell a word"""
    return ''.join(ch for ch in text if unicodedata.category(ch)[0] in ('L', 'M'))


def classify_word(text: str) -> CaptionStyle:
    word = text.strip().upper()
    stripped = latin_letters(word)
    if stripped in VIRAL_KEYWORDS or script_letters(word) in VIRAL_KEYWORDS_NON_LATIN:
        return CaptionStyle.VIRAL
    if stripped in PRONOUNS:
        return CaptionStyle.PRONOUN
    return CaptionStyle.PLAIN


def ease_out_elastic(x: float) -> float:
    """Overshoot-and-settle curve; 0 at 0, 1 at 1."""
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    c4 = (2 * math.pi) / 3
    return math.pow(2, -10 * x) * math.sin((x * 10 - 0.75) * c4) + 1


@dataclass(frozen=True)
class CaptionPose:
    """Everything needed to rasterize the active caption on one frame"""
    text: str
    scale: float
    rotation_degrees: float  # clockwise on screen
    style: CaptionStyle


def caption_pose(caption: CaptionWord, elapsed: float, settings: Optional[CaptionConfig] = None) -> CaptionPose:
    settings = settings or CaptionConfig()
    text = caption.text.strip().upper()

    duration = caption.end_time - caption.start_time
    word_progress = (elapsed - caption.start_time) / duration if duration > 0 else 1.0
    scale = ease_out_elastic(min(word_progress * settings.entrance_speed, 1.0))

    rotation = math.sin(elapsed * settings.wobble_rate) * settings.wobble_degrees
    style = classify_word(text)
    if style == CaptionStyle.VIRAL:
        rotation += math.sin(elapsed * settings.shake_rate) * settings.shake_degrees

    return CaptionPose(text=text, scale=scale, rotation_degrees=rotation, style=style)


def _load_font(size: int, font_path: Optional[str] = None):
    """Try to load a bold TrueType font; fall back to Pillow default."""
    candidates = ([font_path] if font_path else []) + FONT_CANDIDATES
    for path in candidates:
        if os.path.exists(path):
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue

    logger.warning("No TrueType font found, captions use Pillow's default font")
    return ImageFont.load_default(size=size)


class KineticTextRenderer:
    """Rasterizes caption poses onto BGR frames with Pillow"""

    def __init__(self, settings: Optional[CaptionConfig] = None):
        self.settings = settings or CaptionConfig()
        self.font = _load_font(self.settings.font_size, self.settings.font_path)

    def render(self, canvas: np.ndarray, pose: CaptionPose) -> np.ndarray:
        """Draw the caption centered on the canvas, in place"""
        if not pose.text or pose.scale <= 0.01:
            return canvas

        layer = self._word_layer(pose.text, pose.style)

        if abs(pose.scale - 1.0) > 1e-3:
            width = max(1, int(round(layer.width * pose.scale)))
            height = max(1, int(round(layer.height * pose.scale)))
            layer = layer.resize((width, height), Image.BILINEAR)
        if pose.rotation_degrees:
            layer = layer.rotate(-pose.rotation_degrees, resample=Image.BICUBIC, expand=True)

        canvas_h, canvas_w = canvas.shape[:2]
        _blend_rgba(canvas, np.asarray(layer), (canvas_w // 2, canvas_h // 2))
        return canvas

    def _word_layer(self, text: str, style: CaptionStyle) -> Image.Image:
        return _render_word(text, style, self.font, self.settings.stroke_width, self.settings.glitch_offset)


@lru_cache(maxsize=64)
def _render_word(text: str, style: CaptionStyle, font, stroke_width: int, glitch_offset: int) -> Image.Image:
    """Upright RGBA image of one styled word; cached since a word spans many frames"""
    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    left, top, right, bottom = measure.textbbox((0, 0), text, font=font, anchor="mm", stroke_width=stroke_width)
    pad = stroke_width + glitch_offset + 4
    width = int(right - left) + 2 * pad
    height = int(bottom - top) + 2 * pad
    center = (width / 2, height / 2)

    layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    if style == CaptionStyle.VIRAL:
        outline, fill = SOLID_OUTLINE, VIRAL_FILL
    elif style == CaptionStyle.PRONOUN:
        outline, fill = SOLID_OUTLINE, PRONOUN_FILL
    else:
        outline, fill = SOFT_OUTLINE, PLAIN_FILL

    # Outline pass, then fill pass
    draw.text(center, text, font=font, anchor="mm", fill=outline, stroke_width=stroke_width, stroke_fill=outline)
    draw.text(center, text, font=font, anchor="mm", fill=fill)

    if style == CaptionStyle.VIRAL:
        glitch = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(glitch).text((center[0] - glitch_offset, center[1]), text,
                                    font=font, anchor="mm", fill=GLITCH_FILL)
        layer = Image.alpha_composite(layer, glitch)

    return layer


def _blend_rgba(canvas: np.ndarray, rgba: np.ndarray, center: Tuple[int, int]) -> None:
    """Alpha-blend an RGBA image onto a BGR canvas around center, clipped to the canvas"""
    canvas_h, canvas_w = canvas.shape[:2]
    layer_h, layer_w = rgba.shape[:2]
    x0 = center[0] - layer_w // 2
    y0 = center[1] - layer_h // 2

    cx0, cy0 = max(x0, 0), max(y0, 0)
    cx1, cy1 = min(x0 + layer_w, canvas_w), min(y0 + layer_h, canvas_h)
    if cx0 >= cx1 or cy0 >= cy1:
        return

    patch = rgba[cy0 - y0:cy1 - y0, cx0 - x0:cx1 - x0].astype(np.float32)
    alpha = patch[:, :, 3:4] / 255.0
    bgr = patch[:, :, 2::-1]

    region = canvas[cy0:cy1, cx0:cx1].astype(np.float32)
    canvas[cy0:cy1, cx0:cx1] = np.clip(region * (1.0 - alpha) + bgr * alpha, 0, 255).astype(np.uint8)
