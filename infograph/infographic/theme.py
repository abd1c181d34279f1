"""Infographic theme: canvas geometry, colors and fonts."""

from __future__ import annotations

import logging
from functools import lru_cache

from PIL import ImageFont

logger = logging.getLogger("infograph.theme")

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 1000

GRADIENT_TOP = "#6366f1"
GRADIENT_BOTTOM = "#8b5cf6"

TITLE = "Key Insights"
TITLE_Y = 80
TITLE_SIZE = 48
TITLE_COLOR = (255, 255, 255, 255)

CARD_X = 50
CARD_TOP = 150
CARD_WIDTH = CANVAS_WIDTH - 100
CARD_HEIGHT = 140
CARD_GAP = 20
CARD_FILL = (255, 255, 255, 242)
CARD_SHADOW = (0, 0, 0, 51)
CARD_SHADOW_BLUR = 10
CARD_SHADOW_OFFSET = 5

BADGE_CENTER_X = 90
BADGE_OFFSET_Y = 40
BADGE_RADIUS = 25
BADGE_FILL = GRADIENT_TOP
BADGE_TEXT_SIZE = 24
BADGE_TEXT_BASELINE = 48
BADGE_TEXT_COLOR = (255, 255, 255, 255)

TEXT_X = 130
TEXT_FIRST_BASELINE = 40
TEXT_LINE_HEIGHT = 25
TEXT_MAX_WIDTH = CANVAS_WIDTH - 180
TEXT_MAX_LINES = 4
TEXT_SIZE = 18
TEXT_COLOR = "#1e293b"

FOOTER_CAPTION = "Generated by InfographLM"
FOOTER_SIZE = 16
FOOTER_CAPTION_Y = CANVAS_HEIGHT - 30
FOOTER_DATE_Y = CANVAS_HEIGHT - 10
FOOTER_COLOR = (255, 255, 255, 204)

_REGULAR_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "LiberationSans-Regular.ttf")
_BOLD_CANDIDATES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf")

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@lru_cache(maxsize=32)
def load_font(size: int, *, bold: bool = False, path: str = "") -> Font:
    """Load a TrueType font at `size`, falling back to Pillow's bundled default."""
    candidates = (path,) if path else ()
    candidates += _BOLD_CANDIDATES if bold else _REGULAR_CANDIDATES
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.info("No TrueType font found; using Pillow default at %dpx", size)
    return ImageFont.load_default(size=size)
