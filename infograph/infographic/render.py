"""Draw a Layout with Pillow and encode it as a PNG data URL."""

from __future__ import annotations

import base64
import io

from PIL import Image, ImageColor, ImageDraw, ImageFilter

from infograph.config import RenderConfig
from infograph.infographic import theme
from infograph.infographic.layout import Layout, Measure

DATA_URL_PREFIX = "data:image/png;base64,"


class Fonts:
    """Fonts for one render config."""

    def __init__(self, config: RenderConfig | None = None) -> None:
        config = config or RenderConfig()
        self.title = theme.load_font(theme.TITLE_SIZE, bold=True, path=config.bold_font_path)
        self.badge = theme.load_font(theme.BADGE_TEXT_SIZE, bold=True, path=config.bold_font_path)
        self.body = theme.load_font(theme.TEXT_SIZE, path=config.font_path)
        self.footer = theme.load_font(theme.FOOTER_SIZE, path=config.font_path)

    @property
    def measure(self) -> Measure:
        return self.body.getlength


def _gradient(width: int, height: int) -> Image.Image:
    top = ImageColor.getrgb(theme.GRADIENT_TOP)
    bottom = ImageColor.getrgb(theme.GRADIENT_BOTTOM)
    image = Image.new("RGBA", (width, height))
    draw = ImageDraw.Draw(image)
    for y in range(height):
        t = y / max(height - 1, 1)
        color = tuple(round(a + (b - a) * t) for a, b in zip(top, bottom, strict=True))
        draw.line([(0, y), (width, y)], fill=(*color, 255))
    return image


def _card_box(top: int, offset: int = 0) -> tuple[int, int, int, int]:
    return (theme.CARD_X, top + offset, theme.CARD_X + theme.CARD_WIDTH, top + theme.CARD_HEIGHT + offset)


def render_png(layout: Layout, fonts: Fonts) -> bytes:
    canvas = _gradient(layout.width, layout.height)

    if layout.cards:
        shadows = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadows)
        for card in layout.cards:
            shadow_draw.rectangle(_card_box(card.top, theme.CARD_SHADOW_OFFSET), fill=theme.CARD_SHADOW)
        canvas.alpha_composite(shadows.filter(ImageFilter.GaussianBlur(theme.CARD_SHADOW_BLUR / 2)))

        panels = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        panel_draw = ImageDraw.Draw(panels)
        for card in layout.cards:
            panel_draw.rectangle(_card_box(card.top), fill=theme.CARD_FILL)
        canvas.alpha_composite(panels)

    draw = ImageDraw.Draw(canvas)
    draw.text((layout.title.x, layout.title.y), layout.title.text, font=fonts.title, fill=theme.TITLE_COLOR, anchor="ms")

    for card in layout.cards:
        cx, cy = card.badge_center
        r = theme.BADGE_RADIUS
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=theme.BADGE_FILL)
        draw.text(
            (cx, card.top + theme.BADGE_TEXT_BASELINE),
            str(card.index),
            font=fonts.badge,
            fill=theme.BADGE_TEXT_COLOR,
            anchor="ms",
        )
        for line in card.lines:
            draw.text((line.x, line.y), line.text, font=fonts.body, fill=theme.TEXT_COLOR, anchor="ls")

    footer_layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    footer_draw = ImageDraw.Draw(footer_layer)
    for line in layout.footer:
        footer_draw.text((line.x, line.y), line.text, font=fonts.footer, fill=theme.FOOTER_COLOR, anchor="ms")
    canvas.alpha_composite(footer_layer)

    buf = io.BytesIO()
    canvas.convert("RGB").save(buf, format="PNG")
    return buf.getvalue()


def encode_data_url(png: bytes) -> str:
    return DATA_URL_PREFIX + base64.b64encode(png).decode("ascii")


def decode_data_url(data: str) -> bytes:
    """PNG bytes from a data URL produced by `encode_data_url`."""
    if not data.startswith(DATA_URL_PREFIX):
        raise ValueError("Not a PNG data URL")
    return base64.b64decode(data[len(DATA_URL_PREFIX) :])
