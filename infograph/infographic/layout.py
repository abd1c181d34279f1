"""Deterministic placement of statements on the infographic canvas.

Layout is computed separately from drawing so the geometry can be checked
without decoding pixels. Widths come from a `measure` callable (the rendering
font's advance width in practice).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from pydantic import BaseModel, Field

from infograph.infographic import theme
from infograph.notebook.models import format_date

Measure = Callable[[str], float]


class TextLine(BaseModel):
    text: str
    x: int
    y: int


class CardLayout(BaseModel):
    index: int
    top: int
    badge_center: tuple[int, int]
    lines: list[TextLine] = Field(default_factory=list)


class Layout(BaseModel):
    width: int = theme.CANVAS_WIDTH
    height: int = theme.CANVAS_HEIGHT
    title: TextLine
    cards: list[CardLayout] = Field(default_factory=list)
    footer: list[TextLine] = Field(default_factory=list)


def _split_word(word: str, max_width: float, measure: Measure) -> list[str]:
    """Break a word that is wider than the line into pieces that fit."""
    pieces: list[str] = []
    piece = ""
    for char in word:
        if piece and measure(piece + char) > max_width:
            pieces.append(piece)
            piece = char
        else:
            piece += char
    if piece:
        pieces.append(piece)
    return pieces


def wrap_words(text: str, max_width: float, measure: Measure, *, max_lines: int) -> list[str]:
    """Greedy word wrap.

    Words accumulate on a line until the next word would push it past
    `max_width`; then the line is emitted and a new one starts. Anything
    beyond `max_lines` is dropped.
    """
    lines: list[str] = []
    line = ""
    for word in text.split():
        candidate = f"{line} {word}" if line else word
        if measure(candidate) <= max_width:
            line = candidate
            continue
        if line:
            lines.append(line)
            if len(lines) == max_lines:
                return lines
        pieces = [word] if measure(word) <= max_width else _split_word(word, max_width, measure)
        for piece in pieces[:-1]:
            lines.append(piece)
            if len(lines) == max_lines:
                return lines
        line = pieces[-1]
    if line and len(lines) < max_lines:
        lines.append(line)
    return lines


def card_top(position: int) -> int:
    """Top edge of the card at 0-based `position`."""
    return theme.CARD_TOP + position * (theme.CARD_HEIGHT + theme.CARD_GAP)


def build_layout(statements: list[str], today: date, measure: Measure) -> Layout:
    cards: list[CardLayout] = []
    for position, statement in enumerate(statements):
        top = card_top(position)
        wrapped = wrap_words(statement, theme.TEXT_MAX_WIDTH, measure, max_lines=theme.TEXT_MAX_LINES)
        cards.append(
            CardLayout(
                index=position + 1,
                top=top,
                badge_center=(theme.BADGE_CENTER_X, top + theme.BADGE_OFFSET_Y),
                lines=[
                    TextLine(text=text, x=theme.TEXT_X, y=top + theme.TEXT_FIRST_BASELINE + i * theme.TEXT_LINE_HEIGHT)
                    for i, text in enumerate(wrapped)
                ],
            )
        )

    center = theme.CANVAS_WIDTH // 2
    return Layout(
        title=TextLine(text=theme.TITLE, x=center, y=theme.TITLE_Y),
        cards=cards,
        footer=[
            TextLine(text=theme.FOOTER_CAPTION, x=center, y=theme.FOOTER_CAPTION_Y),
            TextLine(text=format_date(today), x=center, y=theme.FOOTER_DATE_Y),
        ],
    )
