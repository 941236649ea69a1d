"""
Label box: rectangle behind the number label, centred at the label anchor.
Width uses a monospace-digit heuristic; this is the only place font metrics are assumed,
so the editor overlay and the document exporter stay in sync.
"""

from __future__ import annotations

from callout.core.config import (
    LABEL_CHAR_WIDTH_RATIO,
    LABEL_PADDING_MIN,
    LABEL_PADDING_RATIO,
)
from callout.core.types import Point


def label_text(label: int) -> str:
    """Decimal text drawn for a label number."""
    return str(int(label))


def label_text_size(text: str, font_size: float) -> tuple[float, float]:
    """(width, height) of the label text: digit_count * font * 0.6 by font."""
    return (len(text) * font_size * LABEL_CHAR_WIDTH_RATIO, float(font_size))


def label_padding(font_size: float) -> float:
    return max(LABEL_PADDING_MIN, font_size * LABEL_PADDING_RATIO)


def label_box(center: Point, text: str, font_size: float) -> tuple[Point, Point, Point, Point]:
    """
    Four corners of the axis-aligned box, in order (x0, y0), (x1, y0), (x1, y1), (x0, y1)
    with x0 < x1 and y0 < y1. Horizontal padding is applied on both sides, vertical padding
    is split half above and half below the text.
    """
    cx, cy = center
    text_w, text_h = label_text_size(text, font_size)
    pad = label_padding(font_size)
    x0 = cx - text_w / 2.0 - pad
    y0 = cy - text_h / 2.0 - pad / 2.0
    w = text_w + pad * 2.0
    h = text_h + pad
    return ((x0, y0), (x0 + w, y0), (x0 + w, y0 + h), (x0, y0 + h))


def box_size(box: tuple[Point, Point, Point, Point]) -> tuple[float, float]:
    return (box[1][0] - box[0][0], box[2][1] - box[1][1])


def label_radius(text: str, font_size: float) -> float:
    """Exclusion radius around the label anchor: half the larger box side."""
    text_w, text_h = label_text_size(text, font_size)
    pad = label_padding(font_size)
    return max(text_w + pad * 2.0, text_h + pad) / 2.0
