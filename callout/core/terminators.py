"""
Terminator geometry at the far end of the leader line: arrowhead triangle or dot.
"""

from __future__ import annotations

import math

from callout.core.config import ARROW_HALF_WIDTH_RATIO, DOT_RADIUS_RATIO
from callout.core.types import Circle, Point
from callout.core import vector


def dot(end: Point, terminator_size: float) -> Circle:
    """Filled circle centred at end."""
    return Circle(center=(end[0], end[1]), radius=terminator_size * DOT_RADIUS_RATIO)


def arrow_angle(tangent: Point, chord: Point) -> float:
    """
    Arrow direction in radians from the path tangent at the end.
    Zero-length tangent falls back to the chord; zero chord gives angle 0.
    """
    if vector.length(tangent) == 0:
        return vector.angle(chord)
    return vector.angle(tangent)


def arrow_setback(end: Point, theta: float, terminator_size: float) -> Point:
    """Where the stroke stops: end moved back along theta, tucked under the arrowhead."""
    return vector.point_along(end, theta, -terminator_size)


def arrow(end: Point, theta: float, terminator_size: float) -> tuple[Point, Point, Point]:
    """Isosceles triangle (tip, base_left, base_right) with its apex exactly at end."""
    half_w = terminator_size * ARROW_HALF_WIDTH_RATIO
    cos_a = math.cos(theta)
    sin_a = math.sin(theta)
    bx = end[0] - terminator_size * cos_a
    by = end[1] - terminator_size * sin_a
    base_left = (bx - half_w * sin_a, by + half_w * cos_a)
    base_right = (bx + half_w * sin_a, by - half_w * cos_a)
    return ((end[0], end[1]), base_left, base_right)
