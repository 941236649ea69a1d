"""
Scalar and 2D vector helpers on plain (x, y) tuples.
"""

from __future__ import annotations

import math

from callout.core.types import Point


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def scale(v: Point, k: float) -> Point:
    return (v[0] * k, v[1] * k)


def length(v: Point) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1])


def distance(a: Point, b: Point) -> float:
    return length(sub(a, b))


def unit(v: Point) -> Point:
    """Unit vector; (0, 0) for a zero vector."""
    n = length(v)
    if n == 0:
        return (0.0, 0.0)
    return (v[0] / n, v[1] / n)


def perpendicular(v: Point) -> Point:
    """Left-hand normal (-y, x); same length as v."""
    return (-v[1], v[0])


def angle(v: Point) -> float:
    """Direction of v in radians; atan2(0, 0) is 0."""
    return math.atan2(v[1], v[0])



def point_along(origin: Point, theta: float, dist: float) -> Point:
    """origin moved dist along direction theta (negative dist moves backwards)."""
    return (origin[0] + dist * math.cos(theta), origin[1] + dist * math.sin(theta))


def reflect_y(p: Point, page_height: float) -> Point:
    """Reflect about the horizontal line y = page_height / 2 (screen <-> document)."""
    return (p[0], page_height - p[1])


def is_finite_point(p: Point) -> bool:
    try:
        return len(p) == 2 and math.isfinite(float(p[0])) and math.isfinite(float(p[1]))
    except (TypeError, ValueError):
        return False


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))
