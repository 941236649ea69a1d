"""
Bezier construction, fixed-resolution sampling and crop search for curved leader lines.

The ideal curve runs from the label centre (not the offset start) to the terminator-adjusted
end, so its direction near the label matches a line drawn from the number itself. The crop
search then drops the part of the curve hidden by the label.
"""

from __future__ import annotations

import numpy as np

from callout.core.config import (
    CURVATURE_MAX,
    CURVED_BEND_FACTOR,
    S_CURVE_CONTROL_FRACTIONS,
    S_CURVED_BEND_FACTOR,
)
from callout.core.types import CoordinateSpace, Point
from callout.core import vector


def curve_sign(curve_flipped: bool, coordinate_space: CoordinateSpace) -> float:
    """
    +1 / -1 bulge side. Document space is Y-mirrored, so the sign flips there too
    and the bulge lands on the same visual side as on screen.
    """
    sign = -1.0 if curve_flipped else 1.0
    if coordinate_space == "document":
        sign = -sign
    return sign


def bend_offset(start: Point, end: Point, curvature: float, factor: float, sign: float) -> Point:
    """
    Perpendicular control-point offset: unit normal * chord_length * curvature/100 * factor.
    The unnormalized normal of the chord already has chord length.
    """
    chord = vector.sub(end, start)
    k = (curvature / float(CURVATURE_MAX)) * factor * sign
    return vector.scale(vector.perpendicular(chord), k)


def quadratic_control_point(start: Point, end: Point, curvature: float, sign: float) -> Point:
    """Single control point: chord midpoint pushed sideways."""
    chord = vector.sub(end, start)
    offset = bend_offset(start, end, curvature, CURVED_BEND_FACTOR, sign)
    return vector.add(vector.add(start, vector.scale(chord, 0.5)), offset)


def s_curve_control_points(
    start: Point, end: Point, curvature: float, sign: float
) -> tuple[Point, Point]:
    """Two control points at the chord's 1/3 and 2/3 marks, pushed to opposite sides."""
    f1, f2 = S_CURVE_CONTROL_FRACTIONS
    chord = vector.sub(end, start)
    offset = bend_offset(start, end, curvature, S_CURVED_BEND_FACTOR, sign)
    cp1 = vector.add(vector.add(start, vector.scale(chord, f1)), offset)
    cp2 = vector.sub(vector.add(start, vector.scale(chord, f2)), offset)
    return cp1, cp2


def s_curve_end_control_point(
    start: Point, end: Point, line_end: Point, curvature: float, sign: float
) -> Point:
    """
    Second control point re-derived along start -> line_end, keeping the offset measured on
    the full chord. Used when an arrow pulls the curve end back from end.
    """
    f2 = S_CURVE_CONTROL_FRACTIONS[1]
    offset = bend_offset(start, end, curvature, S_CURVED_BEND_FACTOR, sign)
    along = vector.scale(vector.sub(line_end, start), f2)
    return vector.sub(vector.add(start, along), offset)


def quadratic_end_tangent(cp: Point, end: Point) -> Point:
    """Derivative of the quadratic at t = 1."""
    return vector.scale(vector.sub(end, cp), 2.0)


def cubic_end_tangent(cp2: Point, end: Point) -> Point:
    """Derivative of the cubic at t = 1."""
    return vector.scale(vector.sub(end, cp2), 3.0)


def _params(segments: int) -> np.ndarray:
    # i / segments exactly, so t = 0 and t = 1 hit the endpoints bit-for-bit
    return (np.arange(segments + 1, dtype=float) / float(segments))[:, None]


def sample_quadratic(p0: Point, cp: Point, p2: Point, segments: int) -> np.ndarray:
    """(segments + 1, 2) array of points on the quadratic Bezier."""
    t = _params(segments)
    omt = 1.0 - t
    a0 = np.asarray(p0, dtype=float)
    a1 = np.asarray(cp, dtype=float)
    a2 = np.asarray(p2, dtype=float)
    return omt * omt * a0 + 2.0 * omt * t * a1 + t * t * a2


def sample_cubic(p0: Point, cp1: Point, cp2: Point, p3: Point, segments: int) -> np.ndarray:
    """(segments + 1, 2) array of points on the cubic Bezier."""
    t = _params(segments)
    omt = 1.0 - t
    a0 = np.asarray(p0, dtype=float)
    a1 = np.asarray(cp1, dtype=float)
    a2 = np.asarray(cp2, dtype=float)
    a3 = np.asarray(p3, dtype=float)
    return (
        omt * omt * omt * a0
        + 3.0 * omt * omt * t * a1
        + 3.0 * omt * t * t * a2
        + t * t * t * a3
    )


def crop_index(
    samples: np.ndarray,
    target: Point,
    center: Point,
    exclusion_radius: float,
) -> int | None:
    """
    Index of the sample nearest to target, searched only after the last sample lying
    inside exclusion_radius of center. Always leaves at least two samples after the
    crop. None when no sample qualifies (the curve ends inside the label).
    """
    n = samples.shape[0]
    if n < 2:
        return None
    from_center = np.hypot(samples[:, 0] - center[0], samples[:, 1] - center[1])
    inside = np.nonzero(from_center < exclusion_radius)[0]
    first = int(inside[-1]) + 1 if inside.size else 0
    if first > n - 2:
        return None
    to_target = np.hypot(samples[first:, 0] - target[0], samples[first:, 1] - target[1])
    # argmin returns the first minimum, so ties resolve toward the label
    idx = first + int(np.argmin(to_target))
    return min(idx, n - 2)


def to_points(samples: np.ndarray) -> tuple[Point, ...]:
    return tuple((float(x), float(y)) for x, y in samples)


def crop_curve(
    samples: np.ndarray,
    line_start: Point,
    center: Point,
    exclusion_radius: float,
) -> tuple[tuple[Point, ...], tuple[Point, ...] | None] | None:
    """
    Split sampled ideal curve into (main_path, underlay_path).
    underlay_path bridges line_start to the visible curve start; None when the crop is at
    index 0, in which case main_path starts exactly at line_start.
    """
    idx = crop_index(samples, line_start, center, exclusion_radius)
    if idx is None:
        return None
    main = to_points(samples[idx:])
    if idx == 0:
        return ((line_start,) + main[1:], None)
    return (main, (line_start, main[0]))
