"""
Input validation for the renderer, and post-hoc checks of a render plan against the label.
"""

from __future__ import annotations

import math
import numbers

from shapely.geometry import Point as ShapelyPoint

from callout.core import error_codes
from callout.core.geometry import label_box_polygon
from callout.core.types import (
    COORDINATE_SPACES,
    LINE_SHAPES,
    TERMINATORS,
    AnnotationGeometry,
    RenderPlan,
)
from callout.core.vector import is_finite_point


class AnnotationInputError(ValueError):
    """Renderer input rejected. `code` is a key from callout.core.error_codes."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def _finite_number(x: object) -> bool:
    try:
        return math.isfinite(float(x))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False


def validate_geometry_input(geom: AnnotationGeometry) -> None:
    """
    Raise AnnotationInputError for input that would otherwise produce NaN or invisible
    geometry. Degenerate but finite input (start == end) is accepted.
    """
    if not is_finite_point(geom.start) or not is_finite_point(geom.end):
        raise AnnotationInputError(
            error_codes.INVALID_COORDINATES,
            f"start and end must be finite (x, y) points, got {geom.start!r} -> {geom.end!r}",
        )
    if geom.line_shape not in LINE_SHAPES:
        raise AnnotationInputError(error_codes.UNKNOWN_LINE_SHAPE, f"Unknown line shape: {geom.line_shape!r}")
    if geom.terminator not in TERMINATORS:
        raise AnnotationInputError(error_codes.UNKNOWN_TERMINATOR, f"Unknown terminator: {geom.terminator!r}")
    if geom.coordinate_space not in COORDINATE_SPACES:
        raise AnnotationInputError(
            error_codes.UNKNOWN_COORDINATE_SPACE, f"Unknown coordinate space: {geom.coordinate_space!r}"
        )
    if isinstance(geom.label, bool) or not isinstance(geom.label, numbers.Integral) or geom.label < 1:
        raise AnnotationInputError(error_codes.INVALID_LABEL, f"label must be an integer >= 1, got {geom.label!r}")
    if not _finite_number(geom.curvature):
        raise AnnotationInputError(error_codes.INVALID_CURVATURE, f"curvature must be finite, got {geom.curvature!r}")
    for name in ("label_font_size", "terminator_size"):
        value = getattr(geom, name)
        if not _finite_number(value) or float(value) <= 0:
            raise AnnotationInputError(error_codes.INVALID_SIZE, f"{name} must be a positive number, got {value!r}")
    if not _finite_number(geom.label_gap) or float(geom.label_gap) < 0:
        raise AnnotationInputError(
            error_codes.INVALID_SIZE, f"label_gap must be a non-negative number, got {geom.label_gap!r}"
        )
    if geom.coordinate_space == "document":
        if geom.page_height is None or not _finite_number(geom.page_height) or float(geom.page_height) <= 0:
            raise AnnotationInputError(
                error_codes.MISSING_PAGE_HEIGHT,
                f"page_height must be a positive number in document space, got {geom.page_height!r}",
            )


def min_label_clearance(plan: RenderPlan) -> float:
    """Smallest distance from the label centre to any main_path vertex."""
    center = ShapelyPoint(plan.label_center)
    return min(float(center.distance(ShapelyPoint(p))) for p in plan.main_path)


def validate_plan_clear_of_label(plan: RenderPlan, exclusion_radius: float, tolerance: float = 1e-9) -> tuple[bool, float]:
    """
    True if every main_path vertex is at least exclusion_radius from the label centre.
    Also returns the min clearance. Zero-length plans (start == end) are reported as-is.
    """
    clearance = min_label_clearance(plan)
    return clearance >= exclusion_radius - tolerance, clearance


def main_path_starts_in_label_box(plan: RenderPlan) -> bool:
    """True if the first visible stroke point lies strictly inside the label box."""
    box = label_box_polygon(plan)
    return bool(box.contains(ShapelyPoint(plan.main_path[0])))
