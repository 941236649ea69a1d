"""
Shapely views of a render plan: label box polygon, stroke lines, terminator polygon, bounds.
Used for checks and reporting only; the renderer itself works on plain tuples.
"""

from __future__ import annotations

from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from callout.core.types import Circle, RenderPlan


def label_box_polygon(plan: RenderPlan) -> Polygon:
    return Polygon(plan.label_box)


def path_line(points: tuple[tuple[float, float], ...] | None) -> BaseGeometry:
    """LineString through the points; a Point when all points coincide; empty when missing."""
    if not points:
        return LineString()
    if len(set(points)) < 2:
        return Point(points[0])
    return LineString(points)


def terminator_geometry(plan: RenderPlan) -> BaseGeometry:
    """Triangle polygon, circle (buffered point), or empty polygon."""
    shape = plan.terminator_shape
    if shape is None:
        return Polygon()
    if isinstance(shape, Circle):
        return Point(shape.center).buffer(shape.radius)
    return Polygon(shape)


def plan_geometry(plan: RenderPlan) -> BaseGeometry:
    """Union of everything the plan paints."""
    parts = [
        label_box_polygon(plan),
        path_line(plan.main_path),
        path_line(plan.underlay_path),
        terminator_geometry(plan),
    ]
    return unary_union([p for p in parts if not p.is_empty])


def plan_bounds(plan: RenderPlan) -> tuple[float, float, float, float]:
    """Return (minx, miny, maxx, maxy) of everything the plan paints."""
    geom = plan_geometry(plan)
    if geom.is_empty:
        return (0.0, 0.0, 0.0, 0.0)
    b = geom.bounds
    return (b[0], b[1], b[2], b[3])


def path_length(points: tuple[tuple[float, float], ...] | None) -> float:
    geom = path_line(points)
    return float(geom.length) if not geom.is_empty else 0.0
