"""
Top-level annotation renderer: geometry inputs -> RenderPlan.

Pure and stateless; the on-screen overlay and the document exporter both call it, so what
the user sees in the editor is what ends up in the document. Document space is handled by
reflecting the inputs about the page height once, before any other math.
"""

from __future__ import annotations

from callout.core.config import (
    CURVATURE_MAX,
    CURVATURE_MIN,
    CURVED_SEGMENTS,
    DEFAULT_CURVATURE,
    DEFAULT_LABEL_FONT_SIZE,
    DEFAULT_LABEL_GAP,
    DEFAULT_TERMINATOR_SIZE,
    S_CURVED_SEGMENTS,
)
from callout.core import curves, terminators, vector
from callout.core.label_box import label_box, label_radius, label_text
from callout.core.types import (
    Annotation,
    AnnotationGeometry,
    CoordinateSpace,
    LineShape,
    Point,
    RenderPlan,
    RenderSettings,
    Terminator,
)
from callout.core.validate import validate_geometry_input


def _working_points(geom: AnnotationGeometry) -> tuple[Point, Point]:
    start = (float(geom.start[0]), float(geom.start[1]))
    end = (float(geom.end[0]), float(geom.end[1]))
    if geom.coordinate_space == "document":
        h = float(geom.page_height)  # type: ignore[arg-type]
        return vector.reflect_y(start, h), vector.reflect_y(end, h)
    return start, end


def _straight(
    end: Point,
    line_start: Point,
    chord: Point,
    terminator: Terminator,
    terminator_size: float,
) -> tuple[tuple[Point, ...], float]:
    """Two-point stroke from line_start to end (or to the arrow setback). Returns (path, arrow angle)."""
    theta = vector.angle(chord)
    line_end = end
    if terminator == "arrow":
        line_end = terminators.arrow_setback(end, theta, terminator_size)
    return (line_start, line_end), theta


def _curved(
    start: Point,
    end: Point,
    line_start: Point,
    radius: float,
    geom: AnnotationGeometry,
    curvature: float,
    terminator_size: float,
) -> tuple[tuple[Point, ...], tuple[Point, ...] | None, float] | None:
    """
    Quadratic or cubic ideal curve from the label centre, cropped outside the label.
    Returns (main_path, underlay_path, arrow angle), or None when the curve never leaves
    the label (caller falls back to the straight geometry).
    """
    chord = vector.sub(end, start)
    sign = curves.curve_sign(geom.curve_flipped, geom.coordinate_space)
    arrow = geom.terminator == "arrow"
    theta = vector.angle(chord)
    line_end = end

    if geom.line_shape == "curved":
        cp = curves.quadratic_control_point(start, end, curvature, sign)
        if arrow:
            theta = terminators.arrow_angle(curves.quadratic_end_tangent(cp, end), chord)
            line_end = terminators.arrow_setback(end, theta, terminator_size)
        samples = curves.sample_quadratic(start, cp, line_end, CURVED_SEGMENTS)
    else:
        cp1, cp2 = curves.s_curve_control_points(start, end, curvature, sign)
        if arrow:
            theta = terminators.arrow_angle(curves.cubic_end_tangent(cp2, end), chord)
            line_end = terminators.arrow_setback(end, theta, terminator_size)
            cp2 = curves.s_curve_end_control_point(start, end, line_end, curvature, sign)
        samples = curves.sample_cubic(start, cp1, cp2, line_end, S_CURVED_SEGMENTS)

    cropped = curves.crop_curve(samples, line_start, start, radius)
    if cropped is None:
        return None
    main_path, underlay = cropped
    return main_path, underlay, theta


def render_geometry(geom: AnnotationGeometry) -> RenderPlan:
    """
    Compute the render plan for one annotation.
    Raises AnnotationInputError (a ValueError) for non-finite or out-of-domain input;
    degenerate geometry (start == end, zero tangent) never raises.
    """
    validate_geometry_input(geom)
    start, end = _working_points(geom)
    curvature = vector.clamp(float(geom.curvature), CURVATURE_MIN, CURVATURE_MAX)
    font_size = float(geom.label_font_size)
    terminator_size = float(geom.terminator_size)
    gap = float(geom.label_gap)

    text = label_text(geom.label)
    box = label_box(start, text, font_size)
    radius = label_radius(text, font_size)

    chord = vector.sub(end, start)
    underlay: tuple[Point, ...] | None = None

    if vector.length(chord) == 0:
        # Nothing to orient against: zero-length stroke at the anchor, arrow at angle 0
        main_path: tuple[Point, ...] = (end, end)
        theta = 0.0
    else:
        line_start = vector.add(start, vector.scale(vector.unit(chord), radius + gap))
        curved = None
        if geom.line_shape != "straight" and curvature > 0:
            curved = _curved(start, end, line_start, radius, geom, curvature, terminator_size)
        if curved is None:
            main_path, theta = _straight(end, line_start, chord, geom.terminator, terminator_size)
        else:
            main_path, underlay, theta = curved

    terminator_shape = None
    if geom.terminator == "arrow":
        terminator_shape = terminators.arrow(end, theta, terminator_size)
    elif geom.terminator == "dot":
        terminator_shape = terminators.dot(end, terminator_size)

    return RenderPlan(
        main_path=main_path,
        underlay_path=underlay,
        terminator_shape=terminator_shape,
        label_box=box,
        label_center=start,
        label_text=text,
        label_font_size=font_size,
    )


def render_annotation(
    start: Point,
    end: Point,
    line_shape: LineShape = "straight",
    terminator: Terminator = "none",
    label: int = 1,
    curvature: float = DEFAULT_CURVATURE,
    curve_flipped: bool = False,
    label_font_size: float = DEFAULT_LABEL_FONT_SIZE,
    terminator_size: float = DEFAULT_TERMINATOR_SIZE,
    coordinate_space: CoordinateSpace = "screen",
    page_height: float | None = None,
    label_gap: float = DEFAULT_LABEL_GAP,
) -> RenderPlan:
    """Keyword form of render_geometry."""
    return render_geometry(
        AnnotationGeometry(
            start=start,
            end=end,
            line_shape=line_shape,
            terminator=terminator,
            label=label,
            curvature=curvature,
            curve_flipped=curve_flipped,
            label_font_size=label_font_size,
            terminator_size=terminator_size,
            label_gap=label_gap,
            coordinate_space=coordinate_space,
            page_height=page_height,
        )
    )


def geometry_for_record(
    annotation: Annotation,
    settings: RenderSettings,
    coordinate_space: CoordinateSpace = "screen",
    page_height: float | None = None,
) -> AnnotationGeometry:
    """Combine a stored record with the project sizing."""
    return AnnotationGeometry(
        start=annotation.start,
        end=annotation.end,
        line_shape=annotation.line_shape,
        terminator=annotation.terminator,
        label=annotation.label,
        curvature=annotation.curvature,
        curve_flipped=annotation.curve_flipped,
        label_font_size=settings.label_font_size,
        terminator_size=settings.terminator_size,
        label_gap=settings.label_gap,
        coordinate_space=coordinate_space,
        page_height=page_height,
    )


def render_record(
    annotation: Annotation,
    settings: RenderSettings,
    coordinate_space: CoordinateSpace = "screen",
    page_height: float | None = None,
) -> RenderPlan:
    """Render a stored record; the call both draw adapters make."""
    return render_geometry(geometry_for_record(annotation, settings, coordinate_space, page_height))
