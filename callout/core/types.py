"""
Dataclasses for annotation input, render plan output, and editor records.
Points are plain (x, y) tuples of floats.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from callout.core.config import (
    DEFAULT_CURVATURE,
    DEFAULT_LABEL_FONT_SIZE,
    DEFAULT_LABEL_GAP,
    DEFAULT_TERMINATOR_SIZE,
)

Point = tuple[float, float]

LineShape = Literal["straight", "curved", "s_curved"]
Terminator = Literal["none", "dot", "arrow"]
CoordinateSpace = Literal["screen", "document"]

LINE_SHAPES: tuple[str, ...] = ("straight", "curved", "s_curved")
TERMINATORS: tuple[str, ...] = ("none", "dot", "arrow")
COORDINATE_SPACES: tuple[str, ...] = ("screen", "document")


@dataclass(frozen=True)
class AnnotationGeometry:
    """
    Everything the renderer needs for one annotation.
    start/end are page coordinates as stored by the editor (origin top-left, Y down);
    coordinate_space selects the space of the returned plan.
    """
    start: Point
    end: Point
    line_shape: LineShape = "straight"
    terminator: Terminator = "none"
    label: int = 1
    curvature: float = DEFAULT_CURVATURE
    curve_flipped: bool = False
    label_font_size: float = DEFAULT_LABEL_FONT_SIZE
    terminator_size: float = DEFAULT_TERMINATOR_SIZE
    label_gap: float = DEFAULT_LABEL_GAP
    coordinate_space: CoordinateSpace = "screen"
    page_height: float | None = None


@dataclass(frozen=True)
class Circle:
    """Filled circle (dot terminator)."""
    center: Point
    radius: float


@dataclass(frozen=True)
class RenderPlan:
    """
    Visual geometry for one annotation, in the requested coordinate space.
    Transient: built per draw pass and discarded.
    """
    main_path: tuple[Point, ...]
    label_box: tuple[Point, Point, Point, Point]
    label_center: Point
    label_text: str
    label_font_size: float
    underlay_path: tuple[Point, ...] | None = None
    # Arrow: (tip, base_left, base_right). Dot: Circle.
    terminator_shape: tuple[Point, Point, Point] | Circle | None = None


@dataclass(frozen=True)
class RenderSettings:
    """Project-wide sizing shared by every annotation of a document."""
    label_font_size: float = DEFAULT_LABEL_FONT_SIZE
    terminator_size: float = DEFAULT_TERMINATOR_SIZE
    label_gap: float = DEFAULT_LABEL_GAP


@dataclass(frozen=True)
class Annotation:
    """Persisted annotation record owned by the editing layer."""
    id: str
    page: int
    start: Point
    end: Point
    label: int
    line_shape: LineShape = "straight"
    terminator: Terminator = "none"
    curvature: float = DEFAULT_CURVATURE
    curve_flipped: bool = False


@dataclass(frozen=True)
class PendingAnnotation:
    """First click placed; end point not chosen yet."""
    page: int
    start: Point
    label: int
    line_shape: LineShape = "straight"


@dataclass
class PageSpec:
    """One document page: size in points (1 pt = 1 editor unit) and optional background image."""
    page: int
    width: float
    height: float
    image_path: str | None = None


@dataclass
class CalloutDocument:
    """Everything the exporter needs: project sizing, pages in order, annotation records."""
    settings: RenderSettings = field(default_factory=RenderSettings)
    pages: list[PageSpec] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)

    def page(self, number: int) -> PageSpec | None:
        return next((p for p in self.pages if p.page == number), None)

    def annotations_on(self, number: int) -> list[Annotation]:
        return [a for a in self.annotations if a.page == number]
