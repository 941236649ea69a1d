"""
Interactive overlay: draw render plans into a screen-space SVG layer scaled by the zoom factor.
Painter's order per annotation: selection highlight, underlay, main path, terminator,
label box, label text.
"""

from __future__ import annotations

import base64
import io
import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from PIL import Image

from callout.core.config import (
    BACKGROUND_COLOR,
    DEFAULT_ZOOM,
    FOREGROUND_COLOR,
    HIGHLIGHT_BOX_CORNER_RADIUS,
    HIGHLIGHT_BOX_OPACITY,
    HIGHLIGHT_COLOR,
    HIGHLIGHT_EXTRA_WIDTH,
    HIGHLIGHT_OPACITY,
    LABEL_BASELINE_OFFSET_RATIO,
    LABEL_FONT_FAMILY,
    LABEL_FONT_WEIGHT,
    PENDING_DOT_RADIUS_PX,
    STROKE_WIDTH,
)
from callout.core.label_box import box_size
from callout.core.renderer import render_record
from callout.core.types import Annotation, Circle, PageSpec, PendingAnnotation, Point, RenderPlan, RenderSettings
from callout.core.validate import AnnotationInputError

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def _fmt(v: float) -> str:
    return f"{v:.4f}"


def _path_d(points: tuple[Point, ...], zoom: float, closed: bool = False) -> str:
    """Polyline to SVG path d (M L L ...), coordinates multiplied by zoom."""
    if not points:
        return ""
    parts = [f"M {_fmt(points[0][0] * zoom)} {_fmt(points[0][1] * zoom)}"]
    for x, y in points[1:]:
        parts.append(f"L {_fmt(x * zoom)} {_fmt(y * zoom)}")
    if closed:
        parts.append("Z")
    return " ".join(parts)


def _stroke(parent: ET.Element, points: tuple[Point, ...], zoom: float, color: str, width: float, css: str, **extra: str) -> None:
    ET.SubElement(
        parent,
        "path",
        {
            "class": css,
            "d": _path_d(points, zoom),
            "stroke": color,
            "stroke-width": _fmt(width * zoom),
            "fill": "none",
            **extra,
        },
    )


def _draw_highlight(g: ET.Element, plan: RenderPlan, zoom: float) -> None:
    """Wider translucent copy of every painted part, drawn behind the annotation."""
    opacity = str(HIGHLIGHT_OPACITY)
    width = STROKE_WIDTH + HIGHLIGHT_EXTRA_WIDTH
    _stroke(g, plan.main_path, zoom, HIGHLIGHT_COLOR, width, "highlight", opacity=opacity)
    if plan.underlay_path:
        _stroke(g, plan.underlay_path, zoom, HIGHLIGHT_COLOR, width, "highlight", opacity=opacity)
    shape = plan.terminator_shape
    if isinstance(shape, Circle):
        ET.SubElement(
            g,
            "circle",
            {
                "class": "highlight",
                "cx": _fmt(shape.center[0] * zoom),
                "cy": _fmt(shape.center[1] * zoom),
                "r": _fmt((shape.radius + HIGHLIGHT_EXTRA_WIDTH) * zoom),
                "fill": HIGHLIGHT_COLOR,
                "opacity": opacity,
            },
        )
    elif shape is not None:
        ET.SubElement(
            g,
            "path",
            {
                "class": "highlight",
                "d": _path_d(shape, zoom, closed=True),
                "stroke": HIGHLIGHT_COLOR,
                "stroke-width": _fmt(width * zoom),
                "fill": HIGHLIGHT_COLOR,
                "opacity": opacity,
            },
        )
    (x0, y0) = plan.label_box[0]
    w, h = box_size(plan.label_box)
    pad = HIGHLIGHT_EXTRA_WIDTH
    ET.SubElement(
        g,
        "rect",
        {
            "class": "highlight",
            "x": _fmt((x0 - pad) * zoom),
            "y": _fmt((y0 - pad) * zoom),
            "width": _fmt((w + 2 * pad) * zoom),
            "height": _fmt((h + 2 * pad) * zoom),
            "rx": _fmt(HIGHLIGHT_BOX_CORNER_RADIUS * zoom),
            "fill": HIGHLIGHT_COLOR,
            "opacity": str(HIGHLIGHT_BOX_OPACITY),
        },
    )


def draw_plan(parent: ET.Element, plan: RenderPlan, zoom: float = DEFAULT_ZOOM, selected: bool = False, group_id: str | None = None) -> ET.Element:
    """Append one annotation group to parent and return it."""
    attrs = {"class": "annotation"}
    if group_id:
        attrs["id"] = group_id
    g = ET.SubElement(parent, "g", attrs)
    if selected:
        _draw_highlight(g, plan, zoom)

    if plan.underlay_path:
        _stroke(g, plan.underlay_path, zoom, BACKGROUND_COLOR, STROKE_WIDTH, "underlay")
    _stroke(g, plan.main_path, zoom, FOREGROUND_COLOR, STROKE_WIDTH, "main-path")

    shape = plan.terminator_shape
    if isinstance(shape, Circle):
        ET.SubElement(
            g,
            "circle",
            {
                "class": "terminator",
                "cx": _fmt(shape.center[0] * zoom),
                "cy": _fmt(shape.center[1] * zoom),
                "r": _fmt(shape.radius * zoom),
                "fill": FOREGROUND_COLOR,
            },
        )
    elif shape is not None:
        ET.SubElement(
            g,
            "path",
            {
                "class": "terminator",
                "d": _path_d(shape, zoom, closed=True),
                "stroke": FOREGROUND_COLOR,
                "stroke-width": _fmt(STROKE_WIDTH * zoom),
                "fill": FOREGROUND_COLOR,
            },
        )

    (x0, y0) = plan.label_box[0]
    w, h = box_size(plan.label_box)
    ET.SubElement(
        g,
        "rect",
        {
            "class": "label-box",
            "x": _fmt(x0 * zoom),
            "y": _fmt(y0 * zoom),
            "width": _fmt(w * zoom),
            "height": _fmt(h * zoom),
            "fill": BACKGROUND_COLOR,
            "stroke": "none",
        },
    )
    cx, cy = plan.label_center
    text = ET.SubElement(
        g,
        "text",
        {
            "class": "label-text",
            "x": _fmt(cx * zoom),
            "y": _fmt((cy + plan.label_font_size * LABEL_BASELINE_OFFSET_RATIO) * zoom),
            "font-family": LABEL_FONT_FAMILY,
            "font-size": _fmt(plan.label_font_size * zoom),
            "font-weight": LABEL_FONT_WEIGHT,
            "fill": FOREGROUND_COLOR,
            "text-anchor": "middle",
        },
    )
    text.text = plan.label_text
    return g


def _image_data_uri(image_path: str | Path) -> str:
    """Page image as a base64 PNG data URI so the SVG stays self-contained."""
    with Image.open(image_path) as img:
        buf = io.BytesIO()
        img.convert("RGB").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def build_overlay_svg(
    page: PageSpec,
    annotations: list[Annotation],
    settings: RenderSettings,
    zoom: float = DEFAULT_ZOOM,
    selected_id: str | None = None,
    pending: PendingAnnotation | None = None,
    embed_image: bool = True,
) -> ET.Element:
    """
    SVG root for one page at the given zoom. Annotations on other pages are ignored;
    an annotation the renderer rejects is skipped and logged, the rest still draw.
    """
    vw = max(1.0, page.width * zoom)
    vh = max(1.0, page.height * zoom)
    # Plain tag names with xmlns set once, as in a hand-written SVG
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "xmlns:xlink": XLINK_NS,
            "width": _fmt(vw),
            "height": _fmt(vh),
            "viewBox": f"0 0 {_fmt(vw)} {_fmt(vh)}",
        },
    )
    if embed_image and page.image_path:
        href = _image_data_uri(page.image_path)
        ET.SubElement(
            root,
            "image",
            {
                "href": href,
                "xlink:href": href,
                "x": "0",
                "y": "0",
                "width": _fmt(vw),
                "height": _fmt(vh),
                "preserveAspectRatio": "none",
            },
        )

    layer = ET.SubElement(root, "g", {"id": "annotations"})
    drawn = 0
    for annotation in annotations:
        if annotation.page != page.page:
            continue
        try:
            plan = render_record(annotation, settings, coordinate_space="screen")
        except AnnotationInputError as e:
            logger.warning("Skipping annotation %s on page %d: %s", annotation.id, page.page, e)
            continue
        draw_plan(layer, plan, zoom, selected=annotation.id == selected_id, group_id=f"annotation-{annotation.id}")
        drawn += 1

    if pending is not None and pending.page == page.page:
        ET.SubElement(
            layer,
            "circle",
            {
                "class": "pending",
                "cx": _fmt(pending.start[0] * zoom),
                "cy": _fmt(pending.start[1] * zoom),
                "r": _fmt(PENDING_DOT_RADIUS_PX),
                "fill": FOREGROUND_COLOR,
            },
        )
    logger.debug("Overlay page %d: drew %d annotation(s) at zoom %.2f", page.page, drawn, zoom)
    return root


def overlay_svg_string(root: ET.Element) -> str:
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode", method="xml")


def export_overlay_svg(
    page: PageSpec,
    annotations: list[Annotation],
    settings: RenderSettings,
    out_path: str | Path,
    zoom: float = DEFAULT_ZOOM,
    selected_id: str | None = None,
    embed_image: bool = True,
) -> Path:
    """Write the overlay for one page as a self-contained SVG file. Returns the path."""
    root = build_overlay_svg(page, annotations, settings, zoom=zoom, selected_id=selected_id, embed_image=embed_image)
    out = Path(out_path)
    out.write_text(overlay_svg_string(root), encoding="utf-8")
    return out
