"""
Create reports/<run_name>/ and write plans.json and run_metadata.json.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from callout.core.config import (
    CURVED_BEND_FACTOR,
    CURVED_SEGMENTS,
    LABEL_CHAR_WIDTH_RATIO,
    LABEL_PADDING_MIN,
    LABEL_PADDING_RATIO,
    REPORTS_DIR,
    S_CURVE_CONTROL_FRACTIONS,
    S_CURVED_BEND_FACTOR,
    S_CURVED_SEGMENTS,
    SCHEMA_VERSION,
    STROKE_WIDTH,
)
from callout.core.geometry import path_length, plan_bounds
from callout.core.label_box import label_radius
from callout.core.types import Annotation, CalloutDocument, Circle, CoordinateSpace, RenderPlan
from callout.core.validate import AnnotationInputError, validate_plan_clear_of_label
from callout.core.renderer import render_record


def _pts(points) -> list[dict]:
    return [{"x": float(x), "y": float(y)} for x, y in (points or [])]


def plan_to_dict(plan: RenderPlan) -> dict:
    """JSON structure for one plan. terminator is null, a triangle or a circle."""
    shape = plan.terminator_shape
    if isinstance(shape, Circle):
        terminator = {"type": "circle", "center": _pts([shape.center])[0], "radius": shape.radius}
    elif shape is not None:
        terminator = {"type": "triangle", "points": _pts(shape)}
    else:
        terminator = None
    return {
        "main_path": _pts(plan.main_path),
        "underlay_path": _pts(plan.underlay_path) if plan.underlay_path else None,
        "terminator": terminator,
        "label": {
            "text": plan.label_text,
            "font_size": plan.label_font_size,
            "center": _pts([plan.label_center])[0],
            "box": _pts(plan.label_box),
        },
    }


def plan_metrics(plan: RenderPlan) -> dict:
    radius = label_radius(plan.label_text, plan.label_font_size)
    clear, clearance = validate_plan_clear_of_label(plan, radius)
    return {
        "label_radius": radius,
        "min_label_clearance": clearance,
        "clear_of_label": clear,
        "main_path_points": len(plan.main_path),
        "main_path_length": path_length(plan.main_path),
        "has_underlay": plan.underlay_path is not None,
        "bounds": list(plan_bounds(plan)),
    }


def document_plans(doc: CalloutDocument, coordinate_space: CoordinateSpace = "document") -> list[dict]:
    """
    One entry per annotation: plan and metrics, or the rejection reason.
    Rejected annotations are reported rather than raised.
    """
    out: list[dict] = []
    for a in doc.annotations:
        page = doc.page(a.page)
        height = page.height if page is not None else None
        entry: dict = {"id": a.id, "page": a.page, "label": a.label, "coordinate_space": coordinate_space}
        try:
            plan = render_record(a, doc.settings, coordinate_space=coordinate_space, page_height=height)
        except AnnotationInputError as e:
            entry["error"] = {"code": e.code, "message": str(e)}
        else:
            entry["plan"] = plan_to_dict(plan)
            entry["metrics"] = plan_metrics(plan)
        out.append(entry)
    return out


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """Create output_dir/<run_name>/ under repo_root; return path. Default output_dir from config."""
    base = output_dir if output_dir is not None else REPORTS_DIR
    out = (repo_root / base).resolve() / run_name
    out.mkdir(parents=True, exist_ok=True)
    return out


def write_plans_json(report_dir: Path, doc: CalloutDocument, coordinate_space: CoordinateSpace = "document") -> Path:
    """Write plans.json to report_dir. Returns path to file."""
    path = report_dir / "plans.json"
    data = {
        "schema_version": SCHEMA_VERSION,
        "coordinate_space": coordinate_space,
        "pages": [{"page": p.page, "width": p.width, "height": p.height} for p in doc.pages],
        "annotations": document_plans(doc, coordinate_space),
    }
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def run_metadata_dict(
    run_name: str,
    annotations_path: str,
    doc: CalloutDocument,
    zoom: float,
    skipped: list[str],
) -> dict:
    """Timestamp and config snapshot for run_metadata.json."""
    return {
        "run_name": run_name,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "annotations_path": annotations_path,
        "n_pages": len(doc.pages),
        "n_annotations": len(doc.annotations),
        "skipped_annotations": list(skipped),
        "zoom": zoom,
        "settings": {
            "label_font_size": doc.settings.label_font_size,
            "terminator_size": doc.settings.terminator_size,
            "label_gap": doc.settings.label_gap,
        },
        "config": {
            "CURVED_BEND_FACTOR": CURVED_BEND_FACTOR,
            "S_CURVED_BEND_FACTOR": S_CURVED_BEND_FACTOR,
            "S_CURVE_CONTROL_FRACTIONS": list(S_CURVE_CONTROL_FRACTIONS),
            "CURVED_SEGMENTS": CURVED_SEGMENTS,
            "S_CURVED_SEGMENTS": S_CURVED_SEGMENTS,
            "LABEL_CHAR_WIDTH_RATIO": LABEL_CHAR_WIDTH_RATIO,
            "LABEL_PADDING_MIN": LABEL_PADDING_MIN,
            "LABEL_PADDING_RATIO": LABEL_PADDING_RATIO,
            "STROKE_WIDTH": STROKE_WIDTH,
        },
    }


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    annotations_path: str,
    doc: CalloutDocument,
    zoom: float,
    skipped: list[str],
) -> Path:
    """Write run_metadata.json to report_dir."""
    path = report_dir / "run_metadata.json"
    data = run_metadata_dict(run_name, annotations_path, doc, zoom, skipped)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def annotation_summary(annotations: list[Annotation]) -> dict[str, int]:
    """Counts by line shape and terminator, for the UI metrics table."""
    out: dict[str, int] = {"total": len(annotations)}
    for a in annotations:
        out[f"line_{a.line_shape}"] = out.get(f"line_{a.line_shape}", 0) + 1
        out[f"ending_{a.terminator}"] = out.get(f"ending_{a.terminator}", 0) + 1
    return out
