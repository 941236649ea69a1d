"""
Load and save annotation records (JSON) and read page sizes from page images.
Coordinates in the records are editor page units (origin top-left, Y down); one unit is one
point in the exported document.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from PIL import Image

from callout.core import error_codes
from callout.core.config import (
    DEFAULT_CURVATURE,
    DEFAULT_PAGE_HEIGHT_PT,
    DEFAULT_PAGE_WIDTH_PT,
    SCHEMA_VERSION,
)
from callout.core.types import (
    LINE_SHAPES,
    TERMINATORS,
    Annotation,
    CalloutDocument,
    PageSpec,
    Point,
    RenderSettings,
)
from callout.core.validate import AnnotationInputError

# Spellings written by older editor builds
_LINE_SHAPE_ALIASES: dict[str, str] = {"s-curved": "s_curved", "scurved": "s_curved", "s_curve": "s_curved"}

# Field names used by the browser editor's saved projects
_RECORD_KEY_ALIASES: dict[str, str] = {
    "number": "label",
    "lineType": "line_shape",
    "endType": "terminator",
    "curveFlipped": "curve_flipped",
}

_FLAG_STRINGS: dict[str, bool] = {"true": True, "false": False, "1": True, "0": False}


def _resolve_path(path: str | Path, repo_root: Path | None) -> Path:
    """Resolve path; if relative, against repo_root (or cwd if repo_root is None)."""
    p = Path(path)
    if not p.is_absolute() and repo_root is not None:
        p = repo_root / p
    return p.resolve()


def _bad(message: str) -> AnnotationInputError:
    return AnnotationInputError(error_codes.INVALID_RECORDS, message)


def _point(value: Any, what: str) -> Point:
    """Accept {"x": .., "y": ..} or [x, y]."""
    if isinstance(value, dict) and "x" in value and "y" in value:
        xy = (value["x"], value["y"])
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        xy = (value[0], value[1])
    else:
        raise _bad(f"{what} must be {{'x': .., 'y': ..}} or [x, y], got {value!r}")
    try:
        return (float(xy[0]), float(xy[1]))
    except (TypeError, ValueError):
        raise _bad(f"{what} coordinates must be numbers, got {value!r}") from None


def parse_line_shape(value: Any) -> str:
    s = str(value or "straight").strip().lower()
    s = _LINE_SHAPE_ALIASES.get(s, s)
    if s not in LINE_SHAPES:
        raise _bad(f"Unknown line shape: {value!r}")
    return s


def parse_terminator(value: Any) -> str:
    s = str(value or "none").strip().lower()
    if s not in TERMINATORS:
        raise _bad(f"Unknown terminator: {value!r}")
    return s


def _flag(value: Any, what: str) -> bool:
    """JSON boolean, 0/1, or the strings "true"/"false" (any case)."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _FLAG_STRINGS:
        return _FLAG_STRINGS[value.strip().lower()]
    raise _bad(f"{what} must be true or false, got {value!r}")


def _endpoint(data: dict[str, Any], name: str, index: int) -> Point:
    """data[name], or the flat data[nameX] / data[nameY] pair of editor exports."""
    if name not in data and f"{name}X" in data and f"{name}Y" in data:
        return _point([data[f"{name}X"], data[f"{name}Y"]], f"annotation #{index} {name}")
    return _point(data.get(name), f"annotation #{index} {name}")


def parse_annotation(data: dict[str, Any], index: int = 0) -> Annotation:
    """
    One record. Missing id gets a positional id; curvature defaults to DEFAULT_CURVATURE.
    Editor field names (number, lineType, endType, curveFlipped, startX ...) are accepted.
    """
    if not isinstance(data, dict):
        raise _bad(f"Annotation #{index} must be an object, got {type(data).__name__}")
    data = {**{_RECORD_KEY_ALIASES[k]: v for k, v in data.items() if k in _RECORD_KEY_ALIASES}, **data}
    try:
        label = int(data.get("label"))
        page = int(data.get("page", 1))
    except (TypeError, ValueError):
        raise _bad(f"Annotation #{index} needs integer 'label' and 'page'") from None
    curvature = data.get("curvature")
    try:
        curvature = float(DEFAULT_CURVATURE if curvature is None else curvature)
    except (TypeError, ValueError):
        raise _bad(f"Annotation #{index} curvature must be a number, got {curvature!r}") from None
    return Annotation(
        id=str(data.get("id") or f"ann_{index:04d}"),
        page=page,
        start=_endpoint(data, "start", index),
        end=_endpoint(data, "end", index),
        label=label,
        line_shape=parse_line_shape(data.get("line_shape")),  # type: ignore[arg-type]
        terminator=parse_terminator(data.get("terminator")),  # type: ignore[arg-type]
        curvature=curvature,
        curve_flipped=_flag(data.get("curve_flipped"), f"annotation #{index} curve_flipped"),
    )


def page_size_from_image(image_path: str | Path) -> tuple[float, float]:
    """(width, height) of the image in pixels; one pixel is one page unit."""
    with Image.open(image_path) as img:
        w, h = img.size
    return (float(w), float(h))


def _number(data: dict[str, Any], key: str, default: float | None, what: str) -> float | None:
    value = data.get(key, default)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise _bad(f"{what} '{key}' must be a number, got {value!r}") from None


def _parse_settings(data: Any) -> RenderSettings:
    if not isinstance(data, dict):
        raise _bad(f"'settings' must be an object, got {type(data).__name__}")
    defaults = RenderSettings()
    return RenderSettings(
        label_font_size=_number(data, "label_font_size", defaults.label_font_size, "settings"),
        terminator_size=_number(data, "terminator_size", defaults.terminator_size, "settings"),
        label_gap=_number(data, "label_gap", defaults.label_gap, "settings"),
    )


def _parse_page(data: Any, index: int, base_dir: Path | None) -> PageSpec:
    if not isinstance(data, dict):
        raise _bad(f"Page #{index} must be an object, got {type(data).__name__}")
    try:
        number = int(data.get("page", 1))
    except (TypeError, ValueError):
        raise _bad(f"Page #{index} needs an integer 'page'") from None
    image = data.get("image")
    if image is not None and not isinstance(image, str):
        raise _bad(f"Page #{index} 'image' must be a path string, got {image!r}")
    image_path = str(_resolve_path(image, base_dir)) if image else None
    width = _number(data, "width", None, f"page #{index}")
    height = _number(data, "height", None, f"page #{index}")
    if (width is None or height is None) and image_path:
        if not Path(image_path).exists():
            raise FileNotFoundError(f"Page image not found: {image_path}")
        w, h = page_size_from_image(image_path)
        width = w if width is None else width
        height = h if height is None else height
    return PageSpec(
        page=number,
        width=width if width is not None else DEFAULT_PAGE_WIDTH_PT,
        height=height if height is not None else DEFAULT_PAGE_HEIGHT_PT,
        image_path=image_path,
    )


def parse_document(data: dict[str, Any], base_dir: Path | None = None) -> CalloutDocument:
    """
    Build a CalloutDocument from the records structure. Pages referenced by annotations
    but not listed get the default page size.
    """
    if not isinstance(data, dict):
        raise _bad("Records file must contain a JSON object")
    raw_annotations = data.get("annotations", [])
    if not isinstance(raw_annotations, list):
        raise _bad("'annotations' must be a list")
    raw_pages = data.get("pages") or []
    if not isinstance(raw_pages, list):
        raise _bad("'pages' must be a list")
    settings = _parse_settings(data.get("settings") or {})
    pages = [_parse_page(p, i, base_dir) for i, p in enumerate(raw_pages)]
    annotations = [parse_annotation(a, i) for i, a in enumerate(raw_annotations)]
    known = {p.page for p in pages}
    for number in sorted({a.page for a in annotations} - known):
        pages.append(PageSpec(page=number, width=DEFAULT_PAGE_WIDTH_PT, height=DEFAULT_PAGE_HEIGHT_PT))
    pages.sort(key=lambda p: p.page)
    return CalloutDocument(settings=settings, pages=pages, annotations=annotations)


def load_document(path: str | Path, repo_root: Path | None = None) -> CalloutDocument:
    """
    Read a records JSON file. Page image paths are relative to the file's directory.
    Raises FileNotFoundError if path is missing, AnnotationInputError if malformed.
    """
    resolved = _resolve_path(path, repo_root)
    if not resolved.exists():
        raise FileNotFoundError(f"Annotations file not found: {resolved}")
    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise _bad(f"Invalid JSON in {resolved}: {e}") from e
    return parse_document(data, base_dir=resolved.parent)


def annotation_to_dict(a: Annotation) -> dict[str, Any]:
    return {
        "id": a.id,
        "page": a.page,
        "start": {"x": a.start[0], "y": a.start[1]},
        "end": {"x": a.end[0], "y": a.end[1]},
        "label": a.label,
        "line_shape": a.line_shape,
        "terminator": a.terminator,
        "curvature": a.curvature,
        "curve_flipped": a.curve_flipped,
    }


def document_to_dict(doc: CalloutDocument) -> dict[str, Any]:
    pages = []
    for p in doc.pages:
        entry: dict[str, Any] = {"page": p.page, "width": p.width, "height": p.height}
        if p.image_path:
            entry["image"] = p.image_path
        pages.append(entry)
    return {
        "schema_version": SCHEMA_VERSION,
        "settings": {
            "label_font_size": doc.settings.label_font_size,
            "terminator_size": doc.settings.terminator_size,
            "label_gap": doc.settings.label_gap,
        },
        "pages": pages,
        "annotations": [annotation_to_dict(a) for a in doc.annotations],
    }


def save_document(doc: CalloutDocument, path: str | Path) -> Path:
    """Write records JSON. Page image paths are written as stored (absolute after load)."""
    out = Path(path)
    out.write_text(json.dumps(document_to_dict(doc), indent=2), encoding="utf-8")
    return out
