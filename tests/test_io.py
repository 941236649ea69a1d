# tests/test_io.py
"""
Annotation records JSON: parsing, defaults, aliases, errors, save/load round trip.
"""

from __future__ import annotations

import json

import pytest
from PIL import Image

from callout.core import error_codes
from callout.core.config import DEFAULT_CURVATURE, DEFAULT_PAGE_HEIGHT_PT, DEFAULT_PAGE_WIDTH_PT
from callout.core.io import (
    document_to_dict,
    load_document,
    page_size_from_image,
    parse_annotation,
    parse_document,
    parse_line_shape,
    save_document,
)
from callout.core.validate import AnnotationInputError


def _records() -> dict:
    return {
        "settings": {"label_font_size": 30, "terminator_size": 20, "label_gap": 4},
        "pages": [{"page": 1, "width": 500, "height": 700}],
        "annotations": [
            {"id": "a", "page": 1, "start": {"x": 10, "y": 20}, "end": [200, 220], "label": 1, "line_shape": "curved", "terminator": "arrow", "curvature": 30},
            {"page": 2, "start": [5, 5], "end": [50, 50], "number": 2, "line_shape": "s-curved", "curve_flipped": True},
        ],
    }


def test_parse_document() -> None:
    doc = parse_document(_records())
    assert doc.settings.label_font_size == 30.0
    assert doc.settings.label_gap == 4.0
    a, b = doc.annotations
    assert a.start == (10.0, 20.0)
    assert a.end == (200.0, 220.0)
    assert a.curvature == 30.0
    assert b.id == "ann_0001"
    assert b.label == 2
    assert b.line_shape == "s_curved"
    assert b.terminator == "none"
    assert b.curvature == DEFAULT_CURVATURE
    assert b.curve_flipped is True


def test_missing_pages_get_default_size() -> None:
    doc = parse_document(_records())
    assert [p.page for p in doc.pages] == [1, 2]
    assert doc.page(1).width == 500.0
    assert doc.page(2).width == DEFAULT_PAGE_WIDTH_PT
    assert doc.page(2).height == DEFAULT_PAGE_HEIGHT_PT
    assert [a.id for a in doc.annotations_on(2)] == ["ann_0001"]


def test_zero_curvature_is_kept() -> None:
    a = parse_annotation({"start": [0, 0], "end": [1, 1], "label": 1, "line_shape": "curved", "curvature": 0})
    assert a.curvature == 0.0


def test_line_shape_aliases() -> None:
    assert parse_line_shape("S-Curved") == "s_curved"
    assert parse_line_shape(None) == "straight"


@pytest.mark.parametrize(
    "record",
    [
        {"start": [0, 0], "end": [1, 1], "label": 1, "line_shape": "wavy"},
        {"start": [0, 0], "end": [1, 1], "label": 1, "terminator": "star"},
        {"start": [0, 0], "end": [1, 1]},
        {"start": "here", "end": [1, 1], "label": 1},
    ],
)
def test_bad_records_rejected(record: dict) -> None:
    with pytest.raises(AnnotationInputError) as exc:
        parse_annotation(record)
    assert exc.value.code == error_codes.INVALID_RECORDS


def test_bad_document_rejected() -> None:
    with pytest.raises(ValueError):
        parse_document({"annotations": {"a": 1}})
    with pytest.raises(ValueError):
        parse_document([])


@pytest.mark.parametrize(
    "records",
    [
        {"pages": [5], "annotations": []},
        {"pages": {"page": 1}, "annotations": []},
        {"pages": [{"page": "one"}], "annotations": []},
        {"pages": [{"page": 1, "width": "wide"}], "annotations": []},
        {"pages": [{"page": 1, "image": 7}], "annotations": []},
        {"settings": [1, 2], "annotations": []},
        {"settings": {"label_font_size": "big"}, "annotations": []},
    ],
)
def test_malformed_pages_and_settings_rejected(records: dict) -> None:
    with pytest.raises(AnnotationInputError) as exc:
        parse_document(records)
    assert exc.value.code == error_codes.INVALID_RECORDS


def test_editor_field_names_accepted() -> None:
    a = parse_annotation(
        {
            "id": "x1", "page": 2, "startX": 10, "startY": 20, "endX": 110, "endY": 220,
            "number": 4, "lineType": "s-curved", "endType": "dot", "curveFlipped": True, "curvature": 35,
        }
    )
    assert (a.start, a.end) == ((10.0, 20.0), (110.0, 220.0))
    assert (a.label, a.line_shape, a.terminator, a.curve_flipped, a.curvature) == (4, "s_curved", "dot", True, 35.0)


def test_snake_case_fields_win_over_editor_names() -> None:
    a = parse_annotation({"start": [0, 0], "end": [1, 1], "label": 2, "number": 9, "line_shape": "curved", "lineType": "straight"})
    assert a.label == 2
    assert a.line_shape == "curved"


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), ("false", False), ("True", True), (0, False), (1, True), (None, False)],
)
def test_curve_flipped_parsing(value, expected: bool) -> None:
    a = parse_annotation({"start": [0, 0], "end": [1, 1], "label": 1, "curve_flipped": value})
    assert a.curve_flipped is expected


@pytest.mark.parametrize("value", ["maybe", 2, [True]])
def test_curve_flipped_rejects_other_values(value) -> None:
    with pytest.raises(AnnotationInputError):
        parse_annotation({"start": [0, 0], "end": [1, 1], "label": 1, "curve_flipped": value})


def test_non_numeric_values_rejected() -> None:
    with pytest.raises(AnnotationInputError):
        parse_annotation({"start": ["a", 0], "end": [1, 1], "label": 1})
    with pytest.raises(AnnotationInputError):
        parse_annotation({"start": [0, 0], "end": [1, 1], "label": 1, "curvature": "steep"})


def test_save_load_round_trip(tmp_path) -> None:
    doc = parse_document(_records())
    path = save_document(doc, tmp_path / "records.json")
    loaded = load_document(path)
    assert loaded.annotations == doc.annotations
    assert loaded.settings == doc.settings
    assert [(p.page, p.width, p.height) for p in loaded.pages] == [(p.page, p.width, p.height) for p in doc.pages]
    assert json.loads(path.read_text())["schema_version"] == "1.0"


def test_load_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_document(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(AnnotationInputError):
        load_document(bad)


def test_page_size_from_image(tmp_path) -> None:
    Image.new("RGB", (320, 240), "white").save(tmp_path / "page1.png")
    assert page_size_from_image(tmp_path / "page1.png") == (320.0, 240.0)
    records = {"pages": [{"page": 1, "image": "page1.png"}], "annotations": []}
    (tmp_path / "records.json").write_text(json.dumps(records), encoding="utf-8")
    doc = load_document("records.json", repo_root=tmp_path)
    assert (doc.page(1).width, doc.page(1).height) == (320.0, 240.0)
    assert doc.page(1).image_path.endswith("page1.png")
    assert document_to_dict(doc)["pages"][0]["image"] == doc.page(1).image_path
