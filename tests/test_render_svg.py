# tests/test_render_svg.py
"""
Overlay SVG: painter's order, zoom scaling, selection highlight, skipped annotations.
"""

from __future__ import annotations

import math

import pytest
from PIL import Image

from callout.core.render_svg import build_overlay_svg, export_overlay_svg, overlay_svg_string
from callout.core.renderer import render_record
from callout.core.types import Annotation, PageSpec, PendingAnnotation, RenderSettings

SETTINGS = RenderSettings(label_font_size=20, terminator_size=15, label_gap=8)
PAGE = PageSpec(page=1, width=400.0, height=300.0)


def _ann(id: str = "a1", **overrides) -> Annotation:
    kwargs = dict(id=id, page=1, start=(100.0, 100.0), end=(300.0, 100.0), label=5, line_shape="curved", terminator="arrow", curvature=100)
    kwargs.update(overrides)
    return Annotation(**kwargs)


def _groups(root):
    layer = next(el for el in root if el.get("id") == "annotations")
    return [el for el in layer if el.tag == "g"]


def test_painter_order() -> None:
    a = _ann()
    root = build_overlay_svg(PAGE, [a], SETTINGS)
    (g,) = _groups(root)
    plan = render_record(a, SETTINGS)
    expected = (["underlay"] if plan.underlay_path else []) + ["main-path", "terminator", "label-box", "label-text"]
    assert [el.get("class") for el in g] == expected
    assert g.get("id") == "annotation-a1"
    assert g[-1].text == "5"


def test_zoom_scales_everything() -> None:
    a = _ann(line_shape="straight")
    r1 = build_overlay_svg(PAGE, [a], SETTINGS, zoom=1.0)
    r2 = build_overlay_svg(PAGE, [a], SETTINGS, zoom=2.0)
    assert float(r2.get("width")) == pytest.approx(800.0)
    assert float(r2.get("height")) == pytest.approx(600.0)
    box1 = next(el for el in _groups(r1)[0] if el.get("class") == "label-box")
    box2 = next(el for el in _groups(r2)[0] if el.get("class") == "label-box")
    assert float(box2.get("width")) == pytest.approx(2 * float(box1.get("width")))
    assert float(box2.get("x")) == pytest.approx(2 * float(box1.get("x")))
    text2 = next(el for el in _groups(r2)[0] if el.get("class") == "label-text")
    assert float(text2.get("font-size")) == pytest.approx(40.0)
    # Baseline 0.35 * font below the centre
    assert float(text2.get("y")) == pytest.approx(2 * (100.0 + 7.0))


def test_selected_annotation_gets_highlight_behind() -> None:
    root = build_overlay_svg(PAGE, [_ann("a1"), _ann("a2", start=(50.0, 250.0))], SETTINGS, selected_id="a2")
    g1, g2 = _groups(root)
    assert all(el.get("class") != "highlight" for el in g1)
    classes = [el.get("class") for el in g2]
    assert classes[0] == "highlight"
    last_highlight = max(i for i, c in enumerate(classes) if c == "highlight")
    first_drawn = min(i for i, c in enumerate(classes) if c != "highlight")
    assert last_highlight < first_drawn


def test_invalid_and_other_page_annotations_skipped() -> None:
    anns = [_ann("ok"), _ann("bad", start=(math.nan, 10.0)), _ann("p2", page=2)]
    root = build_overlay_svg(PAGE, anns, SETTINGS)
    assert [g.get("id") for g in _groups(root)] == ["annotation-ok"]


def test_pending_dot() -> None:
    pending = PendingAnnotation(page=1, start=(40.0, 30.0), label=2)
    root = build_overlay_svg(PAGE, [], SETTINGS, zoom=1.5, pending=pending)
    dots = [el for el in root.iter("circle") if el.get("class") == "pending"]
    assert len(dots) == 1
    assert float(dots[0].get("cx")) == pytest.approx(60.0)


def test_export_embeds_page_image(tmp_path) -> None:
    Image.new("RGB", (40, 30), "gray").save(tmp_path / "page.png")
    page = PageSpec(page=1, width=40.0, height=30.0, image_path=str(tmp_path / "page.png"))
    out = export_overlay_svg(page, [_ann(start=(5.0, 5.0), end=(35.0, 25.0))], SETTINGS, tmp_path / "overlay.svg")
    text = out.read_text(encoding="utf-8")
    assert text.startswith("<?xml")
    assert "data:image/png;base64," in text
    assert 'xmlns="http://www.w3.org/2000/svg"' in text


def test_svg_string_without_image() -> None:
    page = PageSpec(page=1, width=40.0, height=30.0, image_path="/does/not/matter.png")
    text = overlay_svg_string(build_overlay_svg(page, [], SETTINGS, embed_image=False))
    assert "<image" not in text
