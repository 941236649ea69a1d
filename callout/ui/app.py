"""
Streamlit editor: load annotation records and a page image, view the zoomable overlay,
edit the selected annotation, undo/redo, and export the PDF.
Run with: streamlit run callout/ui/app.py
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

# Configure logging from env (e.g. LOG_LEVEL=DEBUG for development)
_log_level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, _log_level_name, logging.INFO))

# Ensure repo root is on path when Streamlit loads this file
_repo_root = Path(__file__).resolve().parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import streamlit as st

from callout.core.config import (
    CURVATURE_MAX,
    CURVATURE_MIN,
    DEFAULT_CURVATURE,
    DEFAULT_LABEL_FONT_SIZE,
    DEFAULT_LABEL_GAP,
    DEFAULT_PAGE_HEIGHT_PT,
    DEFAULT_PAGE_WIDTH_PT,
    DEFAULT_TERMINATOR_SIZE,
    DEFAULT_ZOOM,
    ZOOM_MAX,
    ZOOM_MIN,
)
from callout.core.editing import AnnotationHistory
from callout.core.error_codes import user_message
from callout.core.io import document_to_dict, page_size_from_image, parse_document
from callout.core.render_pdf import export_pdf
from callout.core.render_svg import build_overlay_svg, overlay_svg_string
from callout.core.reporting import annotation_summary, document_plans
from callout.core.types import LINE_SHAPES, TERMINATORS, Annotation, CalloutDocument, PageSpec, RenderSettings
from callout.core.validate import AnnotationInputError
from callout.ui import components as ui_components

logger = logging.getLogger(__name__)

_SHAPE_NAMES = {"straight": "Straight", "curved": "Curved", "s_curved": "S-curved"}
_ENDING_NAMES = {"none": "None", "dot": "Dot", "arrow": "Arrow"}


def _state() -> dict:
    if "history" not in st.session_state:
        st.session_state["history"] = AnnotationHistory()
        st.session_state["pages"] = [PageSpec(page=1, width=DEFAULT_PAGE_WIDTH_PT, height=DEFAULT_PAGE_HEIGHT_PT)]
        st.session_state["selected_id"] = None
        st.session_state["tmp_dir"] = tempfile.mkdtemp(prefix="callout_")
    return st.session_state


def _load_records(uploaded) -> None:
    state = _state()
    try:
        doc = parse_document(json.loads(uploaded.read().decode("utf-8")))
    except AnnotationInputError as e:
        st.error(user_message(e.code))
        st.caption(str(e))
        return
    except (ValueError, FileNotFoundError) as e:
        st.error(user_message("invalid_records"))
        st.caption(str(e))
        return
    state["history"].load(doc.annotations)
    state["pages"] = doc.pages or state["pages"]
    st.session_state["settings_font"] = doc.settings.label_font_size
    st.session_state["settings_ending"] = doc.settings.terminator_size
    st.session_state["settings_gap"] = doc.settings.label_gap


def _attach_page_image(uploaded, page_number: int) -> None:
    state = _state()
    path = Path(state["tmp_dir"]) / f"page{page_number}_{uploaded.name}"
    path.write_bytes(uploaded.getvalue())
    w, h = page_size_from_image(path)
    pages = [p for p in state["pages"] if p.page != page_number]
    pages.append(PageSpec(page=page_number, width=w, height=h, image_path=str(path)))
    state["pages"] = sorted(pages, key=lambda p: p.page)


def _sidebar() -> tuple[RenderSettings, float, int]:
    state = _state()
    st.sidebar.header("Project")
    records = st.sidebar.file_uploader("Annotations (JSON)", type=["json"], key="records_upload")
    if records is not None and st.sidebar.button("Load annotations"):
        _load_records(records)
    page_numbers = [p.page for p in state["pages"]]
    page_number = st.sidebar.selectbox("Page", page_numbers, index=0)
    image = st.sidebar.file_uploader("Page image", type=["png", "jpg", "jpeg"], key="image_upload")
    if image is not None and st.sidebar.button("Use as page background"):
        _attach_page_image(image, page_number)

    st.sidebar.header("Sizing")
    font = st.sidebar.slider("Number size", 10.0, 120.0, DEFAULT_LABEL_FONT_SIZE, 1.0, key="settings_font")
    ending = st.sidebar.slider("Ending size", 4.0, 80.0, DEFAULT_TERMINATOR_SIZE, 1.0, key="settings_ending")
    gap = st.sidebar.slider("Line gap", 0.0, 40.0, DEFAULT_LABEL_GAP, 1.0, key="settings_gap")
    zoom = st.sidebar.slider("Zoom", ZOOM_MIN, ZOOM_MAX, DEFAULT_ZOOM, 0.05, key="zoom")
    return RenderSettings(label_font_size=font, terminator_size=ending, label_gap=gap), zoom, page_number


def _annotation_form(history: AnnotationHistory, current: Annotation | None, page: PageSpec) -> None:
    """Edit the selected annotation, or add a new one when nothing is selected."""
    key = current.id if current else "new"
    base = current or Annotation(
        id="",
        page=page.page,
        start=(page.width * 0.25, page.height * 0.25),
        end=(page.width * 0.5, page.height * 0.4),
        label=history.next_label(page.page),
    )
    with st.form(f"form_{key}"):
        c1, c2 = st.columns(2)
        with c1:
            sx = st.number_input("Start x", value=float(base.start[0]), step=1.0)
            ex = st.number_input("End x", value=float(base.end[0]), step=1.0)
            label = st.number_input("Number", min_value=1, value=int(base.label), step=1)
            shape = st.selectbox("Line", LINE_SHAPES, index=LINE_SHAPES.index(base.line_shape), format_func=_SHAPE_NAMES.get)
        with c2:
            sy = st.number_input("Start y", value=float(base.start[1]), step=1.0)
            ey = st.number_input("End y", value=float(base.end[1]), step=1.0)
            ending = st.selectbox("Ending", TERMINATORS, index=TERMINATORS.index(base.terminator), format_func=_ENDING_NAMES.get)
            curvature = st.slider("Curvature", CURVATURE_MIN, CURVATURE_MAX, int(base.curvature if current else DEFAULT_CURVATURE))
        flipped = st.checkbox("Flip curve", value=base.curve_flipped)
        submitted = st.form_submit_button("Apply" if current else "Add annotation")
    if not submitted:
        return
    fields = dict(
        start=(sx, sy), end=(ex, ey), label=int(label), line_shape=shape,
        terminator=ending, curvature=float(curvature), curve_flipped=flipped,
    )
    if current:
        history.update(current.id, **fields)
    else:
        added = history.add(replace(base, **fields))
        st.session_state["selected_id"] = added.id
    st.rerun()


def _duplicate_control(history: AnnotationHistory, current: Annotation, page_numbers: list[int]) -> None:
    """Copy the selected annotation onto another page with the next free number there."""
    with st.form(f"duplicate_{current.id}"):
        target = st.selectbox("Duplicate to page", page_numbers, index=page_numbers.index(current.page))
        if not st.form_submit_button("Duplicate"):
            return
    copy = history.duplicate(current.id, int(target))
    st.session_state["selected_id"] = copy.id if copy.page == current.page else None
    st.rerun()


def main() -> None:
    st.set_page_config(page_title="Callout editor", layout="wide")
    st.title("Callout editor")
    state = _state()
    history: AnnotationHistory = state["history"]
    settings, zoom, page_number = _sidebar()
    page = next(p for p in state["pages"] if p.page == page_number)
    on_page = [a for a in history.annotations if a.page == page.page]

    left, right = st.columns([3, 2])
    with right:
        b1, b2, b3 = st.columns(3)
        if b1.button("Undo", disabled=not history.can_undo):
            history.undo()
            st.rerun()
        if b2.button("Redo", disabled=not history.can_redo):
            history.redo()
            st.rerun()
        if b3.button("Clear page", disabled=not on_page):
            history.clear_page(page.page)
            st.rerun()

        ids = [None] + [a.id for a in on_page]
        labels = {a.id: f"#{a.label} ({_SHAPE_NAMES[a.line_shape]}, {_ENDING_NAMES[a.terminator]})" for a in on_page}
        selected = state["selected_id"] if state["selected_id"] in ids else None
        selected = st.selectbox(
            "Annotation", ids, index=ids.index(selected),
            format_func=lambda i: "New annotation" if i is None else labels[i],
        )
        state["selected_id"] = selected
        current = history.get(selected) if selected else None
        _annotation_form(history, current, page)
        if current:
            _duplicate_control(history, current, [p.page for p in state["pages"]])
        if current and st.button("Delete annotation"):
            history.delete(current.id)
            state["selected_id"] = None
            st.rerun()
        ui_components.render_counts(annotation_summary(on_page))
        page_doc = CalloutDocument(settings=settings, pages=[page], annotations=on_page)
        ui_components.render_annotation_table(document_plans(page_doc, coordinate_space="screen"))

    with left:
        svg = overlay_svg_string(build_overlay_svg(page, history.annotations, settings, zoom=zoom, selected_id=selected))
        ui_components.render_svg_viewer(svg)

    st.divider()
    doc = CalloutDocument(settings=settings, pages=list(state["pages"]), annotations=history.annotations)
    if st.button("Export PDF"):
        out = Path(state["tmp_dir"]) / "document.pdf"
        try:
            skipped = export_pdf(doc.pages, doc.annotations, doc.settings, out)
        except (OSError, ValueError) as e:
            logger.exception("Export failed")
            st.error(user_message("run_failed"))
            st.caption(str(e))
        else:
            ui_components.render_skipped(skipped)
            ui_components.centered_download("Download PDF", out.read_bytes(), "document.pdf", "application/pdf", "dl_pdf")
    ui_components.centered_download(
        "Download annotations (JSON)",
        json.dumps(document_to_dict(doc), indent=2).encode("utf-8"),
        "annotations.json",
        "application/json",
        "dl_records",
    )
    ui_components.centered_download("Download overlay (SVG)", svg.encode("utf-8"), f"overlay_page{page.page}.svg", "image/svg+xml", "dl_svg")


main()
