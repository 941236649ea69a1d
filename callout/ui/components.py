# callout/ui/components.py
"""
Shared UI blocks for the editor: overlay viewer, annotation table, skip notices, downloads.
"""

from __future__ import annotations

import streamlit as st


def render_svg_viewer(svg_text: str, height: int = 720) -> None:
    """Overlay at its zoomed pixel size inside a scroll box; the browser never rescales it."""
    idx = svg_text.find("<svg")
    if idx > 0:
        svg_text = svg_text[idx:]
    wrapper = f'<div style="overflow:auto; max-height:{height}px;">{svg_text}</div>'
    st.components.v1.html(wrapper, height=height + 20, scrolling=True)


def render_annotation_table(entries: list[dict]) -> None:
    """
    One row per annotation from reporting.document_plans: number, line, ending, path points,
    clearance from the label, or the rejection code. Cast to str for Arrow.
    """
    if not entries:
        st.caption("No annotations on this page.")
        return
    rows = []
    for e in entries:
        metrics = e.get("metrics") or {}
        clearance = metrics.get("min_label_clearance")
        rows.append(
            {
                "#": e["label"],
                "Id": e["id"],
                "Points": metrics.get("main_path_points", ""),
                "Clearance": "" if clearance is None else f"{clearance:.1f}",
                "Clear of label": metrics.get("clear_of_label", ""),
                "Error": (e.get("error") or {}).get("code", ""),
            }
        )
    import pandas as pd
    st.dataframe(pd.DataFrame(rows).astype(str), width="stretch", hide_index=True)


def render_counts(counts: dict[str, int]) -> None:
    """Annotation counts by line shape and ending as a row of metrics."""
    if not counts:
        return
    cols = st.columns(len(counts))
    for col, (name, value) in zip(cols, counts.items()):
        col.metric(name.replace("_", " ").capitalize(), value)


def render_skipped(skipped: list[str]) -> None:
    if skipped:
        st.warning(f"{len(skipped)} annotation(s) skipped for invalid geometry: {', '.join(skipped)}")


def centered_download(label: str, data: bytes, file_name: str, mime: str, key: str) -> None:
    """Download button in the middle of three columns."""
    _c1, c2, _c3 = st.columns(3)
    with c2:
        st.download_button(label, data=data, file_name=file_name, mime=mime, key=key)
