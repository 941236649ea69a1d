"""
Document exporter: draw render plans into fixed-size pages with matplotlib at 1:1 scale.
One data unit is one point and Y grows upward, so plans are requested in document space.
Curves are drawn as the same polylines the overlay shows.
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.patches import Circle as CirclePatch
from matplotlib.patches import Polygon as PolygonPatch
from matplotlib.patches import Rectangle
from PIL import Image

from callout.core.config import (
    BACKGROUND_COLOR,
    CALLOUT_DEBUG,
    FOREGROUND_COLOR,
    LABEL_BASELINE_OFFSET_RATIO,
    LABEL_FONT_FAMILY,
    LABEL_FONT_WEIGHT,
    POINTS_PER_INCH,
    PREVIEW_DPI,
    STROKE_WIDTH,
)
from callout.core.label_box import box_size
from callout.core.renderer import render_record
from callout.core.types import Annotation, Circle, PageSpec, RenderPlan, RenderSettings
from callout.core.validate import AnnotationInputError

logger = logging.getLogger(__name__)
if CALLOUT_DEBUG:
    logger.setLevel(logging.DEBUG)

# Layers per annotation; each annotation gets its own zorder band so later
# annotations paint over earlier ones exactly as in the overlay.
_LAYERS = ("underlay", "main", "terminator", "label_box", "label_text")


def _new_page_fig(width_pt: float, height_pt: float) -> tuple[plt.Figure, plt.Axes]:
    # Full-canvas axes; limits equal the page so 1 data unit = 1 pt
    fig = plt.figure(
        figsize=(width_pt / POINTS_PER_INCH, height_pt / POINTS_PER_INCH),
        dpi=POINTS_PER_INCH,
        constrained_layout=False,
    )
    fig.patch.set_facecolor(BACKGROUND_COLOR)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.axis("off")
    return fig, ax


def _set_page_limits(ax: plt.Axes, width_pt: float, height_pt: float) -> None:
    ax.set_xlim(0, width_pt)
    ax.set_ylim(0, height_pt)
    ax.set_aspect("auto")


def _draw_page_image(ax: plt.Axes, page: PageSpec) -> None:
    if not page.image_path:
        return
    with Image.open(page.image_path) as img:
        pixels = np.asarray(img.convert("RGB"))
    ax.imshow(
        pixels,
        extent=(0, page.width, 0, page.height),
        origin="upper",
        aspect="auto",
        interpolation="bilinear",
        zorder=0,
    )


def draw_plan(ax: plt.Axes, plan: RenderPlan, index: int = 0) -> None:
    """Draw one plan (document space) in the overlay's layer order."""
    z = {name: 1 + index * len(_LAYERS) + i for i, name in enumerate(_LAYERS)}

    if plan.underlay_path:
        xy = np.array(plan.underlay_path)
        ax.plot(xy[:, 0], xy[:, 1], color=BACKGROUND_COLOR, linewidth=STROKE_WIDTH, zorder=z["underlay"])
    xy = np.array(plan.main_path)
    ax.plot(
        xy[:, 0], xy[:, 1],
        color=FOREGROUND_COLOR,
        linewidth=STROKE_WIDTH,
        solid_joinstyle="round",
        zorder=z["main"],
    )

    shape = plan.terminator_shape
    if isinstance(shape, Circle):
        ax.add_patch(
            CirclePatch(shape.center, shape.radius, facecolor=FOREGROUND_COLOR, edgecolor="none", zorder=z["terminator"])
        )
    elif shape is not None:
        ax.add_patch(
            PolygonPatch(
                np.array(shape),
                closed=True,
                facecolor=FOREGROUND_COLOR,
                edgecolor=FOREGROUND_COLOR,
                linewidth=STROKE_WIDTH,
                zorder=z["terminator"],
            )
        )

    w, h = box_size(plan.label_box)
    ax.add_patch(
        Rectangle(plan.label_box[0], w, h, facecolor=BACKGROUND_COLOR, edgecolor="none", zorder=z["label_box"])
    )
    cx, cy = plan.label_center
    # Y is up here: the baseline goes below the centre by subtracting
    ax.text(
        cx, cy - plan.label_font_size * LABEL_BASELINE_OFFSET_RATIO, plan.label_text,
        fontsize=plan.label_font_size,
        fontfamily=LABEL_FONT_FAMILY,
        fontweight=LABEL_FONT_WEIGHT,
        ha="center", va="baseline",
        color=FOREGROUND_COLOR,
        zorder=z["label_text"],
    )


def draw_page(
    ax: plt.Axes,
    page: PageSpec,
    annotations: list[Annotation],
    settings: RenderSettings,
) -> list[str]:
    """
    Draw all annotations of page into ax. Returns ids of skipped annotations
    (renderer rejected the input); one bad annotation never aborts the page.
    """
    skipped: list[str] = []
    index = 0
    for annotation in annotations:
        if annotation.page != page.page:
            continue
        try:
            plan = render_record(annotation, settings, coordinate_space="document", page_height=page.height)
        except AnnotationInputError as e:
            logger.warning("Skipping annotation %s on page %d: %s", annotation.id, page.page, e)
            skipped.append(annotation.id)
            continue
        draw_plan(ax, plan, index)
        index += 1
    logger.debug("Document page %d: drew %d annotation(s), skipped %d", page.page, index, len(skipped))
    return skipped


def _render_page_fig(page: PageSpec, annotations: list[Annotation], settings: RenderSettings) -> tuple[plt.Figure, list[str]]:
    fig, ax = _new_page_fig(page.width, page.height)
    _draw_page_image(ax, page)
    skipped = draw_page(ax, page, annotations, settings)
    _set_page_limits(ax, page.width, page.height)
    return fig, skipped


def export_pdf(
    pages: list[PageSpec],
    annotations: list[Annotation],
    settings: RenderSettings,
    output_path: str | Path,
) -> list[str]:
    """
    Write a multi-page PDF, one page per PageSpec in order. Page size in points equals
    the editor page size. Returns ids of skipped annotations across all pages.
    """
    skipped: list[str] = []
    with PdfPages(output_path) as pdf:
        for page in pages:
            fig, page_skipped = _render_page_fig(page, annotations, settings)
            skipped.extend(page_skipped)
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message=".*constrained_layout.*", category=UserWarning)
                pdf.savefig(fig, facecolor=BACKGROUND_COLOR)
            plt.close(fig)
    return skipped


def render_page_png(
    page: PageSpec,
    annotations: list[Annotation],
    settings: RenderSettings,
    output_path: str | Path,
    dpi: int = PREVIEW_DPI,
) -> list[str]:
    """Single-page raster preview of the exported document. dpi=72 gives one pixel per point."""
    fig, skipped = _render_page_fig(page, annotations, settings)
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=".*constrained_layout.*", category=UserWarning)
        fig.savefig(output_path, dpi=dpi, facecolor=BACKGROUND_COLOR)
    plt.close(fig)
    return skipped
