"""
CLI entrypoint: load annotation records, write the overlay SVG per page, the exported PDF,
a PNG preview of page 1, plans.json and run_metadata.json under reports/<run_name>/.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from callout.core.config import DEFAULT_ZOOM, LOG_LEVEL, REPORTS_DIR, ZOOM_MAX, ZOOM_MIN
from callout.core.io import load_document, page_size_from_image
from callout.core.render_pdf import export_pdf, render_page_png
from callout.core.render_svg import export_overlay_svg
from callout.core.reporting import ensure_report_dir, write_plans_json, write_run_metadata_json
from callout.core.types import CalloutDocument, PageSpec
from callout.core.vector import clamp

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Render numbered callout annotations to SVG overlay and PDF.")
    p.add_argument("--annotations", type=str, required=True, help="Annotation records JSON (repo-relative)")
    p.add_argument("--page-image", type=str, default=None, dest="page_image", help="Background image for page 1")
    p.add_argument("--zoom", type=float, default=DEFAULT_ZOOM, help="Overlay zoom factor")
    p.add_argument("--selected", type=str, default=None, help="Annotation id to highlight in the overlay")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default=REPORTS_DIR, dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    p.add_argument("--no-png", action="store_true", dest="no_png", help="Skip the PNG preview of page 1")
    return p.parse_args(argv)


def _with_page_image(doc: CalloutDocument, image_path: Path) -> CalloutDocument:
    """Use image_path as page 1 background; page 1 takes the image size."""
    if not image_path.exists():
        raise FileNotFoundError(f"Page image not found: {image_path}")
    w, h = page_size_from_image(image_path)
    pages = [p for p in doc.pages if p.page != 1]
    pages.insert(0, PageSpec(page=1, width=w, height=h, image_path=str(image_path)))
    return CalloutDocument(settings=doc.settings, pages=pages, annotations=doc.annotations)


def run(args: argparse.Namespace) -> list[Path]:
    """Do the work for parsed args; returns written paths in write order."""
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()
    doc = load_document(args.annotations, repo_root=repo_root)
    if args.page_image:
        image = Path(args.page_image)
        if not image.is_absolute():
            image = repo_root / image
        doc = _with_page_image(doc, image.resolve())
    if not doc.pages:
        raise ValueError("No pages to render: the records list no pages and no annotations.")

    zoom = clamp(args.zoom, ZOOM_MIN, ZOOM_MAX)
    if zoom != args.zoom:
        logger.warning("Zoom %.2f clamped to %.2f", args.zoom, zoom)

    report_dir = ensure_report_dir(repo_root, args.run_name, output_dir=args.output_dir)
    written: list[Path] = []
    for page in doc.pages:
        written.append(
            export_overlay_svg(
                page,
                doc.annotations,
                doc.settings,
                report_dir / f"overlay_page{page.page}.svg",
                zoom=zoom,
                selected_id=args.selected,
            )
        )
    pdf_path = report_dir / "document.pdf"
    skipped = export_pdf(doc.pages, doc.annotations, doc.settings, pdf_path)
    written.append(pdf_path)
    if not args.no_png:
        png_path = report_dir / "document_page1.png"
        render_page_png(doc.pages[0], doc.annotations, doc.settings, png_path)
        written.append(png_path)
    written.append(write_plans_json(report_dir, doc))
    written.append(write_run_metadata_json(report_dir, args.run_name, args.annotations, doc, zoom, skipped))
    if skipped:
        logger.warning("%d annotation(s) skipped: %s", len(skipped), ", ".join(skipped))
    return written


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
    args = _parse_args(argv)
    for p in run(args):
        print(p)


if __name__ == "__main__":
    main()
