"""
Central configuration for callout rendering.
All tunable values live here; no magic numbers in other modules.
Renderer, overlay and document exporter read the same constants so both outputs match.
"""

from __future__ import annotations
import os

# ----- Paths (repo-relative) -----
REPORTS_DIR: str = "reports"

# ----- Default sizing (project-wide settings) -----
DEFAULT_LABEL_FONT_SIZE: float = 45.0
"""Font size of the number label (visual units: px on screen, pt in the document)."""

DEFAULT_TERMINATOR_SIZE: float = 28.0
"""Arrow length / dot scale."""

DEFAULT_LABEL_GAP: float = 8.0
"""Clearance between the label box edge and the visible line start."""

DEFAULT_CURVATURE: int = 50
"""Curvature used for new curved annotations when none is stored."""

# ----- Curve construction -----
CURVATURE_MIN: int = 0
CURVATURE_MAX: int = 100

CURVED_BEND_FACTOR: float = 0.8
"""Quadratic control point offset = curvature/100 * chord_length * factor."""

S_CURVED_BEND_FACTOR: float = 0.6
"""Cubic control point offset = curvature/100 * chord_length * factor."""

S_CURVE_CONTROL_FRACTIONS: tuple[float, float] = (0.33, 0.67)
"""Positions of the two S-curve control points along the chord."""

CURVED_SEGMENTS: int = 50
"""Quadratic sampling resolution (segments; points = segments + 1)."""

S_CURVED_SEGMENTS: int = 60
"""Cubic sampling resolution (segments; points = segments + 1)."""

# ----- Label box (single shared formula) -----
LABEL_CHAR_WIDTH_RATIO: float = 0.6
"""Digit width = font_size * ratio (monospace-digit heuristic)."""

LABEL_PADDING_MIN: float = 6.0
LABEL_PADDING_RATIO: float = 0.2
"""Padding = max(LABEL_PADDING_MIN, font_size * LABEL_PADDING_RATIO)."""

LABEL_BASELINE_OFFSET_RATIO: float = 0.35
"""Text baseline sits font_size * ratio below the label centre (screen orientation)."""

# ----- Terminators -----
DOT_RADIUS_RATIO: float = 0.4
"""Dot radius = terminator_size * ratio."""

ARROW_HALF_WIDTH_RATIO: float = 0.5
"""Arrow base half-width = terminator_size * ratio."""

# ----- Drawing style (shared by overlay and exporter) -----
STROKE_WIDTH: float = 1.5
FOREGROUND_COLOR: str = "#000000"
BACKGROUND_COLOR: str = "#ffffff"
LABEL_FONT_WEIGHT: str = "bold"
LABEL_FONT_FAMILY: str = "DejaVu Sans"

# ----- Overlay selection highlight -----
HIGHLIGHT_COLOR: str = "#3b82f6"
HIGHLIGHT_OPACITY: float = 0.3
HIGHLIGHT_BOX_OPACITY: float = 0.2
HIGHLIGHT_EXTRA_WIDTH: float = 4.0
"""Extra stroke width / circle radius / box inflation for the selection highlight."""

HIGHLIGHT_BOX_CORNER_RADIUS: float = 4.0
PENDING_DOT_RADIUS_PX: float = 3.0
"""Screen radius of the marker for an annotation whose end has not been placed yet."""

# ----- Overlay / zoom -----
DEFAULT_ZOOM: float = 1.0
ZOOM_MIN: float = 0.25
ZOOM_MAX: float = 4.0

# ----- Document page defaults -----
POINTS_PER_INCH: float = 72.0
DEFAULT_PAGE_WIDTH_PT: float = 612.0
DEFAULT_PAGE_HEIGHT_PT: float = 792.0
"""US Letter; used when neither the records file nor a page image gives a size."""

PREVIEW_DPI: int = 72
"""PNG preview resolution; 72 keeps one point per pixel."""

# ----- Records schema -----
SCHEMA_VERSION: str = "1.0"

# ----- Debug flags -----
CALLOUT_DEBUG: bool = os.environ.get("CALLOUT_DEBUG", "").lower() in ("1", "true", "yes")
"""Enable debug logging in adapters. Set env CALLOUT_DEBUG=1 to enable."""

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
"""Root log level for the CLI and the Streamlit app."""
