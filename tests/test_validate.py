# tests/test_validate.py
"""
Input rejection with structured error codes, and plan clearance checks against the label.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from callout.core import error_codes
from callout.core.renderer import render_annotation
from callout.core.types import AnnotationGeometry
from callout.core.validate import (
    AnnotationInputError,
    main_path_starts_in_label_box,
    min_label_clearance,
    validate_geometry_input,
    validate_plan_clear_of_label,
)


def _geom(**overrides) -> AnnotationGeometry:
    kwargs = dict(start=(10.0, 10.0), end=(200.0, 120.0))
    kwargs.update(overrides)
    return AnnotationGeometry(**kwargs)


def test_valid_input_passes() -> None:
    validate_geometry_input(_geom())
    validate_geometry_input(_geom(start=(5.0, 5.0), end=(5.0, 5.0)))
    validate_geometry_input(_geom(coordinate_space="document", page_height=792.0))


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"start": (math.nan, 0.0)}, error_codes.INVALID_COORDINATES),
        ({"end": (0.0, math.inf)}, error_codes.INVALID_COORDINATES),
        ({"end": (1.0,)}, error_codes.INVALID_COORDINATES),
        ({"line_shape": "zigzag"}, error_codes.UNKNOWN_LINE_SHAPE),
        ({"terminator": "star"}, error_codes.UNKNOWN_TERMINATOR),
        ({"coordinate_space": "paper"}, error_codes.UNKNOWN_COORDINATE_SPACE),
        ({"label": 0}, error_codes.INVALID_LABEL),
        ({"label": True}, error_codes.INVALID_LABEL),
        ({"label": 2.5}, error_codes.INVALID_LABEL),
        ({"curvature": math.nan}, error_codes.INVALID_CURVATURE),
        ({"label_font_size": 0}, error_codes.INVALID_SIZE),
        ({"terminator_size": -3}, error_codes.INVALID_SIZE),
        ({"label_gap": -1}, error_codes.INVALID_SIZE),
        ({"coordinate_space": "document"}, error_codes.MISSING_PAGE_HEIGHT),
        ({"coordinate_space": "document", "page_height": 0}, error_codes.MISSING_PAGE_HEIGHT),
    ],
)
def test_invalid_input_rejected(overrides: dict, code: str) -> None:
    with pytest.raises(AnnotationInputError) as exc:
        validate_geometry_input(_geom(**overrides))
    assert exc.value.code == code
    assert isinstance(exc.value, ValueError)


def test_renderer_rejects_non_finite_input() -> None:
    with pytest.raises(ValueError):
        render_annotation((math.nan, 1.0), (10.0, 10.0))


def test_every_code_has_user_message() -> None:
    for code in (
        error_codes.INVALID_COORDINATES,
        error_codes.INVALID_SIZE,
        error_codes.INVALID_LABEL,
        error_codes.INVALID_CURVATURE,
        error_codes.UNKNOWN_LINE_SHAPE,
        error_codes.UNKNOWN_TERMINATOR,
        error_codes.UNKNOWN_COORDINATE_SPACE,
        error_codes.MISSING_PAGE_HEIGHT,
        error_codes.INVALID_RECORDS,
        error_codes.RUN_FAILED,
    ):
        assert error_codes.user_message(code) == error_codes.USER_MESSAGES[code]
    assert error_codes.user_message(None) == "Something went wrong."
    assert error_codes.user_message("nope", fallback="x") == "x"


def test_plan_clear_of_label() -> None:
    plan = render_annotation((100.0, 100.0), (300.0, 100.0), "straight", "arrow", 5, label_font_size=20, terminator_size=15, label_gap=8)
    ok, clearance = validate_plan_clear_of_label(plan, 13.0)
    assert ok is True
    assert clearance == pytest.approx(21.0)
    assert min_label_clearance(plan) == pytest.approx(21.0)
    assert main_path_starts_in_label_box(plan) is False


def test_plan_not_clear_when_radius_too_large() -> None:
    plan = render_annotation((100.0, 100.0), (300.0, 100.0), "straight", "none", 5, label_font_size=20, label_gap=8)
    ok, _ = validate_plan_clear_of_label(plan, 50.0)
    assert ok is False


def test_zero_length_plan_reported_as_is() -> None:
    plan = render_annotation((40.0, 40.0), (40.0, 40.0))
    ok, clearance = validate_plan_clear_of_label(plan, 10.0)
    assert ok is False
    assert clearance == 0.0
    assert main_path_starts_in_label_box(plan) is True


def test_numpy_integer_label_accepted() -> None:
    validate_geometry_input(_geom(label=np.int64(3)))
    plan = render_annotation((0.0, 0.0), (200.0, 0.0), label=np.int32(12))
    assert plan.label_text == "12"
    with pytest.raises(AnnotationInputError):
        validate_geometry_input(_geom(label=np.int64(0)))
