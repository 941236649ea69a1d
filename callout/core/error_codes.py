"""
Structured error codes for annotation input and run failures.
Use these keys on raised errors; map to user-facing messages in the UI.
"""

INVALID_COORDINATES = "invalid_coordinates"
INVALID_SIZE = "invalid_size"
INVALID_LABEL = "invalid_label"
INVALID_CURVATURE = "invalid_curvature"
UNKNOWN_LINE_SHAPE = "unknown_line_shape"
UNKNOWN_TERMINATOR = "unknown_terminator"
UNKNOWN_COORDINATE_SPACE = "unknown_coordinate_space"
MISSING_PAGE_HEIGHT = "missing_page_height"
INVALID_RECORDS = "invalid_records"
RUN_FAILED = "run_failed"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    INVALID_COORDINATES: "Annotation has a missing or non-finite endpoint. Move or re-place it.",
    INVALID_SIZE: "Label size and ending size must be positive; line gap cannot be negative.",
    INVALID_LABEL: "Annotation numbers start at 1.",
    INVALID_CURVATURE: "Curvature must be a number between 0 and 100.",
    UNKNOWN_LINE_SHAPE: "Line type must be straight, curved or s-curved.",
    UNKNOWN_TERMINATOR: "Ending must be none, dot or arrow.",
    UNKNOWN_COORDINATE_SPACE: "Coordinate space must be screen or document.",
    MISSING_PAGE_HEIGHT: "Document output needs a positive page height.",
    INVALID_RECORDS: "Annotation file could not be read. Check its JSON structure.",
    RUN_FAILED: "Run failed. Check annotations and inputs.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Return a user-facing message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)
