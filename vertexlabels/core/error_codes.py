"""
Structured error codes for label placement and run failures.
Use these keys in exceptions and log records; map to user-facing messages in the host UI.
"""

# Known error keys
RING_TOO_SMALL = "ring_too_small"
UNKNOWN_SETTING = "unknown_setting"
INVALID_SETTING = "invalid_setting"
UNKNOWN_LABEL = "unknown_label"
NOT_CONVERGED = "not_converged"
NO_POLYGONS = "no_polygons"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    RING_TOO_SMALL: "Polygon has fewer than 3 vertices; no labels shown for it.",
    UNKNOWN_SETTING: "Unknown label setting. Check the setting name.",
    INVALID_SETTING: "Label setting value has the wrong type (number, whole number or true/false).",
    UNKNOWN_LABEL: "Label no longer exists. It may have been removed by a refresh.",
    NOT_CONVERGED: "Labels did not fully settle. Try zooming in or reducing the number of polygons.",
    NO_POLYGONS: "No polygons found in input.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Return a user-facing message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)
