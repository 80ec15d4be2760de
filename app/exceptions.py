from enum import Enum


class PlacementWarning(str, Enum):
    """Recoverable conditions surfaced to callers instead of raised"""
    DEGENERATE_CONTAINER = "DEGENERATE_CONTAINER"
    INVERTED_CONSTRAINTS = "INVERTED_CONSTRAINTS"
    AMBIGUOUS_COORDINATE_TYPE = "AMBIGUOUS_COORDINATE_TYPE"
    STALE_PLACEMENT = "STALE_PLACEMENT"


class PositioningError(ValueError):
    """Base class for positioning errors"""


class OutOfRangeInputError(PositioningError):
    """Raised at the validation boundary when an input is outside its domain"""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")
