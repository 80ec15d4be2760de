from typing import Tuple

from app.exceptions import PlacementWarning
from app.schemas.positioning_schemas import PixelRect, PositionConstraints
from app.utils.logging_config import get_logger

class ConstraintSolver:
    """Keeps a scaled design inside its delimitation"""

    def __init__(self):
        self.logger = get_logger(__name__)

    def compute_constraints(self, zone: PixelRect, scale: float) -> PositionConstraints:
        """Offset range, around the zone center, that keeps the design inside.

        ``zone`` is the delimitation in original-image pixels. A scale above 1
        gives an inverted range (min > max): the design is larger than its zone.
        """
        container_width = zone.width * scale
        container_height = zone.height * scale

        max_x = (zone.width - container_width) / 2
        max_y = (zone.height - container_height) / 2

        constraints = PositionConstraints(min_x=-max_x, max_x=max_x, min_y=-max_y, max_y=max_y)
        if constraints.inverted:
            self.logger.warning(
                f"{PlacementWarning.INVERTED_CONSTRAINTS.value}: design at scale {scale} "
                f"overflows its {zone.width}x{zone.height} zone, offset forced to the center"
            )
        return constraints

    def apply_constraints(self, x: float, y: float, constraints: PositionConstraints) -> Tuple[float, float]:
        """Clamp an offset into the legal range; an inverted axis pins it to 0."""
        if constraints.min_x > constraints.max_x:
            x = 0.0
        else:
            x = max(constraints.min_x, min(constraints.max_x, x))

        if constraints.min_y > constraints.max_y:
            y = 0.0
        else:
            y = max(constraints.min_y, min(constraints.max_y, y))

        return x, y

    def is_overflowing(self, constraints: PositionConstraints) -> bool:
        return constraints.inverted
