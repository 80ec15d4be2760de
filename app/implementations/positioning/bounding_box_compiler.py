import math
import numpy as np
from typing import Optional

from app.schemas.positioning_schemas import (
    BoundingBox,
    CompositorPayload,
    Delimitation,
    DesignTransform,
    ImageMetrics,
)
from app.utils.logging_config import get_logger
from app.utils.debug_utils import debug_exception

from app.implementations.positioning.transform_engine import PositionTransformEngine

# Float noise tolerated on zone edges, e.g. 10% of 1000 = 100.00000000000001
EDGE_EPSILON = 1e-6

def round_half_up(value: float) -> int:
    """Round like the compositor's pixel grid does: .5 goes up."""
    return int(math.floor(value + 0.5))

class BoundingBoxCompiler:
    """Compiles a placement into the pixel rectangle handed to the compositor"""

    def __init__(self, engine: PositionTransformEngine = None):
        self.logger = get_logger(__name__)
        self.engine = engine or PositionTransformEngine()

    def _original_size(
        self,
        delimitation: Delimitation,
        image_width: Optional[float],
        image_height: Optional[float]
    ):
        width = image_width or delimitation.image_width
        height = image_height or delimitation.image_height
        if width and height:
            return width, height

        # Pixel zone without a recorded image size: its own extent is enough
        # for identity metrics since no unit conversion takes place
        zone = self.engine.absolute_zone(delimitation, width, height)
        return max(zone.x + zone.width, 1.0), max(zone.y + zone.height, 1.0)

    @debug_exception
    def compile(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> BoundingBox:
        """Integer pixel rectangle of the design on the original image.

        Edges are rounded independently and the size derived from them. Up to
        scale 1 the rounded edges are then pulled onto the whole pixels inside
        the zone, which may have fractional edges when stored in percent.
        """
        width, height = self._original_size(delimitation, image_width, image_height)
        zone = self.engine.absolute_zone(delimitation, width, height)
        placement = self.engine.resolve_placement(delimitation, transform, ImageMetrics.identity(width, height))

        left = round_half_up(placement.left)
        top = round_half_up(placement.top)
        right = round_half_up(placement.left + placement.width)
        bottom = round_half_up(placement.top + placement.height)

        if transform.scale <= 1:
            left, right = self._clamp_span(left, right, zone.x, zone.right)
            top, bottom = self._clamp_span(top, bottom, zone.y, zone.bottom)

        box = BoundingBox(left=left, top=top, width=right - left, height=bottom - top)
        self.logger.debug(f"Compiled bounding box {box} for transform {transform}")
        return box

    @staticmethod
    def _clamp_span(start: int, end: int, zone_start: float, zone_end: float):
        """Clamp an integer span to the whole pixels of [zone_start, zone_end]."""
        low = math.ceil(zone_start - EDGE_EPSILON)
        high = max(low, math.floor(zone_end + EDGE_EPSILON))
        start = min(max(start, low), high)
        end = min(max(end, start), high)
        return start, end

    def rotated_envelope(self, box: BoundingBox, rotation: float) -> BoundingBox:
        """Axis-aligned box covering ``box`` rotated clockwise about its center."""
        if rotation == 0:
            return box

        theta = np.deg2rad(rotation)
        # y axis points down, so this matrix turns clockwise on screen
        rotation_matrix = np.array([
            [np.cos(theta), -np.sin(theta)],
            [np.sin(theta), np.cos(theta)],
        ])
        half_w, half_h = box.width / 2, box.height / 2
        corners = np.array([
            [-half_w, -half_h],
            [half_w, -half_h],
            [half_w, half_h],
            [-half_w, half_h],
        ])
        rotated = corners @ rotation_matrix.T
        center = np.array([box.left + half_w, box.top + half_h])
        mins = np.floor(rotated.min(axis=0) + center + 1e-9)
        maxs = np.ceil(rotated.max(axis=0) + center - 1e-9)

        return BoundingBox(
            left=int(mins[0]),
            top=int(mins[1]),
            width=int(maxs[0] - mins[0]),
            height=int(maxs[1] - mins[1]),
        )

    def to_compositor_payload(self, box: BoundingBox, rotation: float = 0.0) -> CompositorPayload:
        return CompositorPayload(
            x=box.left,
            y=box.top,
            width=box.width,
            height=box.height,
            position_unit="PIXEL",
            rotation=rotation,
            envelope=self.rotated_envelope(box, rotation),
        )
