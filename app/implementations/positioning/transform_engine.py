from typing import Optional

from app.exceptions import PlacementWarning
from app.schemas.positioning_schemas import (
    Delimitation,
    DesignTransform,
    DisplaySize,
    ImageMetrics,
    PixelRect,
    PositionConstraints,
    ResolvedPlacement,
)
from app.utils.logging_config import get_logger
from app.utils.debug_utils import debug_exception

from app.implementations.positioning.delimitation_normalizer import DelimitationNormalizer
from app.implementations.positioning.coordinate_mapper import CoordinateMapper
from app.implementations.positioning.constraint_solver import ConstraintSolver

class PositionTransformEngine:
    """Composes offset, scale and rotation into a renderable placement"""

    def __init__(
        self,
        normalizer: DelimitationNormalizer = None,
        mapper: CoordinateMapper = None,
        solver: ConstraintSolver = None
    ):
        self.logger = get_logger(__name__)
        self.normalizer = normalizer or DelimitationNormalizer()
        self.mapper = mapper or CoordinateMapper()
        self.solver = solver or ConstraintSolver()

    def absolute_zone(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> PixelRect:
        return self.normalizer.to_absolute(delimitation, image_width, image_height)

    def constraints_for(
        self,
        delimitation: Delimitation,
        scale: float,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> PositionConstraints:
        zone = self.absolute_zone(delimitation, image_width, image_height)
        return self.solver.compute_constraints(zone, scale)

    @debug_exception
    def resolve_placement(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        metrics: ImageMetrics,
        reference_size: Optional[DisplaySize] = None
    ) -> ResolvedPlacement:
        """Resolve a stored transform against the current display.

        The design's top-left corner is the zone center plus the clamped
        offset minus half the design size, computed in original-image pixels
        and then mapped through ``metrics``, size included, so an editor
        canvas and a thumbnail show the same proportions. ``reference_size``
        is the size the image was displayed at when the transform was
        authored; it only feeds ``size_ratio``, the factor a host applies to
        overlays it drew at that size.
        """
        warnings = []

        zone = self.absolute_zone(delimitation, metrics.original_width, metrics.original_height)
        constraints = self.solver.compute_constraints(zone, transform.scale)
        if constraints.inverted:
            warnings.append(PlacementWarning.INVERTED_CONSTRAINTS)
        offset_x, offset_y = self.solver.apply_constraints(transform.offset_x, transform.offset_y, constraints)

        container_width = zone.width * transform.scale
        container_height = zone.height * transform.scale

        image_left = zone.center_x + offset_x - container_width / 2
        image_top = zone.center_y + offset_y - container_height / 2

        if metrics.is_degenerate:
            self.logger.warning(
                f"{PlacementWarning.DEGENERATE_CONTAINER.value}: cannot resolve placement "
                f"on a {metrics.display_width}x{metrics.display_height} display"
            )
            warnings.append(PlacementWarning.DEGENERATE_CONTAINER)
            return ResolvedPlacement(
                left=0.0,
                top=0.0,
                width=0.0,
                height=0.0,
                rotation_deg=transform.rotation,
                center_x=0.0,
                center_y=0.0,
                size_ratio=0.0,
                offset_x=offset_x,
                offset_y=offset_y,
                warnings=warnings,
            )

        left, top = self.mapper.image_to_display_point(image_left, image_top, metrics)
        width = container_width * metrics.display_scale
        height = container_height * metrics.display_scale

        # Display zone width over the zone width on the authoring display
        reference_scale = 1.0
        if reference_size is not None and not reference_size.is_degenerate:
            reference_scale = reference_size.width / metrics.original_width
        size_ratio = metrics.display_scale / reference_scale

        placement = ResolvedPlacement(
            left=left,
            top=top,
            width=width,
            height=height,
            rotation_deg=transform.rotation,
            center_x=left + width / 2,
            center_y=top + height / 2,
            size_ratio=size_ratio,
            offset_x=offset_x,
            offset_y=offset_y,
            warnings=warnings,
        )
        self.logger.debug(f"Resolved placement: {placement}")
        return placement

    # Interactive updates, each returning a new transform

    def apply_drag(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        dx: float,
        dy: float,
        metrics: ImageMetrics
    ) -> DesignTransform:
        """Move the design by a pointer delta measured in display pixels."""
        image_dx, image_dy = self.mapper.display_to_image_delta(dx, dy, metrics)
        constraints = self.constraints_for(
            delimitation, transform.scale, metrics.original_width, metrics.original_height
        )
        offset_x, offset_y = self.solver.apply_constraints(
            transform.offset_x + image_dx, transform.offset_y + image_dy, constraints
        )
        return transform.with_changes(offset_x=offset_x, offset_y=offset_y)

    def apply_scale(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        scale: float,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> DesignTransform:
        """Rescale the design and pull its offset back inside the new range."""
        constraints = self.constraints_for(delimitation, scale, image_width, image_height)
        offset_x, offset_y = self.solver.apply_constraints(transform.offset_x, transform.offset_y, constraints)
        return transform.with_changes(scale=scale, offset_x=offset_x, offset_y=offset_y)

    def apply_rotation(self, transform: DesignTransform, rotation: float) -> DesignTransform:
        return transform.with_changes(rotation=rotation)

    def center(self, transform: DesignTransform) -> DesignTransform:
        return transform.with_changes(offset_x=0.0, offset_y=0.0)
