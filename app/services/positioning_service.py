import math
from typing import List, Optional, Tuple

from app.config import settings
from app.exceptions import OutOfRangeInputError, PlacementWarning
from app.interfaces.positioning_engine import PositioningEngine
from app.implementations.positioning.responsive_rebinder import ResponsiveRebinder
from app.schemas.positioning_schemas import (
    BoundingBox,
    CompositorPayload,
    Delimitation,
    DesignTransform,
    DisplayRect,
    DisplaySize,
    FitMode,
    ImageMetrics,
    ImageSize,
    PositionConstraints,
    ResolvedPlacement,
    ZoneValidationReport,
)
from app.utils.logging_config import get_logger
from app.utils.debug_utils import debug_exception, debug_function_args

class PositioningService:
    """Service for handling design positioning requests.

    This is the validation boundary: inputs are checked here once, the
    geometry underneath assumes them valid. On the interactive path a
    placement that cannot be computed falls back to the last known good one.
    """

    def __init__(self, positioning_engine: PositioningEngine):
        self.positioning_engine = positioning_engine
        self.logger = get_logger(__name__)

    def _check_scale(self, scale: float) -> float:
        if not math.isfinite(scale) or scale <= 0 or scale > settings.MAX_SCALE:
            raise OutOfRangeInputError("scale", scale, f"must be in (0, {settings.MAX_SCALE}]")
        return scale

    def _image_size(self, delimitation: Delimitation, image: Optional[ImageSize]) -> Tuple[Optional[float], Optional[float]]:
        if image is not None:
            return image.width, image.height
        return delimitation.image_width, delimitation.image_height

    def _migrated(self, delimitation: Delimitation) -> Delimitation:
        """Resolve a legacy untagged record once, before any geometry runs."""
        if delimitation.coordinate_type is None:
            return self.positioning_engine.migrate_legacy(delimitation)
        return delimitation

    def _overflow_warnings(self, constraints: PositionConstraints) -> List[PlacementWarning]:
        if constraints.inverted:
            return [PlacementWarning.INVERTED_CONSTRAINTS]
        return []

    def normalize_delimitation(self, delimitation: Delimitation) -> Delimitation:
        return self.positioning_engine.normalize(self._migrated(delimitation))

    def validate_delimitation(self, delimitation: Delimitation, image: Optional[ImageSize] = None) -> ZoneValidationReport:
        delimitation = self._migrated(delimitation)
        width, height = self._image_size(delimitation, image)
        return self.positioning_engine.validate_delimitation(delimitation, width, height)

    def compute_metrics(self, image: ImageSize, container: DisplaySize, fit_mode: FitMode) -> ImageMetrics:
        return self.positioning_engine.compute_image_metrics(
            image.width, image.height, container.width, container.height, fit_mode
        )

    def compute_display_rect(
        self,
        delimitation: Delimitation,
        image: ImageSize,
        container: DisplaySize,
        fit_mode: FitMode
    ) -> Tuple[ImageMetrics, DisplayRect, List[PlacementWarning]]:
        delimitation = self._migrated(delimitation)
        metrics = self.compute_metrics(image, container, fit_mode)
        rect = self.positioning_engine.to_display_rect(delimitation, metrics)
        warnings = [PlacementWarning.DEGENERATE_CONTAINER] if metrics.is_degenerate else []
        return metrics, rect, warnings

    def compute_constraints(
        self,
        delimitation: Delimitation,
        scale: float,
        image: Optional[ImageSize] = None
    ) -> PositionConstraints:
        self._check_scale(scale)
        delimitation = self._migrated(delimitation)
        width, height = self._image_size(delimitation, image)
        return self.positioning_engine.compute_constraints(delimitation, scale, width, height)

    @debug_exception
    @debug_function_args
    def resolve_placement(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image: ImageSize,
        container: DisplaySize,
        fit_mode: FitMode = FitMode.CONTAIN,
        reference_size: Optional[DisplaySize] = None,
        last_known_good: Optional[ResolvedPlacement] = None
    ) -> ResolvedPlacement:
        """Resolve a placement for the given viewport, degrading to the last good one."""
        delimitation = self._migrated(delimitation)
        metrics = self.compute_metrics(image, container, fit_mode)
        placement = self.positioning_engine.resolve_placement(delimitation, transform, metrics, reference_size)

        if PlacementWarning.DEGENERATE_CONTAINER in placement.warnings and last_known_good is not None:
            self.logger.info("Container not measurable, returning last known good placement")
            warnings = list(last_known_good.warnings)
            for warning in (PlacementWarning.DEGENERATE_CONTAINER, PlacementWarning.STALE_PLACEMENT):
                if warning not in warnings:
                    warnings.append(warning)
            return last_known_good.model_copy(update={"warnings": warnings})

        return placement

    def drag(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        dx: float,
        dy: float,
        image: ImageSize,
        container: DisplaySize,
        fit_mode: FitMode = FitMode.CONTAIN
    ) -> Tuple[DesignTransform, List[PlacementWarning]]:
        delimitation = self._migrated(delimitation)
        metrics = self.compute_metrics(image, container, fit_mode)
        if metrics.is_degenerate:
            self.logger.warning("Drag on an unmeasured container ignored, keeping the current transform")
            return transform, [PlacementWarning.DEGENERATE_CONTAINER]

        updated = self.positioning_engine.apply_drag(delimitation, transform, dx, dy, metrics)
        constraints = self.positioning_engine.compute_constraints(
            delimitation, updated.scale, image.width, image.height
        )
        return updated, self._overflow_warnings(constraints)

    def rescale(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        scale: float,
        image: Optional[ImageSize] = None
    ) -> Tuple[DesignTransform, List[PlacementWarning]]:
        self._check_scale(scale)
        delimitation = self._migrated(delimitation)
        width, height = self._image_size(delimitation, image)
        updated = self.positioning_engine.apply_scale(delimitation, transform, scale, width, height)
        constraints = self.positioning_engine.compute_constraints(delimitation, scale, width, height)
        return updated, self._overflow_warnings(constraints)

    @debug_exception
    def build_compositor_payload(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image: Optional[ImageSize] = None
    ) -> Tuple[BoundingBox, CompositorPayload, List[PlacementWarning]]:
        """Bounding box and payload for the server-side compositor."""
        delimitation = self._migrated(delimitation)
        width, height = self._image_size(delimitation, image)
        box = self.positioning_engine.compile_bounding_box(delimitation, transform, width, height)
        payload = self.positioning_engine.to_compositor_payload(box, transform.rotation)
        constraints = self.positioning_engine.compute_constraints(delimitation, transform.scale, width, height)

        self.logger.info(
            f"Compositor box for delimitation {delimitation.id!r}: "
            f"left={box.left}, top={box.top}, width={box.width}, height={box.height}"
        )
        return box, payload, self._overflow_warnings(constraints)

    def create_rebinder(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image: ImageSize,
        fit_mode: FitMode = FitMode.CONTAIN,
        reference_size: Optional[DisplaySize] = None
    ) -> ResponsiveRebinder:
        return self.positioning_engine.create_rebinder(
            self._migrated(delimitation), transform, image, fit_mode, reference_size
        )
