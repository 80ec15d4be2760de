from typing import Optional

from app.interfaces.positioning_engine import PositioningEngine
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
from app.utils.debug_utils import debug_timing, debug_exception

from app.implementations.positioning.delimitation_normalizer import DelimitationNormalizer
from app.implementations.positioning.coordinate_mapper import CoordinateMapper
from app.implementations.positioning.constraint_solver import ConstraintSolver
from app.implementations.positioning.transform_engine import PositionTransformEngine
from app.implementations.positioning.bounding_box_compiler import BoundingBoxCompiler
from app.implementations.positioning.responsive_rebinder import ResponsiveRebinder

class GeometryPositioningEngine(PositioningEngine):
    """Pure-geometry implementation of the positioning engine"""

    def __init__(self):
        self.logger = get_logger(__name__)
        self.normalizer = DelimitationNormalizer()
        self.mapper = CoordinateMapper()
        self.solver = ConstraintSolver()
        self.transform_engine = PositionTransformEngine(self.normalizer, self.mapper, self.solver)
        self.compiler = BoundingBoxCompiler(self.transform_engine)

    def normalize(self, delimitation: Delimitation) -> Delimitation:
        return self.normalizer.normalize(delimitation)

    def migrate_legacy(self, delimitation: Delimitation) -> Delimitation:
        return self.normalizer.migrate_legacy(delimitation)

    def validate_delimitation(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> ZoneValidationReport:
        return self.normalizer.validate_bounds(delimitation, image_width, image_height)

    def compute_image_metrics(
        self,
        original_width: float,
        original_height: float,
        container_width: float,
        container_height: float,
        fit_mode: FitMode = FitMode.CONTAIN
    ) -> ImageMetrics:
        return self.mapper.compute_image_metrics(
            original_width, original_height, container_width, container_height, fit_mode
        )

    def to_display_rect(self, delimitation: Delimitation, metrics: ImageMetrics) -> DisplayRect:
        percent = self.normalizer.normalize(delimitation, metrics.original_width, metrics.original_height)
        return self.mapper.to_display_rect(percent, metrics)

    def compute_constraints(
        self,
        delimitation: Delimitation,
        scale: float,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> PositionConstraints:
        return self.transform_engine.constraints_for(delimitation, scale, image_width, image_height)

    @debug_timing
    def resolve_placement(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        metrics: ImageMetrics,
        reference_size: Optional[DisplaySize] = None
    ) -> ResolvedPlacement:
        return self.transform_engine.resolve_placement(delimitation, transform, metrics, reference_size)

    def apply_drag(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        dx: float,
        dy: float,
        metrics: ImageMetrics
    ) -> DesignTransform:
        return self.transform_engine.apply_drag(delimitation, transform, dx, dy, metrics)

    def apply_scale(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        scale: float,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> DesignTransform:
        return self.transform_engine.apply_scale(delimitation, transform, scale, image_width, image_height)

    @debug_exception
    def compile_bounding_box(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> BoundingBox:
        return self.compiler.compile(delimitation, transform, image_width, image_height)

    def to_compositor_payload(self, box: BoundingBox, rotation: float = 0.0) -> CompositorPayload:
        return self.compiler.to_compositor_payload(box, rotation)

    def create_rebinder(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image: ImageSize,
        fit_mode: FitMode = FitMode.CONTAIN,
        reference_size: Optional[DisplaySize] = None
    ) -> ResponsiveRebinder:
        return ResponsiveRebinder(
            delimitation,
            transform,
            image,
            fit_mode=fit_mode,
            reference_size=reference_size,
            engine=self.transform_engine
        )
