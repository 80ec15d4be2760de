from abc import ABC, abstractmethod
from typing import Optional

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

class PositioningEngine(ABC):
    """Interface for design positioning implementations"""

    @abstractmethod
    def normalize(self, delimitation: Delimitation) -> Delimitation:
        """Return the delimitation expressed in percent of the image size."""
        pass

    @abstractmethod
    def compute_image_metrics(
        self,
        original_width: float,
        original_height: float,
        container_width: float,
        container_height: float,
        fit_mode: FitMode = FitMode.CONTAIN
    ) -> ImageMetrics:
        """Locate the original image inside a viewport box under a fit mode."""
        pass

    @abstractmethod
    def to_display_rect(self, delimitation: Delimitation, metrics: ImageMetrics) -> DisplayRect:
        """Map a delimitation onto the current display."""
        pass

    @abstractmethod
    def compute_constraints(
        self,
        delimitation: Delimitation,
        scale: float,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> PositionConstraints:
        """Legal offset range keeping the design inside the delimitation."""
        pass

    @abstractmethod
    def resolve_placement(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        metrics: ImageMetrics,
        reference_size: Optional[DisplaySize] = None
    ) -> ResolvedPlacement:
        """
        Resolve a stored transform into a placement on the current display.

        Returns:
            ResolvedPlacement: display-space rectangle, rotation and pivot
        """
        pass

    @abstractmethod
    def apply_drag(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        dx: float,
        dy: float,
        metrics: ImageMetrics
    ) -> DesignTransform:
        """Move a design by a display-pixel delta, staying inside its zone."""
        pass

    @abstractmethod
    def apply_scale(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        scale: float,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> DesignTransform:
        """Rescale a design, re-clamping its offset."""
        pass

    @abstractmethod
    def compile_bounding_box(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> BoundingBox:
        """Absolute integer pixel rectangle on the original image."""
        pass

    @abstractmethod
    def to_compositor_payload(self, box: BoundingBox, rotation: float = 0.0) -> CompositorPayload:
        """Wrap a bounding box in the format the compositor consumes."""
        pass

    @abstractmethod
    def migrate_legacy(self, delimitation: Delimitation) -> Delimitation:
        """Tag an untagged delimitation with its inferred coordinate type."""
        pass

    @abstractmethod
    def validate_delimitation(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> ZoneValidationReport:
        """Report zones that leave their image or have an unusable shape."""
        pass

    @abstractmethod
    def create_rebinder(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image: ImageSize,
        fit_mode: FitMode = FitMode.CONTAIN,
        reference_size: Optional[DisplaySize] = None
    ):
        """Stateful helper re-resolving a placement on every viewport resize."""
        pass
