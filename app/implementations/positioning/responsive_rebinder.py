from typing import Optional

from app.exceptions import PlacementWarning
from app.schemas.positioning_schemas import (
    Delimitation,
    DesignTransform,
    DisplaySize,
    FitMode,
    ImageSize,
    RenderState,
)
from app.utils.logging_config import get_logger

from app.implementations.positioning.transform_engine import PositionTransformEngine

class ResponsiveRebinder:
    """Re-evaluates a placement whenever the hosting viewport is measured again.

    The rebinder has no timers: the host decides when to call it (typically
    after debouncing its resize notifications). The transform it holds is
    only ever replaced, never persisted or mutated.
    """

    def __init__(
        self,
        delimitation: Delimitation,
        transform: DesignTransform,
        image: ImageSize,
        fit_mode: FitMode = FitMode.CONTAIN,
        reference_size: Optional[DisplaySize] = None,
        engine: PositionTransformEngine = None
    ):
        self.logger = get_logger(__name__)
        self.engine = engine or PositionTransformEngine()
        self.delimitation = self.engine.normalizer.normalize(delimitation, image.width, image.height)
        self.transform = transform
        self.image = image
        self.fit_mode = FitMode(fit_mode)
        self.reference_size = reference_size
        self.container: Optional[DisplaySize] = None
        self.last_good: Optional[RenderState] = None

    def on_container_resize(self, width: float, height: float) -> Optional[RenderState]:
        """Record a new viewport size and recompute the render state."""
        self.container = DisplaySize(width=width, height=height)
        return self.recompute()

    def rebind_transform(self, transform: DesignTransform) -> Optional[RenderState]:
        """Swap the in-memory transform (editor interaction) and recompute."""
        self.transform = transform
        return self.recompute()

    def recompute(self) -> Optional[RenderState]:
        """Re-evaluate with the last measured size.

        A degenerate measurement keeps the last good state, flagged stale, so
        the host keeps showing the previous placement until layout settles.
        Returns None until a usable size has been measured at least once.
        """
        if self.container is None:
            return None

        mapper = self.engine.mapper
        metrics = mapper.compute_image_metrics(
            self.image.width,
            self.image.height,
            self.container.width,
            self.container.height,
            self.fit_mode
        )

        if metrics.is_degenerate:
            if self.last_good is None:
                self.logger.debug("Container not measurable yet, nothing to reuse")
                return None
            self.logger.warning(
                f"{PlacementWarning.DEGENERATE_CONTAINER.value}: reusing placement computed for "
                f"{self.last_good.container.width}x{self.last_good.container.height}"
            )
            return self.last_good.model_copy(update={
                "stale": True,
                "warnings": [PlacementWarning.DEGENERATE_CONTAINER, PlacementWarning.STALE_PLACEMENT],
            })

        zone_rect = mapper.to_display_rect(self.delimitation, metrics)
        placement = self.engine.resolve_placement(self.delimitation, self.transform, metrics, self.reference_size)

        state = RenderState(
            container=self.container,
            metrics=metrics,
            zone_rect=zone_rect,
            placement=placement,
            stale=False,
            warnings=list(placement.warnings),
        )
        self.last_good = state
        return state
