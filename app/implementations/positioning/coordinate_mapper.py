from typing import Tuple

from app.exceptions import PlacementWarning
from app.schemas.positioning_schemas import Delimitation, DisplayRect, FitMode, ImageMetrics
from app.utils.logging_config import get_logger
from app.utils.debug_utils import debug_exception

class CoordinateMapper:
    """Maps geometry between original-image, percentage and display pixel spaces"""

    def __init__(self):
        self.logger = get_logger(__name__)

    @debug_exception
    def compute_image_metrics(
        self,
        original_width: float,
        original_height: float,
        container_width: float,
        container_height: float,
        fit_mode: FitMode = FitMode.CONTAIN
    ) -> ImageMetrics:
        """Locate the image inside its container for the given fit mode.

        - contain: the whole image is visible, the leftover space on one axis
          is split evenly (letterbox or pillarbox), offsets are >= 0.
        - cover: the image fills the container and overflows one axis, the
          overflow is centered so the crop origin is <= 0.
        """
        if container_width <= 0 or container_height <= 0 or original_width <= 0 or original_height <= 0:
            self.logger.warning(
                f"{PlacementWarning.DEGENERATE_CONTAINER.value}: cannot fit "
                f"{original_width}x{original_height} image into "
                f"{container_width}x{container_height} container"
            )
            return ImageMetrics(
                original_width=original_width,
                original_height=original_height,
                display_width=0.0,
                display_height=0.0,
            )

        image_ratio = original_width / original_height
        container_ratio = container_width / container_height
        fit_width = image_ratio > container_ratio
        if FitMode(fit_mode) == FitMode.COVER:
            fit_width = not fit_width

        if fit_width:
            display_width = container_width
            display_height = container_width / image_ratio
        else:
            display_height = container_height
            display_width = container_height * image_ratio

        metrics = ImageMetrics(
            original_width=original_width,
            original_height=original_height,
            display_width=display_width,
            display_height=display_height,
            offset_x=(container_width - display_width) / 2,
            offset_y=(container_height - display_height) / 2,
        )
        self.logger.debug(f"Image metrics ({fit_mode}): {metrics}")
        return metrics

    def to_display_rect(self, percent_delimitation: Delimitation, metrics: ImageMetrics) -> DisplayRect:
        """Map a percentage delimitation onto the displayed image.

        A zero-area display gives a zero rect: the host has not laid the
        image out yet and should retry after the next layout pass.
        """
        if metrics.is_degenerate:
            self.logger.warning(
                f"{PlacementWarning.DEGENERATE_CONTAINER.value}: display is "
                f"{metrics.display_width}x{metrics.display_height}, returning an empty rect"
            )
            return DisplayRect.zero()

        return DisplayRect(
            left=metrics.offset_x + percent_delimitation.x / 100 * metrics.display_width,
            top=metrics.offset_y + percent_delimitation.y / 100 * metrics.display_height,
            width=percent_delimitation.width / 100 * metrics.display_width,
            height=percent_delimitation.height / 100 * metrics.display_height,
        )

    def image_to_display_point(self, x: float, y: float, metrics: ImageMetrics) -> Tuple[float, float]:
        """Original-image pixel coordinates to display coordinates."""
        scale = metrics.display_scale
        return metrics.offset_x + x * scale, metrics.offset_y + y * scale

    def display_to_image_point(self, x: float, y: float, metrics: ImageMetrics) -> Tuple[float, float]:
        """Display coordinates back to original-image pixel coordinates."""
        if metrics.is_degenerate:
            return 0.0, 0.0
        scale = metrics.display_scale
        return (x - metrics.offset_x) / scale, (y - metrics.offset_y) / scale

    def display_to_image_delta(self, dx: float, dy: float, metrics: ImageMetrics) -> Tuple[float, float]:
        """Convert a pointer movement on screen into original-image pixels."""
        if metrics.is_degenerate:
            return 0.0, 0.0
        scale = metrics.display_scale
        return dx / scale, dy / scale
