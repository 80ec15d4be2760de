from typing import Optional, Tuple

from app.config import settings
from app.exceptions import OutOfRangeInputError, PlacementWarning
from app.schemas.positioning_schemas import CoordinateType, Delimitation, PixelRect, ZoneValidationReport
from app.utils.logging_config import get_logger
from app.utils.debug_utils import debug_exception

class DelimitationNormalizer:
    """Converts delimitations between pixel and percentage-of-image units"""

    def __init__(self, legacy_pixel_threshold: float = None):
        self.logger = get_logger(__name__)
        if legacy_pixel_threshold is None:
            legacy_pixel_threshold = settings.LEGACY_PIXEL_THRESHOLD
        self.legacy_pixel_threshold = legacy_pixel_threshold

    def _resolve_image_size(
        self,
        delimitation: Delimitation,
        image_width: Optional[float],
        image_height: Optional[float]
    ) -> Tuple[float, float]:
        """Pick the image size a pixel delimitation is expressed against."""
        width = delimitation.image_width or image_width
        height = delimitation.image_height or image_height
        if not width or not height:
            raise OutOfRangeInputError(
                "imageWidth/imageHeight",
                (width, height),
                "pixel delimitations need the intrinsic image size to be normalized"
            )
        return width, height

    def coordinate_type_of(self, delimitation: Delimitation) -> CoordinateType:
        """Unit of a delimitation that went through migrate_legacy.

        Untagged records are read in the canonical percentage unit; only
        migrate_legacy guesses pixels from the raw values.
        """
        return delimitation.coordinate_type or CoordinateType.PERCENTAGE

    @debug_exception
    def normalize(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> Delimitation:
        """Return the delimitation in percent of the image size.

        Tagged percentage delimitations are returned as is. Pixel values are
        divided by the intrinsic image size the zone was drawn on, falling back
        to ``image_width``/``image_height`` when the record does not carry one.
        """
        coordinate_type = self.coordinate_type_of(delimitation)

        if coordinate_type == CoordinateType.PERCENTAGE:
            if delimitation.coordinate_type == CoordinateType.PERCENTAGE:
                return delimitation
            return delimitation.with_changes(coordinate_type=CoordinateType.PERCENTAGE)

        width, height = self._resolve_image_size(delimitation, image_width, image_height)
        return delimitation.with_changes(
            x=delimitation.x / width * 100,
            y=delimitation.y / height * 100,
            width=delimitation.width / width * 100,
            height=delimitation.height / height * 100,
            coordinate_type=CoordinateType.PERCENTAGE,
            image_width=width,
            image_height=height,
        )

    def to_absolute(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> PixelRect:
        """Absolute pixel rectangle of a delimitation on the original image.

        ``image_width``/``image_height`` are the original image dimensions,
        never the display ones.
        """
        coordinate_type = self.coordinate_type_of(delimitation)

        if coordinate_type == CoordinateType.PIXEL:
            same_image = (
                image_width is None or image_height is None
                or (delimitation.image_width in (None, image_width)
                    and delimitation.image_height in (None, image_height))
            )
            if same_image:
                return PixelRect(
                    x=delimitation.x,
                    y=delimitation.y,
                    width=delimitation.width,
                    height=delimitation.height,
                )

        percent = self.normalize(delimitation, image_width, image_height)
        width = image_width or percent.image_width
        height = image_height or percent.image_height
        if not width or not height:
            raise OutOfRangeInputError(
                "imageWidth/imageHeight",
                (width, height),
                "the original image size is required to place a percentage delimitation"
            )

        return PixelRect(
            x=percent.x / 100 * width,
            y=percent.y / 100 * height,
            width=percent.width / 100 * width,
            height=percent.height / 100 * height,
        )

    def to_pixel(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> Delimitation:
        """Inverse of normalize: a PIXEL-tagged copy of the delimitation."""
        width = image_width or delimitation.image_width
        height = image_height or delimitation.image_height
        rect = self.to_absolute(delimitation, width, height)
        return delimitation.with_changes(
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            coordinate_type=CoordinateType.PIXEL,
            image_width=width,
            image_height=height,
        )

    # Legacy records

    def infer_coordinate_type(self, delimitation: Delimitation) -> CoordinateType:
        """Guess the unit of an untagged delimitation.

        Any raw value above the threshold can only be a pixel measure. Small
        pixel zones near the origin are misread as percentages, so the result
        is logged as a warning. Only migrate_legacy calls this.
        """
        values = (delimitation.x, delimitation.y, delimitation.width, delimitation.height)
        if any(value > self.legacy_pixel_threshold for value in values):
            inferred = CoordinateType.PIXEL
        else:
            inferred = CoordinateType.PERCENTAGE

        self.logger.warning(
            f"{PlacementWarning.AMBIGUOUS_COORDINATE_TYPE.value}: delimitation "
            f"{delimitation.id!r} has no coordinate type, inferred {inferred.value} "
            f"from values {values}"
        )
        return inferred

    def migrate_legacy(self, delimitation: Delimitation) -> Delimitation:
        """Make an inferred coordinate type explicit so it is never guessed again."""
        if delimitation.coordinate_type is not None:
            return delimitation
        return delimitation.with_changes(coordinate_type=self.infer_coordinate_type(delimitation))

    # Admin-side sanity checks

    def validate_bounds(
        self,
        delimitation: Delimitation,
        image_width: Optional[float] = None,
        image_height: Optional[float] = None
    ) -> ZoneValidationReport:
        """Check that a zone sits inside its image and has a usable shape."""
        errors = []
        warnings = []

        width = image_width or delimitation.image_width
        height = image_height or delimitation.image_height
        if not width or not height:
            raise OutOfRangeInputError(
                "imageWidth/imageHeight",
                (width, height),
                "the image size is required to validate a delimitation"
            )

        rect = self.to_absolute(delimitation, width, height)

        if rect.x < 0:
            errors.append(f"Zone starts left of the image: x={rect.x:.0f}px")
        if rect.y < 0:
            errors.append(f"Zone starts above the image: y={rect.y:.0f}px")
        if rect.right > width:
            errors.append(f"Zone overflows the right edge by {rect.right - width:.0f}px")
        if rect.bottom > height:
            errors.append(f"Zone overflows the bottom edge by {rect.bottom - height:.0f}px")

        if rect.width < settings.MIN_ZONE_SIZE or rect.height < settings.MIN_ZONE_SIZE:
            warnings.append(f"Zone is very small: {rect.width:.0f}x{rect.height:.0f}px")

        area_percent = rect.width * rect.height / (width * height) * 100
        if area_percent > settings.MAX_ZONE_AREA_PERCENT:
            warnings.append(f"Zone covers {area_percent:.1f}% of the image")

        if rect.width > 0 and rect.height > 0:
            aspect_ratio = rect.width / rect.height
            if aspect_ratio > settings.MAX_ZONE_ASPECT_RATIO or aspect_ratio < 1 / settings.MAX_ZONE_ASPECT_RATIO:
                warnings.append(f"Extreme zone aspect ratio: {aspect_ratio:.2f}")

        if errors:
            self.logger.warning(f"Delimitation {delimitation.id!r} failed bounds validation: {errors}")

        return ZoneValidationReport(is_valid=not errors, errors=errors, warnings=warnings)
