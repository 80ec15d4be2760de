import math
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from app.config import settings
from app.exceptions import OutOfRangeInputError, PlacementWarning


def canonical_rotation(degrees: float) -> float:
    """Normalize a rotation to the canonical clockwise range (-180, 180]."""
    rotation = math.fmod(degrees, 360.0)
    if rotation > 180.0:
        rotation -= 360.0
    elif rotation <= -180.0:
        rotation += 360.0
    return rotation + 0.0  # drop negative zero


class CoordinateType(str, Enum):
    PIXEL = "PIXEL"
    PERCENTAGE = "PERCENTAGE"


class FitMode(str, Enum):
    CONTAIN = "contain"
    COVER = "cover"


class GeometryModel(BaseModel):
    """Immutable value record, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ApiModel(BaseModel):
    """Request/response body, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Delimitation(GeometryModel):
    """Placement zone on one product image view"""
    id: Optional[Union[int, str]] = Field(None, description="Identifier assigned by the catalog")
    name: Optional[str] = Field(None, description="Admin-facing zone name")
    x: float = Field(..., description="Left edge, in pixels or percent of image width")
    y: float = Field(..., description="Top edge, in pixels or percent of image height")
    width: float = Field(..., ge=0, description="Zone width, in pixels or percent")
    height: float = Field(..., ge=0, description="Zone height, in pixels or percent")
    coordinate_type: Optional[CoordinateType] = Field(
        None, description="Unit of x/y/width/height; only legacy records omit it"
    )
    image_width: Optional[float] = Field(None, gt=0, description="Intrinsic width of the product photo")
    image_height: Optional[float] = Field(None, gt=0, description="Intrinsic height of the product photo")

    def with_changes(self, **changes) -> "Delimitation":
        return Delimitation(**{**self.model_dump(), **changes})


class DesignTransform(GeometryModel):
    """A vendor's placement of one design inside one delimitation.

    Offsets are measured from the zone's center in original-image pixels.
    Scale is the fraction of the zone covered by the design's bounding box.
    Rotation is stored clockwise in (-180, 180].
    """
    offset_x: float = Field(0.0, validation_alias=AliasChoices("offsetX", "offset_x", "x"), serialization_alias="offsetX")
    offset_y: float = Field(0.0, validation_alias=AliasChoices("offsetY", "offset_y", "y"), serialization_alias="offsetY")
    scale: float = Field(0.8, validation_alias=AliasChoices("scale", "designScale", "design_scale"), serialization_alias="scale")
    rotation: float = Field(0.0)

    @field_validator("offset_x", "offset_y")
    @classmethod
    def _finite_offset(cls, value: float, info) -> float:
        if not math.isfinite(value):
            raise OutOfRangeInputError(info.field_name, value, "must be a finite number")
        return value

    @field_validator("scale")
    @classmethod
    def _scale_in_domain(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0 or value > settings.MAX_SCALE:
            raise OutOfRangeInputError("scale", value, f"must be in (0, {settings.MAX_SCALE}]")
        return value

    @field_validator("rotation")
    @classmethod
    def _canonical_rotation(cls, value: float) -> float:
        if not math.isfinite(value):
            raise OutOfRangeInputError("rotation", value, "must be a finite number")
        return canonical_rotation(value)

    def with_changes(self, **changes) -> "DesignTransform":
        # Rebuilt through validation so rotation stays canonical
        return DesignTransform(**{**self.model_dump(), **changes})


class ImageSize(GeometryModel):
    width: float = Field(..., gt=0, allow_inf_nan=False)
    height: float = Field(..., gt=0, allow_inf_nan=False)


class DisplaySize(GeometryModel):
    """Measured size of a viewport box; zero means not laid out yet"""
    width: float = Field(..., ge=0, allow_inf_nan=False)
    height: float = Field(..., ge=0, allow_inf_nan=False)

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


class ImageMetrics(GeometryModel):
    """Where the original image lands inside the current viewport box"""
    original_width: float
    original_height: float
    display_width: float
    display_height: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def identity(cls, width: float, height: float) -> "ImageMetrics":
        return cls(
            original_width=width,
            original_height=height,
            display_width=width,
            display_height=height,
        )

    @property
    def is_degenerate(self) -> bool:
        return (self.display_width <= 0 or self.display_height <= 0
                or self.original_width <= 0 or self.original_height <= 0)

    @property
    def display_scale(self) -> float:
        """Display pixels per original-image pixel"""
        if self.is_degenerate:
            return 0.0
        return self.display_width / self.original_width


class PixelRect(GeometryModel):
    """Rectangle in original-image pixel space"""
    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


class DisplayRect(GeometryModel):
    """Rectangle in current-display pixel space"""
    left: float
    top: float
    width: float
    height: float

    @classmethod
    def zero(cls) -> "DisplayRect":
        return cls(left=0.0, top=0.0, width=0.0, height=0.0)


class PositionConstraints(GeometryModel):
    """Legal offset range, in original-image pixels, around the zone center"""
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @computed_field
    @property
    def inverted(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y


class ResolvedPlacement(GeometryModel):
    """Renderable placement of a design in display pixels"""
    left: float
    top: float
    width: float
    height: float
    rotation_deg: float
    center_x: float
    center_y: float
    size_ratio: float
    offset_x: float
    offset_y: float
    warnings: List[PlacementWarning] = Field(default_factory=list)


class BoundingBox(GeometryModel):
    """Integer rectangle in original-image pixels handed to the compositor"""
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


class CompositorPayload(GeometryModel):
    x: int
    y: int
    width: int
    height: int
    position_unit: Literal["PIXEL"] = "PIXEL"
    rotation: float = 0.0
    envelope: BoundingBox


class RenderState(GeometryModel):
    """Output of one responsive re-binding pass"""
    container: DisplaySize
    metrics: ImageMetrics
    zone_rect: DisplayRect
    placement: Optional[ResolvedPlacement] = None
    stale: bool = False
    warnings: List[PlacementWarning] = Field(default_factory=list)


class ZoneValidationReport(GeometryModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


# Request / response bodies

class NormalizeRequest(ApiModel):
    delimitation: Delimitation


class ValidateZoneRequest(ApiModel):
    delimitation: Delimitation
    image: Optional[ImageSize] = None


class MetricsRequest(ApiModel):
    image: ImageSize
    container: DisplaySize
    fit_mode: FitMode = Field(default_factory=lambda: FitMode(settings.DEFAULT_FIT_MODE))


class DisplayRectRequest(MetricsRequest):
    delimitation: Delimitation


class DisplayRectResponse(ApiModel):
    metrics: ImageMetrics
    rect: DisplayRect
    warnings: List[PlacementWarning] = Field(default_factory=list)


class ConstraintsRequest(ApiModel):
    delimitation: Delimitation
    scale: float = Field(..., gt=0)
    image: Optional[ImageSize] = None


class PlacementRequest(MetricsRequest):
    delimitation: Delimitation
    transform: DesignTransform
    reference_size: Optional[DisplaySize] = None
    last_known_good: Optional[ResolvedPlacement] = None


class DragRequest(MetricsRequest):
    delimitation: Delimitation
    transform: DesignTransform
    dx: float
    dy: float


class ScaleRequest(ApiModel):
    delimitation: Delimitation
    transform: DesignTransform
    scale: float
    image: Optional[ImageSize] = None


class TransformResponse(ApiModel):
    transform: DesignTransform
    warnings: List[PlacementWarning] = Field(default_factory=list)


class BoundingBoxRequest(ApiModel):
    delimitation: Delimitation
    transform: DesignTransform
    image: Optional[ImageSize] = None


class BoundingBoxResponse(ApiModel):
    bounding_box: BoundingBox
    payload: CompositorPayload
    warnings: List[PlacementWarning] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response schema"""
    detail: str = Field(..., description="Error details")


class LiveSessionInit(ApiModel):
    """First message of a live re-binding session"""
    delimitation: Delimitation
    transform: DesignTransform
    image: ImageSize
    fit_mode: FitMode = Field(default_factory=lambda: FitMode(settings.DEFAULT_FIT_MODE))
    reference_size: Optional[DisplaySize] = None
