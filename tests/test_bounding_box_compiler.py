import pytest

from app.exceptions import OutOfRangeInputError
from app.implementations.positioning.bounding_box_compiler import BoundingBoxCompiler, round_half_up
from app.schemas.positioning_schemas import BoundingBox, CoordinateType, Delimitation, DesignTransform

@pytest.fixture
def compiler():
    return BoundingBoxCompiler()

def test_compile_pixel_zone(compiler, pixel_zone, transform):
    """Test the reference placement: 400px zone at (100,100), offset (50,-30), scale 0.8"""
    box = compiler.compile(pixel_zone, transform)

    assert box == BoundingBox(left=180, top=110, width=320, height=320)

def test_full_scale_box_equals_the_zone(compiler, pixel_zone):
    box = compiler.compile(pixel_zone, DesignTransform(offset_x=75, offset_y=-20, scale=1.0))

    assert box == BoundingBox(left=100, top=100, width=400, height=400)

@pytest.mark.parametrize("scale", [0.1, 0.25, 0.5, 0.8, 0.95, 1.0])
@pytest.mark.parametrize("offset", [(-1000, -1000), (1000, 1000), (1000, -1000), (37.5, 12.25), (0, 0)])
def test_box_stays_inside_the_zone(compiler, pixel_zone, scale, offset):
    box = compiler.compile(pixel_zone, DesignTransform(offset_x=offset[0], offset_y=offset[1], scale=scale))

    assert box.left >= 100
    assert box.top >= 100
    assert box.right <= 500
    assert box.bottom <= 500

@pytest.mark.parametrize("scale", [0.1, 0.5, 0.8, 1.0])
@pytest.mark.parametrize("offset", [(-1000, -1000), (1000, 1000), (-1000, 1000), (0, 0)])
def test_box_stays_inside_a_fractional_zone(compiler, percent_zone, scale, offset):
    """Test containment when the zone edges fall between pixels (126.32, 98.65, ...)"""
    zone = compiler.engine.absolute_zone(percent_zone, 400, 500)

    box = compiler.compile(
        percent_zone, DesignTransform(offset_x=offset[0], offset_y=offset[1], scale=scale), 400, 500
    )

    assert box.left >= zone.x
    assert box.top >= zone.y
    assert box.right <= zone.right
    assert box.bottom <= zone.bottom
    assert box.width > 0 and box.height > 0

def test_compile_percentage_zone_rounds_at_the_end(compiler, percent_zone):
    box = compiler.compile(percent_zone, DesignTransform(offset_x=0, offset_y=0, scale=0.5), 400, 500)

    assert box == BoundingBox(left=160, top=148, width=68, height=100)

def test_compile_percentage_zone_needs_image_size(compiler, percent_zone, transform):
    with pytest.raises(OutOfRangeInputError):
        compiler.compile(percent_zone, transform)

def test_compile_pixel_zone_without_image_size(compiler, transform):
    zone = Delimitation(x=100, y=100, width=400, height=400, coordinate_type=CoordinateType.PIXEL)

    assert compiler.compile(zone, transform) == BoundingBox(left=180, top=110, width=320, height=320)

def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(-0.5) == 0
    assert round_half_up(2.49) == 2

def test_rotated_envelope(compiler):
    box = BoundingBox(left=190, top=110, width=320, height=320)

    assert compiler.rotated_envelope(box, 0) == box
    assert compiler.rotated_envelope(box, 90) == box
    assert compiler.rotated_envelope(box, 45) == BoundingBox(left=123, top=43, width=454, height=454)

def test_compositor_payload(compiler, pixel_zone, transform):
    box = compiler.compile(pixel_zone, transform)

    payload = compiler.to_compositor_payload(box, rotation=90)

    assert payload.position_unit == "PIXEL"
    assert (payload.x, payload.y, payload.width, payload.height) == (180, 110, 320, 320)
    assert payload.rotation == 90
    assert payload.envelope == box
