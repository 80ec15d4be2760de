import logging
import pytest

from app.exceptions import OutOfRangeInputError
from app.implementations.positioning.delimitation_normalizer import DelimitationNormalizer
from app.schemas.positioning_schemas import CoordinateType, Delimitation

@pytest.fixture
def normalizer():
    return DelimitationNormalizer()

def test_percentage_delimitation_is_returned_unchanged(normalizer, percent_zone):
    """Test that tagged percentage zones pass through as the same object"""
    assert normalizer.normalize(percent_zone) is percent_zone

def test_pixel_delimitation_is_divided_by_image_size(normalizer, pixel_zone):
    """Test pixel to percentage conversion"""
    percent = normalizer.normalize(pixel_zone)

    assert percent.coordinate_type == CoordinateType.PERCENTAGE
    assert percent.x == pytest.approx(10.0)
    assert percent.y == pytest.approx(12.5)
    assert percent.width == pytest.approx(40.0)
    assert percent.height == pytest.approx(50.0)
    assert percent.image_width == 1000
    assert percent.image_height == 800
    assert percent.id == pixel_zone.id

def test_pixel_delimitation_without_image_size_is_rejected(normalizer):
    """Test that pixel zones need the intrinsic image size"""
    zone = Delimitation(x=10, y=10, width=50, height=50, coordinate_type=CoordinateType.PIXEL)

    with pytest.raises(OutOfRangeInputError):
        normalizer.normalize(zone)

def test_pixel_delimitation_can_use_explicit_image_size(normalizer):
    zone = Delimitation(x=50, y=50, width=100, height=200, coordinate_type=CoordinateType.PIXEL)

    percent = normalizer.normalize(zone, image_width=500, image_height=1000)

    assert (percent.x, percent.y, percent.width, percent.height) == pytest.approx((10, 5, 20, 20))

def test_pixel_round_trip(normalizer, pixel_zone):
    """Test that pixel -> percentage -> pixel gives the original zone back"""
    back = normalizer.to_pixel(normalizer.normalize(pixel_zone))

    assert back.coordinate_type == CoordinateType.PIXEL
    assert back.x == pytest.approx(pixel_zone.x)
    assert back.y == pytest.approx(pixel_zone.y)
    assert back.width == pytest.approx(pixel_zone.width)
    assert back.height == pytest.approx(pixel_zone.height)

def test_percentage_round_trip(normalizer, percent_zone):
    """Test that percentage -> pixel -> percentage gives the original zone back"""
    pixel = normalizer.to_pixel(percent_zone, 400, 500)
    back = normalizer.normalize(pixel)

    assert back.x == pytest.approx(percent_zone.x)
    assert back.y == pytest.approx(percent_zone.y)
    assert back.width == pytest.approx(percent_zone.width)
    assert back.height == pytest.approx(percent_zone.height)

def test_to_absolute_uses_original_image_size(normalizer, percent_zone):
    rect = normalizer.to_absolute(percent_zone, 400, 500)

    assert rect.x == pytest.approx(126.32)
    assert rect.y == pytest.approx(98.65)
    assert rect.width == pytest.approx(135.56)
    assert rect.height == pytest.approx(198.6)

def test_to_absolute_rescales_pixel_zone_for_another_resolution(normalizer, pixel_zone):
    """Test a pixel zone drawn on a 1000x800 photo placed on its 2000x1600 original"""
    rect = normalizer.to_absolute(pixel_zone, 2000, 1600)

    assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((200, 200, 800, 800))

def test_to_absolute_percentage_without_size_is_rejected(normalizer, percent_zone):
    with pytest.raises(OutOfRangeInputError):
        normalizer.to_absolute(percent_zone)

def test_legacy_zone_with_large_values_is_inferred_as_pixels(normalizer, caplog):
    """Test the legacy heuristic and its warning"""
    zone = Delimitation(x=150, y=80, width=90, height=60, image_width=1000, image_height=1000)

    with caplog.at_level(logging.WARNING):
        inferred = normalizer.infer_coordinate_type(zone)

    assert inferred == CoordinateType.PIXEL
    assert "AMBIGUOUS_COORDINATE_TYPE" in caplog.text

def test_legacy_zone_with_small_values_is_inferred_as_percentage(normalizer):
    zone = Delimitation(x=10, y=20, width=50, height=40)

    assert normalizer.infer_coordinate_type(zone) == CoordinateType.PERCENTAGE
    assert normalizer.normalize(zone).coordinate_type == CoordinateType.PERCENTAGE

def test_migrate_legacy_makes_the_type_explicit(normalizer, pixel_zone):
    legacy = Delimitation(x=150, y=150, width=300, height=300, image_width=1000, image_height=1000)

    migrated = normalizer.migrate_legacy(legacy)

    assert migrated.coordinate_type == CoordinateType.PIXEL
    assert legacy.coordinate_type is None
    assert normalizer.migrate_legacy(pixel_zone) is pixel_zone

def test_validate_bounds_accepts_a_reasonable_zone(normalizer, pixel_zone):
    report = normalizer.validate_bounds(pixel_zone)

    assert report.is_valid
    assert report.errors == []

def test_validate_bounds_reports_overflow(normalizer):
    zone = Delimitation(
        x=900, y=-10, width=200, height=100,
        coordinate_type=CoordinateType.PIXEL, image_width=1000, image_height=1000
    )

    report = normalizer.validate_bounds(zone)

    assert not report.is_valid
    assert len(report.errors) == 2

def test_validate_bounds_warns_about_shape(normalizer):
    tiny = Delimitation(x=10, y=10, width=5, height=5, coordinate_type=CoordinateType.PIXEL,
                        image_width=1000, image_height=1000)
    huge = Delimitation(x=0, y=0, width=90, height=90, coordinate_type=CoordinateType.PERCENTAGE)
    strip = Delimitation(x=0, y=0, width=600, height=50, coordinate_type=CoordinateType.PIXEL,
                         image_width=1000, image_height=1000)

    assert normalizer.validate_bounds(tiny).warnings
    assert normalizer.validate_bounds(huge, 1000, 1000).warnings
    assert any("aspect ratio" in warning for warning in normalizer.validate_bounds(strip).warnings)

def test_core_path_does_not_guess_units(normalizer, caplog):
    """Test untagged zones are read as percentages without running the heuristic"""
    zone = Delimitation(x=10, y=20, width=50, height=40)

    with caplog.at_level(logging.WARNING):
        rect = normalizer.to_absolute(zone, 1000, 500)

    assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((100, 100, 500, 200))
    assert "AMBIGUOUS_COORDINATE_TYPE" not in caplog.text
