import pytest

from app.exceptions import PlacementWarning
from app.implementations.positioning.responsive_rebinder import ResponsiveRebinder
from app.schemas.positioning_schemas import CoordinateType, DesignTransform, DisplaySize, FitMode, ImageSize

@pytest.fixture
def rebinder(pixel_zone, transform):
    return ResponsiveRebinder(pixel_zone, transform, ImageSize(width=1000, height=800), FitMode.CONTAIN)

def test_nothing_to_render_before_the_first_measurement(rebinder):
    assert rebinder.recompute() is None

def test_zone_is_kept_in_percentages(rebinder):
    assert rebinder.delimitation.coordinate_type == CoordinateType.PERCENTAGE

def test_resize_recomputes_metrics_and_placement(rebinder):
    state = rebinder.on_container_resize(500, 500)

    assert state.container == DisplaySize(width=500, height=500)
    assert state.metrics.offset_y == pytest.approx(50)
    assert state.zone_rect.left == pytest.approx(50)
    assert state.zone_rect.width == pytest.approx(200)
    assert state.placement.left == pytest.approx(90)
    assert state.placement.width == pytest.approx(160)
    assert not state.stale

def test_resize_never_changes_the_transform(rebinder, transform):
    rebinder.on_container_resize(500, 500)
    rebinder.on_container_resize(1200, 300)

    assert rebinder.transform is transform
    assert rebinder.transform == DesignTransform(offset_x=50, offset_y=-30, scale=0.8)

def test_zero_size_reuses_last_good_state(rebinder):
    good = rebinder.on_container_resize(500, 500)

    state = rebinder.on_container_resize(0, 0)

    assert state.stale
    assert state.placement == good.placement
    assert PlacementWarning.DEGENERATE_CONTAINER in state.warnings
    assert PlacementWarning.STALE_PLACEMENT in state.warnings

def test_zero_size_before_any_layout(rebinder):
    assert rebinder.on_container_resize(0, 300) is None

def test_rebind_transform_uses_the_last_size(rebinder):
    rebinder.on_container_resize(500, 500)

    state = rebinder.rebind_transform(DesignTransform(offset_x=0, offset_y=0, scale=1.0))

    assert state.placement.left == pytest.approx(50)
    assert state.placement.top == pytest.approx(100)
    assert state.placement.width == pytest.approx(200)

def test_recompute_is_stable(rebinder):
    first = rebinder.on_container_resize(640, 480)

    assert rebinder.recompute() == first
