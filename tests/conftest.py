import pytest
import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Settings are read when app.config is first imported
os.environ.setdefault("DEBUG", "True")
os.environ.setdefault("LOG_TO_FILE", "False")

from app.implementations.geometry_positioning_engine import GeometryPositioningEngine
from app.schemas.positioning_schemas import CoordinateType, Delimitation, DesignTransform

# Setup any global fixtures or configuration for tests here
@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables and configurations"""
    os.environ["DEBUG"] = "True"
    os.environ["TESTING"] = "True"

    yield

@pytest.fixture
def engine():
    return GeometryPositioningEngine()

@pytest.fixture
def pixel_zone():
    """400x400 pixel zone on a 1000x800 product photo"""
    return Delimitation(
        id=1,
        x=100,
        y=100,
        width=400,
        height=400,
        coordinate_type=CoordinateType.PIXEL,
        image_width=1000,
        image_height=800,
    )

@pytest.fixture
def percent_zone():
    return Delimitation(
        id=2,
        x=31.58,
        y=19.73,
        width=33.89,
        height=39.72,
        coordinate_type=CoordinateType.PERCENTAGE,
    )

@pytest.fixture
def transform():
    return DesignTransform(offset_x=50, offset_y=-30, scale=0.8)
