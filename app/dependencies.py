from fastapi import Depends

from app.interfaces.positioning_engine import PositioningEngine
from app.implementations.geometry_positioning_engine import GeometryPositioningEngine
from app.services.positioning_service import PositioningService

def get_positioning_engine() -> PositioningEngine:
    """Dependency for getting the positioning engine implementation"""
    return GeometryPositioningEngine()

def get_positioning_service(
    positioning_engine: PositioningEngine = Depends(get_positioning_engine)
) -> PositioningService:
    """Dependency for getting the positioning service"""
    return PositioningService(positioning_engine)
