import os
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""
    APP_NAME: str = "Design Positioning API"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    API_PREFIX: str = "/api/v1"

    # Logging settings
    LOG_TO_FILE: bool = True
    LOGS_DIR: str = "logs"

    # CORS settings
    CORS_ORIGINS: list = ["*"]

    # Legacy delimitations without a coordinate type are read as pixels
    # when any raw value exceeds this threshold
    LEGACY_PIXEL_THRESHOLD: float = 100.0

    # Geometry settings
    DEFAULT_FIT_MODE: str = "contain"
    MAX_SCALE: float = 2.0
    RESIZE_DEBOUNCE_SECONDS: float = 0.1

    # Delimitation sanity checks
    MIN_ZONE_SIZE: float = 10.0
    MAX_ZONE_AREA_PERCENT: float = 50.0
    MAX_ZONE_ASPECT_RATIO: float = 5.0

    class Config:
        env_file = ".env"

settings = Settings()
