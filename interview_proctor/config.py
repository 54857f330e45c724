"""
Interview Proctor Configuration Settings

Thresholds are in seconds unless noted. Override any value through the
environment or a .env file.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Configuration for the proctoring service."""

    # API Settings
    APP_NAME: str = "Interview Proctor Service"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    # Debounce delays
    FACE_ABSENCE_SECONDS: float = 10.0
    GAZE_AWAY_SECONDS: float = 5.0

    # Gaze heuristic: nose offset from the eye midpoint (keypoint units)
    GAZE_OFFSET_THRESHOLD: float = 50.0

    # Labels matched case-insensitively as substrings
    DISALLOWED_OBJECTS: List[str] = ["cell phone", "book", "laptop", "person"]

    # Driver cadence
    ANALYSIS_INTERVAL_SECONDS: float = 1.0

    # Where exported reports are written
    REPORT_DIR: str = "reports"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
