"""
keycolors Configuration
Manages environment variables and defaults for the palette analysis service.
"""
import os
from typing import Literal


class Config:
    """Configuration class for keycolors services."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("KEYCOLORS_MAX_FILE_MB", "10"))
    MAX_IMAGE_PIXELS: int = int(os.environ.get("KEYCOLORS_MAX_IMAGE_PIXELS", "50000000"))

    # Logging
    LOG_LEVEL: str = os.environ.get("KEYCOLORS_LOG_LEVEL", "INFO")

    # Analysis defaults
    MAX_COLORS: int = int(os.environ.get("KEYCOLORS_MAX_COLORS", "8"))
    MERGE_THRESHOLD: float = float(os.environ.get("KEYCOLORS_MERGE_THRESHOLD", "15"))
    BACKGROUND_THRESHOLD: float = float(os.environ.get("KEYCOLORS_BACKGROUND_THRESHOLD", "30"))
    SIGNIFICANT_FRACTION: float = float(os.environ.get("KEYCOLORS_SIGNIFICANT_FRACTION", "0.05"))
    MONOCHROME_SIGNIFICANT_FRACTION: float = float(
        os.environ.get("KEYCOLORS_MONOCHROME_SIGNIFICANT_FRACTION", "0.03")
    )
    SAMPLE_TARGET_COUNT: int = int(os.environ.get("KEYCOLORS_SAMPLE_TARGET_COUNT", "10000"))
    GRID_SIZE: int = int(os.environ.get("KEYCOLORS_GRID_SIZE", "20"))
    ORDER_BY: Literal["score", "vertical_position"] = os.environ.get("KEYCOLORS_ORDER_BY", "score")

    # Black/white detection (mean channel value)
    WHITE_LEVEL: int = 240
    BLACK_LEVEL: int = 30
    MONOCHROME_PERCENT: float = 90.0

    # Grid size bounds
    MIN_GRID_SIZE: int = 5
    MAX_GRID_SIZE: int = 50

    # Supported upload formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]


# Global config instance
config = Config()
