"""
Monochrome Rules Module

Threshold policy for images dominated by near-pure black and white: detects
the monochrome case, picks the significance threshold for black/white
injection and decides which ordinary clusters are acceptable.
"""

from dataclasses import dataclass
from typing import List

from loguru import logger

from keycolors.config import config
from .color_math import Pixel
from .sampling import ColorSample


WHITE = Pixel(255, 255, 255)
BLACK = Pixel(0, 0, 0)


@dataclass(frozen=True)
class BlackWhiteStats:
    """Near-white and near-black pixel counts over a sample histogram."""
    white_count: int
    black_count: int
    total: int

    @property
    def white_percentage(self) -> float:
        return 100.0 * self.white_count / self.total if self.total else 0.0

    @property
    def black_percentage(self) -> float:
        return 100.0 * self.black_count / self.total if self.total else 0.0


def brightness(pixel: Pixel) -> float:
    """Mean channel value (0-255)."""
    return (pixel.r + pixel.g + pixel.b) / 3.0


def chroma(pixel: Pixel) -> int:
    """Spread between the strongest and weakest channel (0-255)."""
    channels = pixel.as_tuple()
    return max(channels) - min(channels)


def measure_black_white(samples: List[ColorSample],
                        white_level: int = config.WHITE_LEVEL,
                        black_level: int = config.BLACK_LEVEL) -> BlackWhiteStats:
    """Count sampled pixels at or above white_level / at or below black_level."""
    white = 0
    black = 0
    total = 0
    for sample in samples:
        total += sample.population
        level = brightness(sample.pixel)
        if level >= white_level:
            white += sample.population
        elif level <= black_level:
            black += sample.population

    stats = BlackWhiteStats(white_count=white, black_count=black, total=total)
    logger.debug(f"Black/white: white={stats.white_percentage:.1f}% "
                 f"black={stats.black_percentage:.1f}%")
    return stats


def is_monochromatic(stats: BlackWhiteStats,
                     percent: float = config.MONOCHROME_PERCENT) -> bool:
    """An image is monochrome when white% + black% exceeds percent."""
    return (stats.white_percentage + stats.black_percentage) > percent


def significance_threshold(monochrome: bool,
                           normal: float = config.SIGNIFICANT_FRACTION,
                           relaxed: float = config.MONOCHROME_SIGNIFICANT_FRACTION) -> float:
    """Fraction of pixels black or white must reach to be injected."""
    return relaxed if monochrome else normal


def passes_acceptance(pixel: Pixel, monochrome: bool) -> bool:
    """
    Acceptance filter for ordinary (non-injected) clusters.

    Monochrome images accept every surviving cluster. Otherwise a cluster
    must carry some chroma and sit away from the black and white extremes.
    """
    if monochrome:
        return True
    level = brightness(pixel)
    return chroma(pixel) > 5 and 20 <= level < 240
