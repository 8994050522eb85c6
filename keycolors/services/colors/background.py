"""
Background Detection Module

Estimates the canvas/backdrop color of an image from its border ring or
corner blocks.
"""

from collections import Counter
from typing import List, Literal

import numpy as np
from loguru import logger

from .color_math import Pixel, clamp_channel
from .sampling import sample_border_ring, sample_corners


DEFAULT_BACKGROUND = Pixel(255, 255, 255)


def mode_color(samples: List[Pixel]) -> Pixel:
    """Most frequent exact pixel; ties go to the first one seen."""
    counts = Counter(samples)
    # Counter preserves insertion order, max() keeps the first maximum
    return max(counts.items(), key=lambda item: item[1])[0]


def mean_color(samples: List[Pixel]) -> Pixel:
    """Per-channel arithmetic mean, rounded to the nearest integer."""
    arr = np.array([p.as_tuple() for p in samples], dtype=np.float64)
    r, g, b = arr.mean(axis=0)
    return Pixel(clamp_channel(r), clamp_channel(g), clamp_channel(b))


def detect_background(samples: List[Pixel],
                      strategy: Literal["mode", "mean"] = "mode") -> Pixel:
    """
    Choose the single most representative background color.

    Args:
        samples: Border or corner pixels
        strategy: "mode" (most frequent exact color) or "mean" (average)

    Returns:
        Background pixel, or white when there are no samples
    """
    if not samples:
        logger.debug("No background samples, using default white")
        return DEFAULT_BACKGROUND

    if strategy == "mode":
        background = mode_color(samples)
    elif strategy == "mean":
        background = mean_color(samples)
    else:
        raise ValueError(f"Unknown background strategy: {strategy}")

    logger.debug(f"Background ({strategy} of {len(samples)} samples): {background.hex}")
    return background


def estimate_background(image: np.ndarray,
                        source: Literal["border", "corners"] = "border",
                        strategy: Literal["mode", "mean"] = "mode",
                        corner_size: int = 10) -> Pixel:
    """Sample the image edge and detect its background color."""
    if source == "border":
        samples = sample_border_ring(image)
    elif source == "corners":
        samples = sample_corners(image, size=corner_size)
    else:
        raise ValueError(f"Unknown background source: {source}")

    return detect_background(samples, strategy)
