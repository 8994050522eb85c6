"""
Swatch Rendering Module

Renders palette strips and simplified images as base64 PNG artifacts.
"""

import base64
from typing import List, Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from .color_math import hex_to_rgb


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to BGR tuple for OpenCV."""
    r, g, b = hex_to_rgb(hex_color)
    return (b, g, r)  # BGR for OpenCV


def encode_png_b64(image_rgb: np.ndarray) -> str:
    """
    Encode an (H, W, 3) RGB array as a base64 PNG string.

    Raises:
        RuntimeError: If OpenCV cannot encode the image
    """
    if image_rgb.size == 0:
        raise ValueError("Cannot encode an empty image")

    bgr = cv2.cvtColor(np.ascontiguousarray(image_rgb[:, :, :3], dtype=np.uint8), cv2.COLOR_RGB2BGR)
    success, buffer = cv2.imencode('.png', bgr)
    if not success:
        raise RuntimeError("Failed to encode image as PNG")

    b64_string = base64.b64encode(buffer.tobytes()).decode('ascii')
    logger.debug(f"Encoded PNG: {image_rgb.shape[1]}×{image_rgb.shape[0]} -> {len(b64_string)} chars")
    return b64_string


def render_swatch_strip(hex_colors: List[str],
                        chip_size: int = 40,
                        highlight_index: Optional[int] = None,
                        border_color: Tuple[int, int, int] = (0, 0, 0),
                        border_width: int = 2) -> str:
    """
    Render a horizontal strip of color swatches.

    Args:
        hex_colors: List of hex color strings
        chip_size: Size of each color chip in pixels
        highlight_index: Index of color to outline (e.g. a pinned background entry)
        border_color: RGB color for the highlight border
        border_width: Width of highlight border in pixels

    Returns:
        Base64-encoded PNG image string
    """
    validate_swatch_params(hex_colors, chip_size, highlight_index)

    k = len(hex_colors)
    img = np.zeros((chip_size, chip_size * k, 3), dtype=np.uint8)

    for i, hex_color in enumerate(hex_colors):
        img[:, i * chip_size:(i + 1) * chip_size, :] = hex_to_rgb(hex_color)

    if highlight_index is not None:
        x_start = highlight_index * chip_size
        cv2.rectangle(
            img,
            (x_start, 0),
            (x_start + chip_size - 1, chip_size - 1),
            border_color,
            border_width
        )

    logger.debug(f"Rendered swatch strip with {k} colors, chip_size={chip_size}")
    return encode_png_b64(img)


def validate_swatch_params(hex_colors: List[str], chip_size: int, highlight_index: Optional[int]) -> None:
    """Validate swatch rendering parameters."""
    if not hex_colors:
        raise ValueError("hex_colors cannot be empty")

    if chip_size <= 0:
        raise ValueError("chip_size must be positive")

    if highlight_index is not None and (highlight_index < 0 or highlight_index >= len(hex_colors)):
        raise ValueError(f"highlight_index {highlight_index} out of range [0, {len(hex_colors)})")

    for i, hex_color in enumerate(hex_colors):
        if not isinstance(hex_color, str) or not hex_color.startswith('#') or len(hex_color) != 7:
            raise ValueError(f"Invalid hex color format at index {i}: {hex_color}")
        try:
            int(hex_color[1:], 16)
        except ValueError:
            raise ValueError(f"Invalid hex color digits at index {i}: {hex_color}")
