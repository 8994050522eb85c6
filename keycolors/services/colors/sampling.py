"""
Pixel Sampling Module

Reads a decoded image and produces the point sets used by background
detection and palette extraction: the border ring, corner blocks, a strided
full-image histogram and per-cell grid averages.

All functions take an (H, W, C) uint8 array with C = 3 (RGB) or 4 (RGBA,
alpha ignored). A zero-sized image yields an empty result, never an error.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np
from loguru import logger

from .color_math import Pixel, RGBLike, weighted_distances


@dataclass(frozen=True)
class ColorSample:
    """A pixel value with the number of source pixels mapped to it."""
    pixel: Pixel
    population: int
    vertical_position: Optional[float] = None


def as_rgb_array(buffer: Union[bytes, bytearray, Sequence[int], np.ndarray],
                 width: int, height: int) -> np.ndarray:
    """
    Reshape a flat row-major RGB or RGBA buffer into an (H, W, 3) array.

    The channel count is inferred from the buffer length.

    Raises:
        ValueError: If the buffer length matches neither RGB nor RGBA
    """
    if isinstance(buffer, (bytes, bytearray)):
        flat = np.frombuffer(buffer, dtype=np.uint8)
    else:
        flat = np.asarray(buffer, dtype=np.uint8).reshape(-1)

    pixel_count = int(width) * int(height)
    if pixel_count == 0:
        return np.zeros((max(int(height), 0), max(int(width), 0), 3), dtype=np.uint8)

    if flat.size == pixel_count * 4:
        channels = 4
    elif flat.size == pixel_count * 3:
        channels = 3
    else:
        raise ValueError(
            f"Buffer length {flat.size} does not match {width}x{height} RGB or RGBA"
        )

    return flat.reshape(height, width, channels)[:, :, :3]


def _rgb(image: np.ndarray) -> np.ndarray:
    """Drop alpha and validate shape."""
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected (H, W, 3|4) image, got shape {image.shape}")
    return image[:, :, :3]


def is_empty(image: np.ndarray) -> bool:
    """True when the image has zero width or height."""
    return image.shape[0] == 0 or image.shape[1] == 0


def _to_pixels(rows: np.ndarray) -> List[Pixel]:
    return [Pixel(int(r), int(g), int(b)) for r, g, b in rows]


def sample_border_ring(image: np.ndarray) -> List[Pixel]:
    """
    Sample every pixel on the outer ring of the image.

    Order: for each column the top then bottom pixel, then for each row the
    left then right pixel. Corners therefore appear twice, as they do when
    scanning rows and columns independently.
    """
    rgb = _rgb(image)
    if is_empty(rgb):
        return []

    height, width = rgb.shape[:2]
    top_bottom = np.stack([rgb[0, :, :], rgb[height - 1, :, :]], axis=1).reshape(-1, 3)
    left_right = np.stack([rgb[:, 0, :], rgb[:, width - 1, :]], axis=1).reshape(-1, 3)

    pixels = _to_pixels(np.concatenate([top_bottom, left_right]))
    logger.debug(f"Border ring: {len(pixels)} pixels from {width}x{height} image")
    return pixels


def sample_corners(image: np.ndarray, size: int = 10) -> List[Pixel]:
    """
    Sample the four size x size corner blocks (clipped to the image).

    Blocks overlap on images smaller than 2 * size; overlapping pixels are
    sampled once per block.
    """
    rgb = _rgb(image)
    if is_empty(rgb) or size <= 0:
        return []

    height, width = rgb.shape[:2]
    bh = min(size, height)
    bw = min(size, width)

    blocks = [
        rgb[:bh, :bw],
        rgb[:bh, width - bw:],
        rgb[height - bh:, :bw],
        rgb[height - bh:, width - bw:],
    ]
    pixels = _to_pixels(np.concatenate([b.reshape(-1, 3) for b in blocks]))
    logger.debug(f"Corner blocks: {len(pixels)} pixels (size={size})")
    return pixels


def _histogram(pixels: np.ndarray, weights: Optional[np.ndarray] = None) -> List[ColorSample]:
    """Merge exact duplicates, most frequent first (ties by ascending RGB)."""
    if pixels.size == 0:
        return []

    unique, inverse = np.unique(pixels.reshape(-1, 3), axis=0, return_inverse=True)
    inverse = inverse.reshape(-1)
    counts = np.bincount(inverse, weights=weights, minlength=len(unique))
    counts = np.rint(counts).astype(np.int64)

    order = np.argsort(-counts, kind="stable")
    return [
        ColorSample(Pixel(int(unique[i, 0]), int(unique[i, 1]), int(unique[i, 2])), int(counts[i]))
        for i in order
    ]


def sample_full(image: np.ndarray, target_count: int = 10000) -> List[ColorSample]:
    """
    Strided full-image sample as a pixel histogram.

    Walks the flattened pixel sequence with stride
    max(1, floor(W*H / target_count)) so the work stays near-constant for
    large images.
    """
    rgb = _rgb(image)
    if is_empty(rgb):
        return []

    total = rgb.shape[0] * rgb.shape[1]
    stride = max(1, total // max(1, int(target_count)))
    sampled = rgb.reshape(-1, 3)[::stride]

    samples = _histogram(sampled)
    logger.debug(f"Full sample: stride={stride}, {len(sampled)} pixels, "
                 f"{len(samples)} unique colors")
    return samples


def _grid_cells(height: int, width: int, grid_size: int):
    cols = max(1, min(int(grid_size), width))
    rows = max(1, min(int(grid_size), height))
    return rows, cols, height // rows, width // cols


def grid_average(image: np.ndarray, grid_size: int) -> np.ndarray:
    """
    Mean color of each cell of a grid_size x grid_size partition.

    Cell size is floor(W/grid_size) x floor(H/grid_size); the grid is
    clamped to the image size, and remainder pixels on the right and bottom
    edges are not covered. Means are floored to integer channels.

    Returns:
        (rows, cols, 3) uint8 array, empty for an empty image
    """
    rgb = _rgb(image)
    if is_empty(rgb):
        return np.zeros((0, 0, 3), dtype=np.uint8)

    height, width = rgb.shape[:2]
    rows, cols, cell_h, cell_w = _grid_cells(height, width, grid_size)

    covered = rgb[:rows * cell_h, :cols * cell_w].astype(np.float64)
    cells = covered.reshape(rows, cell_h, cols, cell_w, 3).mean(axis=(1, 3))
    return np.floor(cells).astype(np.uint8)


def grid_samples(image: np.ndarray, grid_size: int) -> List[ColorSample]:
    """Grid cell means as a histogram weighted by cell area."""
    rgb = _rgb(image)
    if is_empty(rgb):
        return []

    rows, cols, cell_h, cell_w = _grid_cells(rgb.shape[0], rgb.shape[1], grid_size)
    cells = grid_average(rgb, grid_size).reshape(-1, 3)
    weights = np.full(len(cells), float(cell_h * cell_w))
    return _histogram(cells, weights)


def simplify_image(image: np.ndarray, grid_size: int) -> np.ndarray:
    """
    Render the simplified display image: each grid cell filled with its mean.

    Uncovered edge pixels keep their original color.
    """
    rgb = _rgb(image)
    if is_empty(rgb):
        return np.zeros((0, 0, 3), dtype=np.uint8)

    height, width = rgb.shape[:2]
    rows, cols, cell_h, cell_w = _grid_cells(height, width, grid_size)

    out = np.array(rgb, dtype=np.uint8, copy=True)
    cells = grid_average(rgb, grid_size)
    expanded = np.repeat(np.repeat(cells, cell_h, axis=0), cell_w, axis=1)
    out[:rows * cell_h, :cols * cell_w] = expanded
    return out


def vertical_position_of(image: np.ndarray, target: RGBLike,
                         tolerance: float, stride: int = 4) -> float:
    """
    Mean normalized row (0 = top, 1 = bottom) of pixels matching target.

    Scans every stride-th row and column and keeps pixels whose weighted
    distance to target is within tolerance. Returns 0.5 if nothing matches.
    """
    rgb = _rgb(image)
    if is_empty(rgb):
        return 0.5

    height = rgb.shape[0]
    stride = max(1, int(stride))
    coarse = rgb[::stride, ::stride]

    distances = weighted_distances(coarse.reshape(-1, 3), target).reshape(coarse.shape[:2])
    matches = distances <= tolerance
    if not matches.any():
        return 0.5

    ys = np.nonzero(matches)[0] * stride
    denominator = max(1, height - 1)
    return float(np.mean(ys / denominator))
