"""
Unit tests for pixel sampling.

Tests the point sets fed to background detection and palette extraction:
- buffer reshaping with RGB/RGBA inference
- border ring and corner blocks
- strided full-image histogram
- grid averaging and simplification
- vertical position scan
"""

import numpy as np
import pytest

from keycolors.services.colors.color_math import Pixel
from keycolors.services.colors.sampling import (
    ColorSample, as_rgb_array, grid_average, grid_samples, sample_border_ring,
    sample_corners, sample_full, simplify_image, vertical_position_of
)


class TestAsRgbArray:
    """Test flat buffer reshaping"""

    def test_rgba_drops_alpha(self):
        buffer = bytes([10, 20, 30, 0, 40, 50, 60, 255, 70, 80, 90, 128, 1, 2, 3, 4])
        image = as_rgb_array(buffer, width=2, height=2)
        assert image.shape == (2, 2, 3)
        assert tuple(image[0, 0]) == (10, 20, 30)
        assert tuple(image[1, 1]) == (1, 2, 3)

    def test_rgb_buffer(self):
        image = as_rgb_array(list(range(18)), width=3, height=2)
        assert image.shape == (2, 3, 3)
        assert tuple(image[1, 0]) == (9, 10, 11)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            as_rgb_array(bytes(10), width=2, height=2)

    def test_zero_size(self):
        image = as_rgb_array(b"", width=0, height=5)
        assert image.shape == (5, 0, 3)


class TestBorderRing:
    """Test border sampling"""

    def test_sample_count(self):
        image = np.zeros((3, 4, 3), dtype=np.uint8)
        assert len(sample_border_ring(image)) == 2 * 4 + 2 * 3

    def test_interior_is_not_sampled(self):
        image = np.full((5, 5, 3), 10, dtype=np.uint8)
        image[1:4, 1:4] = 200
        assert set(sample_border_ring(image)) == {Pixel(10, 10, 10)}

    def test_order_top_bottom_then_left_right(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[0, 0] = (1, 1, 1)
        image[1, 0] = (2, 2, 2)
        ring = sample_border_ring(image)
        assert ring[0] == Pixel(1, 1, 1)
        assert ring[1] == Pixel(2, 2, 2)

    def test_empty_image(self):
        assert sample_border_ring(np.zeros((0, 10, 3), dtype=np.uint8)) == []

    def test_rgba_input(self):
        image = np.full((4, 4, 4), 50, dtype=np.uint8)
        assert set(sample_border_ring(image)) == {Pixel(50, 50, 50)}


class TestCorners:
    """Test corner block sampling"""

    def test_blocks_clip_to_image(self):
        image = np.zeros((4, 4, 3), dtype=np.uint8)
        assert len(sample_corners(image, size=10)) == 4 * 16

    def test_block_size(self):
        image = np.zeros((50, 60, 3), dtype=np.uint8)
        image[:3, :3] = 255
        pixels = sample_corners(image, size=3)
        assert len(pixels) == 4 * 9
        assert pixels[:9] == [Pixel(255, 255, 255)] * 9


class TestSampleFull:
    """Test the strided full-image histogram"""

    def test_histogram_counts(self):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[:6] = (255, 0, 0)
        image[6:] = (0, 0, 255)
        samples = sample_full(image)
        assert samples == [
            ColorSample(Pixel(255, 0, 0), 60),
            ColorSample(Pixel(0, 0, 255), 40),
        ]

    def test_stride(self):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        samples = sample_full(image, target_count=25)
        assert sum(s.population for s in samples) == 25

    def test_ties_by_ascending_rgb(self):
        image = np.zeros((1, 2, 3), dtype=np.uint8)
        image[0, 0] = (9, 9, 9)
        image[0, 1] = (1, 1, 1)
        samples = sample_full(image)
        assert [s.pixel for s in samples] == [Pixel(1, 1, 1), Pixel(9, 9, 9)]

    def test_empty_image(self):
        assert sample_full(np.zeros((0, 0, 3), dtype=np.uint8)) == []


class TestGrid:
    """Test grid averaging"""

    def test_cell_means(self):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[:, 5:] = 255
        cells = grid_average(image, grid_size=2)
        assert cells.shape == (2, 2, 3)
        assert np.all(cells[:, 0] == 0)
        assert np.all(cells[:, 1] == 255)

    def test_means_are_floored(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[0, 0] = 3
        cells = grid_average(image, grid_size=1)
        assert tuple(cells[0, 0]) == (0, 0, 0)

    def test_remainder_pixels_ignored(self):
        image = np.zeros((7, 7, 3), dtype=np.uint8)
        image[6, :] = 255
        image[:, 6] = 255
        cells = grid_average(image, grid_size=2)
        assert cells.shape == (2, 2, 3)
        assert np.all(cells == 0)

    def test_grid_clamped_to_image(self):
        image = np.zeros((3, 4, 3), dtype=np.uint8)
        assert grid_average(image, grid_size=20).shape == (3, 4, 3)

    def test_grid_samples_weighted_by_cell_area(self):
        image = np.full((10, 10, 3), 77, dtype=np.uint8)
        samples = grid_samples(image, grid_size=5)
        assert samples == [ColorSample(Pixel(77, 77, 77), 100)]

    def test_simplify_keeps_shape(self):
        image = np.zeros((7, 7, 3), dtype=np.uint8)
        image[0, 0] = 200
        image[6, 6] = 99
        simplified = simplify_image(image, grid_size=2)
        assert simplified.shape == image.shape
        assert tuple(simplified[1, 1]) == (22, 22, 22)
        assert tuple(simplified[6, 6]) == (99, 99, 99)


class TestVerticalPosition:
    """Test the vertical position scan"""

    def test_top_band(self):
        image = np.full((100, 20, 3), 255, dtype=np.uint8)
        image[:10] = (200, 40, 40)
        position = vertical_position_of(image, Pixel(200, 40, 40), tolerance=30)
        assert position == pytest.approx(4 / 99)

    def test_tolerance(self):
        image = np.full((100, 20, 3), 255, dtype=np.uint8)
        image[90:] = (200, 40, 40)
        assert vertical_position_of(image, (205, 45, 40), tolerance=30) > 0.9

    def test_no_match_is_centered(self):
        image = np.full((10, 10, 3), 255, dtype=np.uint8)
        assert vertical_position_of(image, (0, 0, 0), tolerance=30) == 0.5
