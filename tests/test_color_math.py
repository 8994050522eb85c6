"""
Unit tests for color math primitives.

Covers hex conversion, HSL, CIE Lab, the luma-weighted distance,
relative luminance and CIEDE2000.
"""

import numpy as np
import pytest

from keycolors.services.colors.color_math import (
    Pixel, ciede2000, ciede2000_lab, clamp_channel, hex_to_rgb, luminance,
    rgb_to_hex, rgb_to_hsl, rgb_to_lab, text_color_for, weighted_distances,
    weighted_euclidean_distance
)


class TestHexConversion:
    """Test RGB <-> hex conversion"""

    def test_rgb_to_hex_basic_colors(self):
        """Test conversion of basic RGB colors to upper-case hex"""
        assert rgb_to_hex((255, 0, 0)) == "#FF0000"
        assert rgb_to_hex((0, 255, 0)) == "#00FF00"
        assert rgb_to_hex((0, 0, 255)) == "#0000FF"
        assert rgb_to_hex(np.array([31, 78, 121])) == "#1F4E79"
        assert Pixel(211, 181, 143).hex == "#D3B58F"

    def test_rgb_to_hex_rounds_and_clamps(self):
        """Fractional and out-of-range channels are normalized"""
        assert rgb_to_hex((254.5, -3, 300)) == "#FF00FF"
        assert rgb_to_hex((10.49, 10.5, 0)) == "#0A0B00"

    def test_hex_to_rgb(self):
        """Test parsing with and without leading hash"""
        assert hex_to_rgb("#1f4e79") == (31, 78, 121)
        assert hex_to_rgb("D3B58F") == (211, 181, 143)

    def test_hex_to_rgb_invalid(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#FFF")

    def test_clamp_channel(self):
        assert clamp_channel(254.5) == 255
        assert clamp_channel(-3) == 0
        assert clamp_channel(300) == 255
        assert clamp_channel(10.49) == 10

    def test_pixel_from_values(self):
        assert Pixel.from_values((12.6, 0.4, 255.2)) == Pixel(13, 0, 255)


class TestHsl:
    """Test RGB -> HSL conversion"""

    @pytest.mark.parametrize("rgb,hue", [
        ((255, 0, 0), 0.0),
        ((0, 255, 0), 120.0),
        ((0, 0, 255), 240.0),
        ((255, 255, 0), 60.0),
        ((255, 0, 255), 300.0),
    ])
    def test_primary_hues(self, rgb, hue):
        h, s, l = rgb_to_hsl(*rgb)
        assert h == pytest.approx(hue)
        assert s == pytest.approx(100.0)
        assert l == pytest.approx(50.0)

    def test_gray_has_no_saturation(self):
        h, s, l = rgb_to_hsl(128, 128, 128)
        assert h == 0.0
        assert s == 0.0
        assert l == pytest.approx(50.196, abs=1e-3)

    def test_hue_in_range(self):
        """Hue stays in [0, 360) for colors just below red"""
        h, _, _ = rgb_to_hsl(255, 0, 1)
        assert 0.0 <= h < 360.0


class TestLab:
    """Test RGB -> CIE Lab conversion"""

    def test_white_and_black(self):
        white = rgb_to_lab((255, 255, 255))
        assert white.l == pytest.approx(100.0, abs=0.05)
        assert white.a == pytest.approx(0.0, abs=0.05)
        assert white.b == pytest.approx(0.0, abs=0.05)

        black = rgb_to_lab(Pixel(0, 0, 0))
        assert tuple(black) == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    def test_red(self):
        lab = rgb_to_lab((255, 0, 0))
        assert lab.l == pytest.approx(53.24, abs=0.1)
        assert lab.a == pytest.approx(80.09, abs=0.2)
        assert lab.b == pytest.approx(67.20, abs=0.2)

    def test_array_input(self):
        """An (N, 3) array converts row by row"""
        colors = np.array([[255, 0, 0], [0, 0, 0], [255, 255, 255]])
        lab = rgb_to_lab(colors)
        assert lab.shape == (3, 3)
        np.testing.assert_allclose(lab[0], rgb_to_lab((255, 0, 0)))


class TestWeightedDistance:
    """Test the luma-weighted RGB distance"""

    def test_single_channel(self):
        assert weighted_euclidean_distance((0, 0, 0), (10, 0, 0)) == pytest.approx(np.sqrt(29.9))
        assert weighted_euclidean_distance((0, 0, 0), (0, 10, 0)) == pytest.approx(np.sqrt(58.7))

    def test_symmetric_and_zero(self):
        a, b = Pixel(12, 200, 90), (250, 3, 77)
        assert weighted_euclidean_distance(a, b) == pytest.approx(weighted_euclidean_distance(b, a))
        assert weighted_euclidean_distance(a, a) == 0.0

    def test_vectorized_matches_scalar(self):
        pixels = np.array([[0, 0, 0], [255, 255, 255], [40, 160, 60]])
        target = Pixel(200, 40, 40)
        expected = [weighted_euclidean_distance(p, target) for p in pixels]
        np.testing.assert_allclose(weighted_distances(pixels, target), expected)


class TestLuminance:
    """Test relative luminance and label contrast"""

    def test_extremes(self):
        assert luminance(255, 255, 255) == pytest.approx(1.0)
        assert luminance(0, 0, 0) == pytest.approx(0.0)

    def test_text_color(self):
        assert text_color_for((255, 255, 255)) == "#000000"
        assert text_color_for(Pixel(0, 0, 0)) == "#FFFFFF"
        assert text_color_for((20, 40, 120)) == "#FFFFFF"


class TestCiede2000:
    """Test the CIEDE2000 color difference"""

    @pytest.mark.parametrize("lab1,lab2,expected", [
        ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
        ((50.0, 3.1571, -77.2803), (50.0, 0.0, -82.7485), 2.8615),
        ((50.0, 2.8361, -74.0200), (50.0, 0.0, -82.7485), 3.4412),
    ])
    def test_reference_pairs(self, lab1, lab2, expected):
        assert float(ciede2000_lab(np.array(lab1), np.array(lab2))) == pytest.approx(expected, abs=1e-3)

    def test_identical_is_zero(self):
        assert ciede2000((120, 30, 200), (120, 30, 200)) == pytest.approx(0.0, abs=1e-9)

    def test_symmetric(self):
        a, b = (200, 40, 40), (40, 160, 60)
        assert ciede2000(a, b) == pytest.approx(ciede2000(b, a))

    def test_broadcasts(self):
        labs = rgb_to_lab(np.array([[255, 0, 0], [0, 255, 0], [0, 0, 255]]))
        distances = ciede2000_lab(labs, labs[0])
        assert distances.shape == (3,)
        assert distances[0] == pytest.approx(0.0, abs=1e-9)
        assert np.all(distances[1:] > 10)
