"""
Color Math Module

Pure numeric color primitives used by the sampling, background and palette
modules: RGB <-> HSL, RGB -> CIE Lab, luma-weighted RGB distance, relative
luminance and the CIEDE2000 color difference.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np


# Luma weights for the fast similarity check
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

# D65 reference white, XYZ scaled to 100
REF_X, REF_Y, REF_Z = 95.047, 100.0, 108.883


@dataclass(frozen=True)
class Pixel:
    """An sRGB color with integer channels in [0, 255]."""
    r: int
    g: int
    b: int

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "Pixel":
        """Build a pixel from any 3-sequence, rounding and clamping channels."""
        r, g, b = (clamp_channel(v) for v in values[:3])
        return cls(r, g, b)

    @property
    def hex(self) -> str:
        return rgb_to_hex((self.r, self.g, self.b))

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


class HSL(NamedTuple):
    """Hue in degrees [0, 360), saturation and lightness in percent."""
    h: float
    s: float
    l: float


class Lab(NamedTuple):
    """CIE L*a*b* coordinates."""
    l: float
    a: float
    b: float


RGBLike = Union[Pixel, Sequence[float], np.ndarray]


def _channels(color: RGBLike) -> Tuple[float, float, float]:
    if isinstance(color, Pixel):
        return float(color.r), float(color.g), float(color.b)
    return float(color[0]), float(color[1]), float(color[2])


def clamp_channel(value: float) -> int:
    """Round half-up and clamp a channel value to [0, 255]."""
    return int(min(255, max(0, math.floor(float(value) + 0.5))))


def rgb_to_hex(rgb: RGBLike) -> str:
    """Convert an RGB triple to an upper-case #RRGGBB string."""
    r, g, b = (clamp_channel(v) for v in _channels(rgb))
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: #{hex_color}")
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    """
    Convert RGB channels (0-255) to HSL.

    Returns:
        HSL with hue in degrees [0, 360) and saturation/lightness in [0, 100]
    """
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    cmax = max(r, g, b)
    cmin = min(r, g, b)
    lightness = (cmax + cmin) / 2
    hue = 0.0
    saturation = 0.0

    if cmax != cmin:
        d = cmax - cmin
        saturation = d / (2 - cmax - cmin) if lightness > 0.5 else d / (cmax + cmin)

        if cmax == r:
            hue = (g - b) / d + (6 if g < b else 0)
        elif cmax == g:
            hue = (b - r) / d + 2
        else:
            hue = (r - g) / d + 4
        hue /= 6

    return HSL((hue * 360) % 360, saturation * 100, lightness * 100)


def hsl_of(color: RGBLike) -> HSL:
    """HSL of a pixel or RGB triple."""
    return rgb_to_hsl(*_channels(color))


def _linearize(values: np.ndarray) -> np.ndarray:
    """sRGB companding inverse for values normalized to [0, 1]."""
    return np.where(values > 0.04045, ((values + 0.055) / 1.055) ** 2.4, values / 12.92)


def rgb_to_lab(rgb: RGBLike) -> Union[Lab, np.ndarray]:
    """
    Convert RGB (0-255) to CIE Lab using the D65 reference white.

    A single color returns a ``Lab`` tuple; an (N, 3) array returns an
    (N, 3) float array.
    """
    arr = np.asarray(_channels(rgb) if isinstance(rgb, Pixel) else rgb, dtype=np.float64)
    single = arr.ndim == 1
    arr = np.atleast_2d(arr)[:, :3]

    linear = _linearize(arr / 255.0)
    r, g, b = linear[:, 0], linear[:, 1], linear[:, 2]

    x = (r * 0.4124 + g * 0.3576 + b * 0.1805) * 100
    y = (r * 0.2126 + g * 0.7152 + b * 0.0722) * 100
    z = (r * 0.0193 + g * 0.1192 + b * 0.9505) * 100

    xyz = np.column_stack([x / REF_X, y / REF_Y, z / REF_Z])
    f = np.where(xyz > 0.008856, np.cbrt(xyz), 7.787 * xyz + 16 / 116)

    lab = np.column_stack([
        116 * f[:, 1] - 16,
        500 * (f[:, 0] - f[:, 1]),
        200 * (f[:, 1] - f[:, 2]),
    ])

    if single:
        return Lab(float(lab[0, 0]), float(lab[0, 1]), float(lab[0, 2]))
    return lab


def weighted_euclidean_distance(c1: RGBLike, c2: RGBLike) -> float:
    """Luma-weighted RGB distance: sqrt(0.299 dr^2 + 0.587 dg^2 + 0.114 db^2)."""
    r1, g1, b1 = _channels(c1)
    r2, g2, b2 = _channels(c2)
    dr, dg, db = r1 - r2, g1 - g2, b1 - b2
    return math.sqrt(0.299 * dr * dr + 0.587 * dg * dg + 0.114 * db * db)


def weighted_distances(pixels: np.ndarray, target: RGBLike) -> np.ndarray:
    """Vectorized weighted distance from each row of an (N, 3) array to target."""
    diff = np.asarray(pixels, dtype=np.float64)[..., :3] - np.asarray(_channels(target))
    return np.sqrt((diff * diff) @ LUMA_WEIGHTS)


def luminance(r: float, g: float, b: float) -> float:
    """WCAG relative luminance (0-1) of an sRGB color."""
    linear = _linearize(np.array([r, g, b], dtype=np.float64) / 255.0)
    return float(0.2126 * linear[0] + 0.7152 * linear[1] + 0.0722 * linear[2])


def text_color_for(color: RGBLike) -> str:
    """Black or white, whichever reads better on top of the given color."""
    return "#000000" if luminance(*_channels(color)) > 0.179 else "#FFFFFF"


def ciede2000_lab(lab1: np.ndarray, lab2: np.ndarray) -> np.ndarray:
    """CIEDE2000 color difference. Inputs: (..., 3) Lab arrays. Returns (...)."""
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    L2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    C1 = np.sqrt(a1**2 + b1**2)
    C2 = np.sqrt(a2**2 + b2**2)
    C_avg7 = ((C1 + C2) / 2.0) ** 7
    G = 0.5 * (1.0 - np.sqrt(C_avg7 / (C_avg7 + 25.0**7)))

    a1p = a1 * (1.0 + G)
    a2p = a2 * (1.0 + G)
    C1p = np.sqrt(a1p**2 + b1**2)
    C2p = np.sqrt(a2p**2 + b2**2)

    h1p = np.degrees(np.arctan2(b1, a1p)) % 360.0
    h2p = np.degrees(np.arctan2(b2, a2p)) % 360.0

    dLp = L2 - L1
    dCp = C2p - C1p

    chroma_product = C1p * C2p
    dh = h2p - h1p
    dhp = np.where(
        chroma_product == 0, 0.0,
        np.where(np.abs(dh) <= 180, dh,
                 np.where(dh > 180, dh - 360, dh + 360)))
    dHp = 2.0 * np.sqrt(chroma_product) * np.sin(np.radians(dhp / 2.0))

    Lp_avg = (L1 + L2) / 2.0
    Cp_avg = (C1p + C2p) / 2.0

    hp_avg = np.where(
        chroma_product == 0, h1p + h2p,
        np.where(np.abs(h1p - h2p) <= 180, (h1p + h2p) / 2.0,
                 np.where(h1p + h2p < 360,
                          (h1p + h2p + 360) / 2.0,
                          (h1p + h2p - 360) / 2.0)))

    T = (1.0
         - 0.17 * np.cos(np.radians(hp_avg - 30))
         + 0.24 * np.cos(np.radians(2 * hp_avg))
         + 0.32 * np.cos(np.radians(3 * hp_avg + 6))
         - 0.20 * np.cos(np.radians(4 * hp_avg - 63)))

    SL = 1.0 + 0.015 * (Lp_avg - 50)**2 / np.sqrt(20 + (Lp_avg - 50)**2)
    SC = 1.0 + 0.045 * Cp_avg
    SH = 1.0 + 0.015 * Cp_avg * T

    Cp_avg7 = Cp_avg**7
    RC = 2.0 * np.sqrt(Cp_avg7 / (Cp_avg7 + 25.0**7))
    d_theta = 30.0 * np.exp(-((hp_avg - 275) / 25.0)**2)
    RT = -np.sin(np.radians(2 * d_theta)) * RC

    return np.sqrt(
        (dLp / SL)**2 + (dCp / SC)**2 + (dHp / SH)**2
        + RT * (dCp / SC) * (dHp / SH))


def ciede2000(c1: RGBLike, c2: RGBLike) -> float:
    """CIEDE2000 difference between two RGB colors."""
    lab1 = np.array(rgb_to_lab(_channels(c1)))
    lab2 = np.array(rgb_to_lab(_channels(c2)))
    return float(ciede2000_lab(lab1, lab2))
