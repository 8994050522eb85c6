"""
keycolors Colors Module

Provides pixel sampling, background detection, greedy color clustering and
palette selection for raster images.
"""

from .palette_api import analyze_buffer, analyze_image

__all__ = ["analyze_buffer", "analyze_image"]
