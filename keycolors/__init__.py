"""
keycolors

Background color and key-color palette extraction from decoded raster images.
"""

__version__ = "1.0.0"
