"""
keycolors Errors
Exception taxonomy for decoding and palette analysis.
"""


class KeyColorsError(Exception):
    """Base class for keycolors errors."""
    pass


class DecodeError(KeyColorsError):
    """Image bytes could not be decoded into pixels."""
    pass


class EmptyInputError(KeyColorsError):
    """Image has zero width or height."""
    pass


class NoSignificantColorError(KeyColorsError):
    """Every candidate color was filtered out."""
    pass
