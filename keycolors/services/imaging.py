"""
keycolors Imaging Utilities
Decodes uploaded image bytes into RGB arrays with safety checks.
"""
import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from keycolors.config import config
from keycolors.errors import DecodeError


# Magic bytes of the formats Pillow is asked to decode
MAGIC_BYTES = {
    b'\xff\xd8\xff': "image/jpeg",
    b'\x89PNG\r\n\x1a\n': "image/png",
    b'GIF87a': "image/gif",
    b'GIF89a': "image/gif",
}


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Returns:
        Detected MIME type

    Raises:
        DecodeError: For truncated or unrecognized data
    """
    if len(file_bytes) < 12:
        raise DecodeError("File too small or corrupt")

    for magic, mime in MAGIC_BYTES.items():
        if file_bytes.startswith(magic):
            return mime
    if file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"

    raise DecodeError("Invalid image file. Magic bytes don't match supported formats.")


def decode_image(file_bytes: bytes, max_pixels: int = None) -> np.ndarray:
    """
    Decode image bytes to an (H, W, 3) RGB uint8 array.

    Args:
        file_bytes: Raw encoded image
        max_pixels: Decompression-bomb limit (default from config)

    Raises:
        DecodeError: If the bytes are not a decodable image or too large
    """
    if max_pixels is None:
        max_pixels = config.MAX_IMAGE_PIXELS

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise DecodeError(f"File too large. Maximum size: {config.MAX_FILE_MB}MB")

    validate_magic_bytes(file_bytes)

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        width, height = pil_image.size
        if width * height > max_pixels:
            raise DecodeError(f"Image too large: {width}x{height} exceeds {max_pixels} pixels")

        pil_image.load()

        if pil_image.mode != 'RGB':
            pil_image = pil_image.convert('RGB')
        rgb_array = np.array(pil_image, dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Failed to decode image: {str(e)}") from e

    return rgb_array


def load_image(path: str) -> np.ndarray:
    """Read and decode an image file from disk."""
    with open(path, "rb") as f:
        return decode_image(f.read())
