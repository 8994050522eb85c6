"""
Test configuration and fixtures for keycolors tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from keycolors.main import app
from keycolors.services.observability import reset_metrics as reset_collector


GRAY = (230, 230, 230)
GREEN = (40, 170, 60)
RED = (200, 40, 40)


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    reset_collector()


@pytest.fixture
def striped_image():
    """100x100: green rows 0-32, red rows 33-65, light gray rows 66-99."""
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[0:33] = GREEN
    img[33:66] = RED
    img[66:] = GRAY
    return img


@pytest.fixture
def monochrome_image():
    """100x100 white page with a 5-row black band."""
    img = np.full((100, 100, 3), 255, dtype=np.uint8)
    img[40:45] = 0
    return img


@pytest.fixture
def uniform_image():
    """64x64 single solid color."""
    return np.full((64, 64, 3), (200, 50, 50), dtype=np.uint8)


@pytest.fixture
def category_image():
    """White canvas with one vibrant, muted, light and dark block."""
    img = np.full((100, 100, 3), 255, dtype=np.uint8)
    img[10:30, 10:30] = (220, 30, 30)     # vibrant
    img[10:30, 60:80] = (120, 140, 120)   # muted
    img[60:80, 10:30] = (250, 200, 210)   # light
    img[60:80, 60:80] = (70, 15, 25)      # dark
    return img


@pytest.fixture
def noise_image():
    """Seeded random noise on a white frame."""
    rng = np.random.default_rng(0)
    img = np.full((80, 80, 3), 255, dtype=np.uint8)
    img[4:76, 4:76] = rng.integers(0, 256, size=(72, 72, 3), dtype=np.uint8)
    return img


@pytest.fixture
def png_bytes():
    """Encode an RGB array as PNG bytes."""
    def _encode(image: np.ndarray) -> bytes:
        buf = io.BytesIO()
        Image.fromarray(image).save(buf, format="PNG")
        return buf.getvalue()
    return _encode
