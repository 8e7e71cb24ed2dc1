"""
Pytest configuration and fixtures for Image Render Flow tests
"""

import base64
import io

import numpy as np
import pytest
from PIL import Image

from imaging.backends import OpenCVSurface, PillowSurface
from imaging.codec import RasterCodec
from services.render_service import RenderService


def make_raster(width, height, color=(200, 120, 40, 255)):
    """Create a flat RGBA raster"""
    raster = np.empty((height, width, 4), dtype=np.uint8)
    raster[...] = color
    return raster


def encode_png(raster):
    """Encode an RGBA raster as PNG bytes"""
    buffer = io.BytesIO()
    Image.fromarray(raster).save(buffer, format="PNG")
    return buffer.getvalue()


def to_b64(data):
    return base64.b64encode(data).decode("utf-8")


@pytest.fixture
def gradient_raster():
    """80x60 RGBA raster with a horizontal and vertical gradient"""
    height, width = 60, 80
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    raster = np.empty((height, width, 4), dtype=np.uint8)
    raster[..., 0] = xs[np.newaxis, :].round().astype(np.uint8)
    raster[..., 1] = ys[:, np.newaxis].round().astype(np.uint8)
    raster[..., 2] = 90
    raster[..., 3] = 255
    return raster


@pytest.fixture
def flat_raster():
    """40x30 raster where every pixel is identical"""
    return make_raster(40, 30)


@pytest.fixture
def png_bytes(gradient_raster):
    """PNG encoded gradient raster"""
    return encode_png(gradient_raster)


@pytest.fixture
def png_b64(png_bytes):
    return to_b64(png_bytes)


@pytest.fixture(params=["opencv", "pillow"])
def surface(request):
    """Run the test against both raster surface backends"""
    if request.param == "opencv":
        return OpenCVSurface()
    return PillowSurface()


@pytest.fixture
def codec():
    return RasterCodec()


@pytest.fixture
def render_service(codec):
    """Sequential render service on the OpenCV backend"""
    return RenderService(surface=OpenCVSurface(), codec=codec, max_workers=1)
