"""
Raster surface backends.

Both adapters implement imaging.surface.RasterSurface; pipeline code never
imports a backend directly.
"""

from typing import Optional

from core.enums import SurfaceBackend
from core.utils.enum_converter import parse_enum
from imaging.surface import RasterSurface

from .opencv_surface import OpenCVSurface
from .pillow_surface import PillowSurface

_BACKENDS = {
    SurfaceBackend.OPENCV: OpenCVSurface,
    SurfaceBackend.PILLOW: PillowSurface,
}


def create_surface(backend: str = SurfaceBackend.OPENCV, font_path: Optional[str] = None) -> RasterSurface:
    """
    Create a raster surface by backend name.

    Unknown names fall back to the OpenCV backend.
    """
    kind = parse_enum(backend, SurfaceBackend, SurfaceBackend.OPENCV)
    return _BACKENDS[kind](font_path=font_path)


__all__ = ["OpenCVSurface", "PillowSurface", "create_surface"]
