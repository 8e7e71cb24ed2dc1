"""
Imaging package: the render pipeline stages and the raster surface backends.
"""

from .codec import EncodedImage, RasterCodec
from .filters import FilterChain, FilterOp, build_filter_chain
from .geometry import GeometryPlan, plan_geometry
from .pipeline import render, render_raster
from .surface import RasterSurface

__all__ = [
    "EncodedImage",
    "FilterChain",
    "FilterOp",
    "GeometryPlan",
    "RasterCodec",
    "RasterSurface",
    "build_filter_chain",
    "plan_geometry",
    "render",
    "render_raster",
]
