"""
Render pipeline for a single image.

Stages run strictly in order, each consuming the previous stage's raster:
geometry planning -> compositing (with the filter chain) -> sharpen ->
watermarks -> encode.
"""

import logging

import numpy as np

from imaging.codec import EncodedImage, RasterCodec
from imaging.compositor import composite
from imaging.filters import build_filter_chain
from imaging.geometry import plan_geometry
from imaging.sharpen import apply_sharpen
from imaging.surface import RasterSurface
from imaging.watermark import apply_watermarks
from schemas.render import RenderPlan

logger = logging.getLogger(__name__)


def render_raster(
    source: np.ndarray, plan: RenderPlan, surface: RasterSurface, codec: RasterCodec
) -> np.ndarray:
    """
    Run every pixel stage on a decoded source raster.

    Args:
        source: Decoded RGBA source (not modified)
        plan: Render options
        surface: Raster surface backend
        codec: Codec used to decode the watermark image

    Returns:
        Final RGBA raster, ready for encoding
    """
    src_h, src_w = source.shape[:2]
    geometry = plan_geometry(src_w, src_h, plan.crop, plan.resize, plan.rotate, plan.flip)
    chain = build_filter_chain(plan.filters)

    logger.debug(
        f"Rendering {src_w}x{src_h} -> {geometry.canvas_width}x{geometry.canvas_height}, "
        f"filters: {chain.to_css()}"
    )

    raster = composite(source, geometry, chain, plan.output, surface)
    raster = apply_sharpen(raster, plan.sharpen.strength)
    raster = apply_watermarks(raster, plan.watermark_image, plan.watermark_text, surface, codec)
    return raster


def render(
    source_bytes: bytes, plan: RenderPlan, surface: RasterSurface, codec: RasterCodec
) -> EncodedImage:
    """
    Decode, render and encode one image.

    Raises:
        DecodeFailure: Source or watermark bytes could not be decoded
        EncodeFailure: No output could be produced
    """
    source = codec.decode(source_bytes)
    raster = render_raster(source, plan, surface, codec)
    return codec.encode(raster, plan.output.mime_type, plan.output.quality)
