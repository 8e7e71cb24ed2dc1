"""
Compositor: draws the source raster onto a fresh canvas according to the
geometry plan, the filter chain and the rotate/flip transform.
"""

import logging

import numpy as np

from core.constants import OutputConstants
from core.image.converters import ImageConverters
from imaging import transform
from imaging.codec import RasterCodec
from imaging.filters import FilterChain, apply_filter_chain
from imaging.geometry import GeometryPlan
from imaging.surface import RasterSurface
from schemas.render import OutputOptions

logger = logging.getLogger(__name__)


def placement_matrix(plan: GeometryPlan) -> np.ndarray:
    """
    Transform mapping the resized layer onto the canvas.

    Pivoted at the canvas center: translate to center, rotate, reflect for
    flips, translate back by half the pre-rotation resize extent.
    """
    return transform.compose(
        transform.translate(plan.canvas_width / 2, plan.canvas_height / 2),
        transform.rotate(plan.rotate_degrees),
        transform.scale(-1 if plan.flip_h else 1, -1 if plan.flip_v else 1),
        transform.translate(-plan.resize.w / 2, -plan.resize.h / 2),
    )


def composite(
    source: np.ndarray,
    plan: GeometryPlan,
    chain: FilterChain,
    output: OutputOptions,
    surface: RasterSurface,
) -> np.ndarray:
    """
    Render the source into a canvas of the planned size.

    Args:
        source: Decoded RGBA source raster
        plan: Geometry plan for this source
        chain: Filter operations scoped to this draw
        output: Output options (opaque formats get a background fill)
        surface: Raster surface backend

    Returns:
        New RGBA raster of size canvas_width x canvas_height
    """
    canvas = surface.allocate(plan.canvas_width, plan.canvas_height)

    if RasterCodec.normalize_mime(output.mime_type) in OutputConstants.OPAQUE_MIMES:
        surface.fill(canvas, ImageConverters.parse_color(output.jpeg_background))

    layer = surface.resample(source, plan.sample_rect, plan.resize.w, plan.resize.h)
    layer = apply_filter_chain(layer, chain, surface)

    logger.debug(
        f"Compositing {plan.resize.w}x{plan.resize.h} layer onto "
        f"{plan.canvas_width}x{plan.canvas_height} canvas "
        f"(rotate={plan.rotate_degrees}, flip_h={plan.flip_h}, flip_v={plan.flip_v})"
    )
    surface.draw(canvas, layer, placement_matrix(plan))
    return canvas
