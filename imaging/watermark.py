"""
Watermark compositing.

The image watermark is drawn first, then the text watermark, so the text
stays visible when both are configured. Each stage is skipped when its
options are absent, the text is blank, no watermark raster is given, or the
opacity is zero.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from core.constants import WatermarkConstants
from core.enums import AnchorPosition
from core.exceptions import DecodeFailure
from core.image.converters import ImageConverters
from core.utils.enum_converter import parse_enum
from core.utils.numeric import clamp, parse_number
from imaging import transform
from imaging.codec import RasterCodec
from imaging.geometry import SourceRect
from imaging.surface import RasterSurface
from schemas.render import WatermarkImageOptions, WatermarkTextOptions

logger = logging.getLogger(__name__)

# Room around the glyphs for the shadow blur to spread into
SHADOW_SIGMA = WatermarkConstants.SHADOW_BLUR / 2
SHADOW_MARGIN = int(math.ceil(3 * SHADOW_SIGMA)) + 2


def _opacity(value: float) -> float:
    return clamp(
        parse_number(value, WatermarkConstants.OPACITY_DEFAULT),
        WatermarkConstants.OPACITY_MIN,
        WatermarkConstants.OPACITY_MAX,
    )


def _padding(value: float) -> float:
    return clamp(
        parse_number(value, WatermarkConstants.PADDING_DEFAULT),
        WatermarkConstants.PADDING_MIN,
        WatermarkConstants.PADDING_MAX,
    )


def image_anchor(
    position: AnchorPosition, canvas_w: int, canvas_h: int, iw: int, ih: int, pad: float
) -> Tuple[float, float]:
    """Top-left corner of a watermark image of size iw x ih."""
    if position == AnchorPosition.TOP_RIGHT:
        return canvas_w - pad - iw, pad
    if position == AnchorPosition.BOTTOM_LEFT:
        return pad, canvas_h - pad - ih
    if position == AnchorPosition.BOTTOM_RIGHT:
        return canvas_w - pad - iw, canvas_h - pad - ih
    if position == AnchorPosition.CENTER:
        return (canvas_w - iw) / 2, (canvas_h - ih) / 2
    return pad, pad


def text_anchor(
    position: AnchorPosition, canvas_w: int, canvas_h: int, tw: float, th: float, pad: float
) -> Tuple[float, float]:
    """Left end of the text baseline for text of width tw and height th."""
    if position == AnchorPosition.TOP_RIGHT:
        return canvas_w - pad - tw, pad + th
    if position == AnchorPosition.BOTTOM_LEFT:
        return pad, canvas_h - pad
    if position == AnchorPosition.BOTTOM_RIGHT:
        return canvas_w - pad - tw, canvas_h - pad
    if position == AnchorPosition.CENTER:
        return (canvas_w - tw) / 2, (canvas_h + th) / 2
    return pad, pad + th


def draw_watermark_image(
    raster: np.ndarray,
    options: Optional[WatermarkImageOptions],
    surface: RasterSurface,
    codec: RasterCodec,
) -> np.ndarray:
    """
    Draw the secondary raster onto raster in place.

    Raises:
        DecodeFailure: If a watermark raster is given but cannot be decoded
    """
    if options is None or not options.raster:
        return raster

    opacity = _opacity(options.opacity)
    if opacity <= 0:
        return raster

    data = ImageConverters.from_base64(options.raster)
    if not data:
        raise DecodeFailure("Watermark image is not valid base64")
    mark = codec.decode(data)

    scale = clamp(
        parse_number(options.scale, WatermarkConstants.IMAGE_SCALE_DEFAULT),
        WatermarkConstants.IMAGE_SCALE_MIN,
        WatermarkConstants.IMAGE_SCALE_MAX,
    )
    mark_h, mark_w = mark.shape[:2]
    iw = max(1, int(math.floor(mark_w * scale)))
    ih = max(1, int(math.floor(mark_h * scale)))
    mark = surface.resample(mark, SourceRect(0, 0, mark_w, mark_h), iw, ih)

    canvas_h, canvas_w = raster.shape[:2]
    position = parse_enum(options.position, AnchorPosition, AnchorPosition.TOP_LEFT)
    x, y = image_anchor(position, canvas_w, canvas_h, iw, ih, _padding(options.padding))

    logger.debug(f"Watermark image {iw}x{ih} at ({x}, {y}), opacity {opacity}")
    surface.draw(raster, mark, transform.translate(x, y), opacity)
    return raster


def draw_watermark_text(
    raster: np.ndarray,
    options: Optional[WatermarkTextOptions],
    surface: RasterSurface,
) -> np.ndarray:
    """
    Draw the text watermark with its drop shadow onto raster in place.

    The text is rotated around its own visual center, not the canvas origin.
    """
    if options is None:
        return raster
    text = str(options.text or "").strip()
    if not text:
        return raster

    opacity = _opacity(options.opacity)
    if opacity <= 0:
        return raster

    size = clamp(
        parse_number(options.size, WatermarkConstants.TEXT_SIZE_DEFAULT),
        WatermarkConstants.TEXT_SIZE_MIN,
        WatermarkConstants.TEXT_SIZE_MAX,
    )
    rotate = parse_number(options.rotate, WatermarkConstants.TEXT_ROTATE_DEFAULT)
    position = parse_enum(options.position, AnchorPosition, AnchorPosition.TOP_LEFT)
    color = ImageConverters.parse_color(options.color)

    glyphs = surface.render_text(text, size, SHADOW_MARGIN)
    coverage = glyphs.mask.astype(np.float64) * (color[3] / 255.0)

    fill_layer = np.empty(glyphs.mask.shape + (4,), dtype=np.uint8)
    fill_layer[..., :3] = color[:3]
    fill_layer[..., 3] = np.floor(coverage + 0.5).astype(np.uint8)

    shadow_layer = np.zeros_like(fill_layer)
    shadow_layer[..., 3] = fill_layer[..., 3]
    shadow_layer = surface.blur(shadow_layer, SHADOW_SIGMA)
    shadow_layer[..., 3] = np.floor(
        shadow_layer[..., 3].astype(np.float64) * WatermarkConstants.SHADOW_ALPHA + 0.5
    ).astype(np.uint8)

    canvas_h, canvas_w = raster.shape[:2]
    tw, th = glyphs.advance, size
    x, y = text_anchor(position, canvas_w, canvas_h, tw, th, _padding(options.padding))
    cx, cy = x + tw / 2, y - th / 2

    matrix = transform.compose(
        transform.translate(cx, cy),
        transform.rotate(rotate),
        transform.translate(-cx, -cy),
        transform.translate(x - glyphs.origin_x, y - glyphs.origin_y),
    )

    logger.debug(f"Watermark text '{text}' at ({x:.1f}, {y:.1f}), rotate {rotate}, opacity {opacity}")
    # Shadow first, then the glyphs, both under the same global alpha
    surface.draw(raster, shadow_layer, matrix, opacity)
    surface.draw(raster, fill_layer, matrix, opacity)
    return raster


def apply_watermarks(
    raster: np.ndarray,
    image_options: Optional[WatermarkImageOptions],
    text_options: Optional[WatermarkTextOptions],
    surface: RasterSurface,
    codec: RasterCodec,
) -> np.ndarray:
    """Image watermark, then text watermark. Modifies raster in place."""
    raster = draw_watermark_image(raster, image_options, surface, codec)
    return draw_watermark_text(raster, text_options, surface)
