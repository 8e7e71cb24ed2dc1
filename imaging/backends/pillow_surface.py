"""
Pillow raster surface.

Pillow premultiplies RGBA internally for resize and transform, and the
affine transform samples at pixel centers, so continuous-coordinate
matrices can be passed straight through (inverted).
"""

import logging
import math
from functools import lru_cache
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from core.image.converters import ImageConverters
from core.utils.numeric import round_half_up
from imaging.surface import RasterSurface, TextGlyphs

logger = logging.getLogger(__name__)


@lru_cache(maxsize=64)
def _load_font(font_path: Optional[str], size: int) -> ImageFont.FreeTypeFont:
    """Load (and cache) a font at a pixel size."""
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError as e:
            logger.warning(f"Failed to load font {font_path}: {e}, using default font")
    return ImageFont.load_default(size=size)


class PillowSurface(RasterSurface):
    """Surface backed by PIL Image.resize/transform/filter and ImageDraw."""

    name = "pillow"

    def _resize(self, source: np.ndarray, width: int, height: int) -> np.ndarray:
        image = ImageConverters.rgba_to_pil(source)
        resized = image.resize((width, height), Image.Resampling.LANCZOS)
        return np.array(resized, dtype=np.uint8)

    def _warp(self, layer: np.ndarray, matrix: np.ndarray, width: int, height: int) -> np.ndarray:
        # PIL maps output -> input, so hand it the inverse
        inverse = np.linalg.inv(matrix)
        coefficients = (
            inverse[0, 0],
            inverse[0, 1],
            inverse[0, 2],
            inverse[1, 0],
            inverse[1, 1],
            inverse[1, 2],
        )
        image = ImageConverters.rgba_to_pil(layer)
        warped = image.transform(
            (width, height),
            Image.Transform.AFFINE,
            data=coefficients,
            resample=Image.Resampling.BILINEAR,
            fillcolor=(0, 0, 0, 0),
        )
        return np.array(warped, dtype=np.uint8)

    def blur(self, raster: np.ndarray, sigma: float) -> np.ndarray:
        if sigma <= 0:
            return raster.copy()
        image = ImageConverters.rgba_to_pil(raster).convert("RGBa")
        blurred = image.filter(ImageFilter.GaussianBlur(radius=sigma))
        return np.array(blurred.convert("RGBA"), dtype=np.uint8)

    def render_text(self, text: str, size: float, margin: int) -> TextGlyphs:
        font = _load_font(self.font_path, max(1, round_half_up(size)))
        advance = font.getlength(text)
        ascent, descent = font.getmetrics()

        width = int(math.ceil(advance)) + 2 * margin
        height = ascent + descent + 2 * margin
        mask = Image.new("L", (max(1, width), max(1, height)), 0)

        origin = (margin, margin + ascent)
        ImageDraw.Draw(mask).text(origin, text, fill=255, font=font, anchor="ls")

        return TextGlyphs(
            mask=np.array(mask, dtype=np.uint8),
            origin_x=origin[0],
            origin_y=origin[1],
            advance=advance,
        )
