"""
OpenCV raster surface.

Resampling and warping run on premultiplied float32 layers so transparent
pixels never bleed color into their neighbours.
"""

import logging

import cv2
import numpy as np

from core.utils.numeric import round_half_up
from imaging import transform
from imaging.surface import RasterSurface, TextGlyphs, premultiply, unpremultiply

logger = logging.getLogger(__name__)


class OpenCVSurface(RasterSurface):
    """Surface backed by cv2 resize/warpAffine/GaussianBlur/putText."""

    name = "opencv"

    # Hershey fonts are vector fonts that only cover printable ASCII
    FONT = cv2.FONT_HERSHEY_SIMPLEX

    def _resize(self, source: np.ndarray, width: int, height: int) -> np.ndarray:
        src_h, src_w = source.shape[:2]
        if width <= src_w and height <= src_h:
            interpolation = cv2.INTER_AREA
        else:
            interpolation = cv2.INTER_CUBIC

        resized = cv2.resize(premultiply(source), (width, height), interpolation=interpolation)
        return unpremultiply(resized)

    def _warp(self, layer: np.ndarray, matrix: np.ndarray, width: int, height: int) -> np.ndarray:
        pixel_matrix = transform.to_pixel_space(matrix)[:2].astype(np.float64)
        warped = cv2.warpAffine(
            premultiply(layer),
            pixel_matrix,
            (width, height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )
        return unpremultiply(warped)

    def blur(self, raster: np.ndarray, sigma: float) -> np.ndarray:
        if sigma <= 0:
            return raster.copy()
        blurred = cv2.GaussianBlur(
            premultiply(raster),
            (0, 0),
            sigmaX=sigma,
            sigmaY=sigma,
            borderType=cv2.BORDER_CONSTANT,
        )
        return unpremultiply(blurred)

    def render_text(self, text: str, size: float, margin: int) -> TextGlyphs:
        pixel_height = max(1, round_half_up(size))
        thickness = max(1, round_half_up(size / 14))
        font_scale = cv2.getFontScaleFromHeight(self.FONT, pixel_height, thickness)

        (text_w, text_h), baseline = cv2.getTextSize(text, self.FONT, font_scale, thickness)
        mask = np.zeros(
            (text_h + baseline + thickness + 2 * margin, text_w + thickness + 2 * margin),
            dtype=np.uint8,
        )
        origin = (margin, margin + text_h)
        cv2.putText(
            mask, text, origin, self.FONT, font_scale, 255, thickness, cv2.LINE_AA
        )

        return TextGlyphs(mask=mask, origin_x=origin[0], origin_y=origin[1], advance=text_w)
