"""
Abstract 2D raster surface.

The pipeline stages are written once against this interface; the backends
in imaging.backends only supply resampling, affine warping, blurring and
text rasterization. Compositing (source-over with a global alpha) is shared
NumPy code so every backend blends identically.

Rasters are NumPy arrays of shape (height, width, 4), dtype uint8,
non-premultiplied RGBA.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from imaging import transform
from imaging.geometry import SourceRect

logger = logging.getLogger(__name__)


@dataclass
class TextGlyphs:
    """
    Rasterized text coverage.

    mask is a single-channel uint8 coverage image; (origin_x, origin_y) is the
    left end of the text baseline inside the mask, and advance is the text
    width as a canvas measureText() would report it.
    """

    mask: np.ndarray
    origin_x: float
    origin_y: float
    advance: float


def premultiply(raster: np.ndarray) -> np.ndarray:
    """RGBA uint8 -> premultiplied RGBA float32 in 0-255."""
    layer = raster.astype(np.float32)
    layer[..., :3] *= layer[..., 3:4] / 255.0
    return layer


def unpremultiply(layer: np.ndarray) -> np.ndarray:
    """Premultiplied RGBA float32 -> RGBA uint8."""
    alpha = np.clip(layer[..., 3:4], 0.0, 255.0)
    safe_alpha = np.where(alpha > 0, alpha, 1.0)
    rgb = np.where(alpha > 0, layer[..., :3] * 255.0 / safe_alpha, 0.0)
    out = np.empty(layer.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.floor(rgb + 0.5), 0, 255)
    out[..., 3:4] = np.floor(alpha + 0.5)
    return out


def composite_over(dst: np.ndarray, src: np.ndarray, alpha: float = 1.0) -> None:
    """
    Blend src over dst in place (Porter-Duff source-over).

    Args:
        dst: Destination raster, modified in place
        src: Source raster of the same size
        alpha: Global alpha multiplied into the source alpha
    """
    src_a = src[..., 3:4].astype(np.float64) / 255.0 * alpha
    dst_a = dst[..., 3:4].astype(np.float64) / 255.0

    out_a = src_a + dst_a * (1.0 - src_a)
    safe_a = np.where(out_a > 0, out_a, 1.0)
    out_rgb = (
        src[..., :3].astype(np.float64) * src_a
        + dst[..., :3].astype(np.float64) * dst_a * (1.0 - src_a)
    ) / safe_a

    dst[..., :3] = np.clip(np.floor(out_rgb + 0.5), 0, 255).astype(np.uint8)
    dst[..., 3:4] = np.clip(np.floor(out_a * 255.0 + 0.5), 0, 255).astype(np.uint8)


class RasterSurface(ABC):
    """2D raster capability used by every pipeline stage."""

    name = "abstract"

    def __init__(self, font_path: Optional[str] = None):
        """
        Initialize surface.

        Args:
            font_path: Optional TrueType font for text rasterization
                (backends without font file support ignore it)
        """
        self.font_path = font_path

    def allocate(self, width: int, height: int) -> np.ndarray:
        """Allocate a fully transparent raster."""
        return np.zeros((max(1, int(height)), max(1, int(width)), 4), dtype=np.uint8)

    def fill(self, raster: np.ndarray, color: Sequence[int]) -> None:
        """Fill the whole raster with an RGBA color."""
        raster[...] = np.asarray(color, dtype=np.uint8)

    def resample(
        self, source: np.ndarray, rect: SourceRect, width: int, height: int
    ) -> np.ndarray:
        """
        Resample a sub-rectangle of source to width x height.

        Sampling the full source at its own size is an exact copy.
        """
        src_h, src_w = source.shape[:2]
        region = source[rect.sy : rect.sy + rect.sh, rect.sx : rect.sx + rect.sw]
        if region.shape[1] == width and region.shape[0] == height:
            return region.copy()
        if (rect.sx, rect.sy, rect.sw, rect.sh) != (0, 0, src_w, src_h):
            source = np.ascontiguousarray(region)
        return self._resize(source, int(width), int(height))

    def draw(
        self, dst: np.ndarray, layer: np.ndarray, matrix: np.ndarray, alpha: float = 1.0
    ) -> None:
        """
        Draw layer onto dst through an affine matrix with a global alpha.

        Args:
            dst: Destination raster, modified in place
            layer: Source raster in its own coordinates
            matrix: 3x3 continuous-coordinate matrix mapping layer -> dst
            alpha: Global alpha (0-1)
        """
        if alpha <= 0:
            return
        dst_h, dst_w = dst.shape[:2]
        if transform.is_identity(matrix) and layer.shape[:2] == (dst_h, dst_w):
            warped = layer
        else:
            warped = self._warp(layer, matrix, dst_w, dst_h)
        composite_over(dst, warped, alpha)

    @abstractmethod
    def _resize(self, source: np.ndarray, width: int, height: int) -> np.ndarray:
        """High-quality resize of a whole raster."""

    @abstractmethod
    def _warp(self, layer: np.ndarray, matrix: np.ndarray, width: int, height: int) -> np.ndarray:
        """Warp layer into a transparent width x height raster."""

    @abstractmethod
    def blur(self, raster: np.ndarray, sigma: float) -> np.ndarray:
        """Gaussian blur with the given standard deviation (transparent outside)."""

    @abstractmethod
    def render_text(self, text: str, size: float, margin: int) -> TextGlyphs:
        """Rasterize text at a pixel font size, padded by margin on every side."""
