"""
Laplacian sharpen post-process.

Kernel (strength s):

     0   -s    0
    -s  1+4s  -s
     0   -s    0

The weights sum to 1, so flat regions are fixed points. Out-of-bounds
neighbours reuse the edge pixel. Alpha passes through unchanged.
"""

import numpy as np

from core.constants import RenderConstants
from core.utils.numeric import clamp, parse_number


def apply_sharpen(raster: np.ndarray, strength: float) -> np.ndarray:
    """
    Sharpen the RGB channels of an RGBA raster.

    Args:
        raster: RGBA uint8 raster
        strength: Sharpen strength, clamped to [0, 3]; 0 is a no-op

    Returns:
        The input raster itself when strength is 0, else a new raster
    """
    s = clamp(parse_number(strength, 0.0), RenderConstants.SHARPEN_MIN, RenderConstants.SHARPEN_MAX)
    if not s:
        return raster

    rgb = raster[..., :3].astype(np.float64)
    padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode="edge")
    neighbours = (
        padded[1:-1, :-2]  # left
        + padded[1:-1, 2:]  # right
        + padded[:-2, 1:-1]  # up
        + padded[2:, 1:-1]  # down
    )
    sharpened = rgb * (1 + 4 * s) - neighbours * s

    out = raster.copy()
    out[..., :3] = np.clip(np.floor(sharpened + 0.5), 0, 255).astype(np.uint8)
    return out
