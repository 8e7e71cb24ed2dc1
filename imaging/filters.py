"""
Color filter chain.

build_filter_chain() clamps the filter options and emits typed operations
for every non-identity parameter, always in the canonical order
grayscale, blur, brightness, contrast, saturate. apply_filter_chain() runs
each operation as its own pass, which is how a sequential backend reproduces
a composed CSS filter expression.

Color matrices follow the CSS Filter Effects definitions.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from core.constants import RenderConstants
from core.enums import FilterName
from core.utils.numeric import clamp, parse_number, round_half_up
from imaging.surface import RasterSurface
from schemas.render import FilterOptions

logger = logging.getLogger(__name__)

# Rec. 709 luma weights used by the CSS grayscale() matrix
_GRAY_R, _GRAY_G, _GRAY_B = 0.2126, 0.7152, 0.0722
# Weights used by the CSS saturate() matrix
_SAT_R, _SAT_G, _SAT_B = 0.213, 0.715, 0.072


@dataclass(frozen=True)
class FilterOp:
    """
    One filter pass.

    value is in the unit of the option: amount 0-1 for grayscale, pixels
    for blur, percent for brightness/contrast/saturate.
    """

    name: FilterName
    value: float

    def to_css(self) -> str:
        if self.name == FilterName.GRAYSCALE:
            return f"grayscale({round_half_up(self.value * 100)}%)"
        if self.name == FilterName.BLUR:
            return f"blur({self.value:g}px)"
        return f"{self.name.value}({self.value:g}%)"


@dataclass(frozen=True)
class FilterChain:
    """Ordered filter operations for one draw."""

    ops: Tuple[FilterOp, ...] = ()

    @property
    def is_identity(self) -> bool:
        return not self.ops

    def to_css(self) -> str:
        """Composed CSS filter expression ("none" when empty)."""
        return " ".join(op.to_css() for op in self.ops) if self.ops else "none"


def build_filter_chain(filters: Optional[FilterOptions]) -> FilterChain:
    """
    Normalize filter options into an ordered FilterChain.

    Out-of-range values are clamped, never rejected.

    Example:
        >>> build_filter_chain(FilterOptions(brightness=500, grayscale=0.5)).to_css()
        'grayscale(50%) brightness(300%)'
    """
    if filters is None:
        return FilterChain()

    grayscale = clamp(
        parse_number(filters.grayscale, 0.0),
        RenderConstants.GRAYSCALE_MIN,
        RenderConstants.GRAYSCALE_MAX,
    )
    blur = clamp(parse_number(filters.blur, 0.0), RenderConstants.BLUR_MIN, RenderConstants.BLUR_MAX)
    percents = [
        clamp(
            parse_number(value, RenderConstants.PERCENT_IDENTITY),
            RenderConstants.PERCENT_MIN,
            RenderConstants.PERCENT_MAX,
        )
        for value in (filters.brightness, filters.contrast, filters.saturation)
    ]
    brightness, contrast, saturation = percents

    ops = []
    if grayscale > 0:
        ops.append(FilterOp(FilterName.GRAYSCALE, grayscale))
    if blur > 0:
        ops.append(FilterOp(FilterName.BLUR, blur))
    if brightness != RenderConstants.PERCENT_IDENTITY:
        ops.append(FilterOp(FilterName.BRIGHTNESS, brightness))
    if contrast != RenderConstants.PERCENT_IDENTITY:
        ops.append(FilterOp(FilterName.CONTRAST, contrast))
    if saturation != RenderConstants.PERCENT_IDENTITY:
        ops.append(FilterOp(FilterName.SATURATE, saturation))

    return FilterChain(tuple(ops))


def grayscale_matrix(amount: float) -> np.ndarray:
    keep = 1.0 - amount
    return np.array(
        [
            [_GRAY_R + (1 - _GRAY_R) * keep, _GRAY_G - _GRAY_G * keep, _GRAY_B - _GRAY_B * keep],
            [_GRAY_R - _GRAY_R * keep, _GRAY_G + (1 - _GRAY_G) * keep, _GRAY_B - _GRAY_B * keep],
            [_GRAY_R - _GRAY_R * keep, _GRAY_G - _GRAY_G * keep, _GRAY_B + (1 - _GRAY_B) * keep],
        ]
    )


def saturate_matrix(factor: float) -> np.ndarray:
    return np.array(
        [
            [_SAT_R + (1 - _SAT_R) * factor, _SAT_G - _SAT_G * factor, _SAT_B - _SAT_B * factor],
            [_SAT_R - _SAT_R * factor, _SAT_G + (1 - _SAT_G) * factor, _SAT_B - _SAT_B * factor],
            [_SAT_R - _SAT_R * factor, _SAT_G - _SAT_G * factor, _SAT_B + (1 - _SAT_B) * factor],
        ]
    )


def _apply_color_op(layer: np.ndarray, op: FilterOp) -> np.ndarray:
    rgb = layer[..., :3].astype(np.float64)

    if op.name == FilterName.GRAYSCALE:
        rgb = rgb @ grayscale_matrix(op.value).T
    elif op.name == FilterName.SATURATE:
        rgb = rgb @ saturate_matrix(op.value / 100.0).T
    elif op.name == FilterName.BRIGHTNESS:
        rgb = rgb * (op.value / 100.0)
    elif op.name == FilterName.CONTRAST:
        factor = op.value / 100.0
        rgb = rgb * factor + 255.0 * (0.5 - 0.5 * factor)

    out = layer.copy()
    out[..., :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)
    return out


def apply_filter_chain(layer: np.ndarray, chain: FilterChain, surface: RasterSurface) -> np.ndarray:
    """
    Apply each operation of the chain as a discrete pass.

    Args:
        layer: RGBA raster (not modified)
        chain: Normalized filter chain
        surface: Surface providing the blur primitive

    Returns:
        Filtered RGBA raster (the input itself when the chain is empty)
    """
    if chain.is_identity:
        return layer

    logger.debug(f"Applying filter chain: {chain.to_css()}")
    for op in chain.ops:
        if op.name == FilterName.BLUR:
            layer = surface.blur(layer, op.value)
        else:
            layer = _apply_color_op(layer, op)
    return layer
