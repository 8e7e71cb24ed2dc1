"""
Geometry planning for the render pipeline.

Computes, from the source size and the crop/resize/transform options:
- the base (crop) rectangle in source coordinates
- the resize plan: output size and the sub-rectangle of the cropped source to sample
- the final canvas size after right-angle rotations

Everything here is pure arithmetic on plain numbers.
"""

from dataclasses import dataclass
from typing import Optional

from core.constants import RenderConstants
from core.enums import ResizeMode
from core.utils.enum_converter import parse_enum
from core.utils.numeric import clamp, parse_number, round_half_up
from schemas.render import CropOptions, FlipOptions, ResizeOptions, RotateOptions


@dataclass(frozen=True)
class SourceRect:
    """Rectangle in source pixel coordinates."""

    sx: int
    sy: int
    sw: int
    sh: int


@dataclass(frozen=True)
class ResizePlan:
    """Output size plus the sub-rectangle of the cropped source to sample."""

    w: int
    h: int
    sx: int
    sy: int
    sw: int
    sh: int


@dataclass(frozen=True)
class GeometryPlan:
    """Everything the compositor needs to place the source on the canvas."""

    base: SourceRect
    resize: ResizePlan
    canvas_width: int
    canvas_height: int
    rotate_degrees: float
    flip_h: bool
    flip_v: bool

    @property
    def sample_rect(self) -> SourceRect:
        """Crop offset composed with the resize sub-rectangle."""
        return SourceRect(
            sx=self.base.sx + self.resize.sx,
            sy=self.base.sy + self.resize.sy,
            sw=self.resize.sw,
            sh=self.resize.sh,
        )


def base_source_rect(src_w: int, src_h: int, crop: Optional[CropOptions]) -> SourceRect:
    """
    Compute the crop rectangle, clamped into the source.

    Args:
        src_w: Source width in pixels
        src_h: Source height in pixels
        crop: Crop options (disabled or missing means the whole source)

    Returns:
        SourceRect with 0 <= sx < src_w, 1 <= sw <= src_w - sx (same for y)
    """
    if crop is None or not crop.enabled:
        return SourceRect(0, 0, src_w, src_h)

    x = clamp(parse_number(crop.x, 0.0), 0, max(0, src_w - 1))
    y = clamp(parse_number(crop.y, 0.0), 0, max(0, src_h - 1))
    w = clamp(parse_number(crop.w, src_w), 1, src_w - x)
    h = clamp(parse_number(crop.h, src_h), 1, src_h - y)

    return SourceRect(int(x), int(y), max(1, int(w)), max(1, int(h)))


def plan_resize(src_w: int, src_h: int, resize: Optional[ResizeOptions]) -> ResizePlan:
    """
    Compute the resize plan against the (already cropped) source size.

    Modes:
        exact: stretch to the requested size, sample the whole source
        contain: fit inside the requested size keeping aspect ratio
        cover: fill the requested size, sampling a centered sub-crop
            with the target's aspect ratio

    Args:
        src_w: Cropped source width
        src_h: Cropped source height
        resize: Resize options (disabled or missing means identity)

    Returns:
        ResizePlan with positive output size and an in-bounds sample rect
    """
    if resize is None or not resize.enabled:
        return ResizePlan(src_w, src_h, 0, 0, src_w, src_h)

    mode = parse_enum(resize.mode, ResizeMode, ResizeMode.CONTAIN)
    target_w = max(1, int(parse_number(resize.width, src_w) // 1))
    target_h = max(1, int(parse_number(resize.height, src_h) // 1))

    if mode == ResizeMode.EXACT:
        return ResizePlan(target_w, target_h, 0, 0, src_w, src_h)

    src_ratio = src_w / src_h
    target_ratio = target_w / target_h

    if mode == ResizeMode.CONTAIN:
        out_w = target_w
        out_h = round_half_up(out_w / src_ratio)
        if out_h > target_h:
            out_h = target_h
            out_w = round_half_up(out_h * src_ratio)
        return ResizePlan(max(1, out_w), max(1, out_h), 0, 0, src_w, src_h)

    # Cover: crop the source to the target aspect ratio, centered
    sx, sy, sw, sh = 0, 0, src_w, src_h
    if src_ratio > target_ratio:
        sw = min(src_w, max(1, round_half_up(src_h * target_ratio)))
        sx = round_half_up((src_w - sw) / 2)
    else:
        sh = min(src_h, max(1, round_half_up(src_w / target_ratio)))
        sy = round_half_up((src_h - sh) / 2)

    return ResizePlan(target_w, target_h, sx, sy, sw, sh)


def is_right_angle(degrees: float) -> bool:
    """True for odd multiples of 90 degrees (canvas width/height swap)."""
    return abs(degrees) % RenderConstants.HALF_TURN == RenderConstants.RIGHT_ANGLE


def plan_geometry(
    src_w: int,
    src_h: int,
    crop: Optional[CropOptions] = None,
    resize: Optional[ResizeOptions] = None,
    rotate: Optional[RotateOptions] = None,
    flip: Optional[FlipOptions] = None,
) -> GeometryPlan:
    """
    Plan crop, resize and canvas size for one render.

    Example:
        >>> plan = plan_geometry(800, 600, resize=ResizeOptions(
        ...     enabled=True, mode="cover", width=400, height=400))
        >>> plan.resize
        ResizePlan(w=400, h=400, sx=100, sy=0, sw=600, sh=600)
    """
    src_w = max(1, int(src_w))
    src_h = max(1, int(src_h))

    base = base_source_rect(src_w, src_h, crop)
    resize_plan = plan_resize(base.sw, base.sh, resize)

    degrees = parse_number(rotate.degrees, 0.0) if rotate is not None else 0.0
    flip_h = bool(flip.h) if flip is not None else False
    flip_v = bool(flip.v) if flip is not None else False

    if is_right_angle(degrees):
        canvas_w, canvas_h = resize_plan.h, resize_plan.w
    else:
        canvas_w, canvas_h = resize_plan.w, resize_plan.h

    return GeometryPlan(
        base=base,
        resize=resize_plan,
        canvas_width=canvas_w,
        canvas_height=canvas_h,
        rotate_degrees=degrees,
        flip_h=flip_h,
        flip_v=flip_v,
    )
