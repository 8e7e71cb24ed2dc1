"""
Schemas Package

This package contains all Pydantic schemas for data validation and serialization,
organized by domain:
- render: option blocks and the RenderPlan aggregate
- image: render/batch requests, responses and stream events
- system: status and debug models
"""

from .base import LenientModel
from .image import (
    BatchEventMessage,
    BatchRequest,
    PresetInfo,
    RenderRequest,
    RenderResponse,
)
from .render import (
    CropOptions,
    FilterOptions,
    FlipOptions,
    OutputOptions,
    RenderPlan,
    ResizeOptions,
    RotateOptions,
    SharpenOptions,
    WatermarkImageOptions,
    WatermarkTextOptions,
)
from .system import DebugSettings, SystemStatus

__all__ = [
    "LenientModel",
    # Render options
    "CropOptions",
    "FilterOptions",
    "FlipOptions",
    "OutputOptions",
    "RenderPlan",
    "ResizeOptions",
    "RotateOptions",
    "SharpenOptions",
    "WatermarkImageOptions",
    "WatermarkTextOptions",
    # Image API models
    "BatchEventMessage",
    "BatchRequest",
    "PresetInfo",
    "RenderRequest",
    "RenderResponse",
    # System models
    "DebugSettings",
    "SystemStatus",
]
