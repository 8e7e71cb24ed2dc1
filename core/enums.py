"""
Centralized enums shared by schemas, imaging stages and services.
"""

from enum import Enum


class ResizeMode(str, Enum):
    CONTAIN = "contain"
    COVER = "cover"
    EXACT = "exact"


class AnchorPosition(str, Enum):
    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"
    CENTER = "center"


class FilterName(str, Enum):
    """Filter operations in canonical application order."""

    GRAYSCALE = "grayscale"
    BLUR = "blur"
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SATURATE = "saturate"


class SurfaceBackend(str, Enum):
    OPENCV = "opencv"
    PILLOW = "pillow"


class BatchEventType(str, Enum):
    ITEM = "item"
    PROGRESS = "progress"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"
