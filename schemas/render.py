"""
Render option models.

The wire format uses the option keys of the image tool (camelCase where the
key has more than one word). A RenderPlan is built once per request and read
by every pipeline stage.
"""

from typing import ClassVar, Dict, Optional

from pydantic import Field

from core.constants import OutputConstants, RenderConstants, WatermarkConstants
from core.enums import AnchorPosition, ResizeMode

from .base import LenientModel


class CropOptions(LenientModel):
    """Crop rectangle in source pixel coordinates."""

    enabled: bool = False
    x: float = 0.0
    y: float = 0.0
    w: Optional[float] = Field(None, description="Crop width (defaults to full width)")
    h: Optional[float] = Field(None, description="Crop height (defaults to full height)")


class ResizeOptions(LenientModel):
    """Target size and fitting mode."""

    enabled: bool = False
    mode: ResizeMode = ResizeMode.CONTAIN
    width: Optional[float] = Field(None, description="Target width (defaults to source width)")
    height: Optional[float] = Field(None, description="Target height (defaults to source height)")


class RotateOptions(LenientModel):
    degrees: float = 0.0


class FlipOptions(LenientModel):
    h: bool = False
    v: bool = False


class FilterOptions(LenientModel):
    """Color filters; defaults are the identity values."""

    grayscale: float = Field(RenderConstants.GRAYSCALE_MIN, description="Grayscale amount 0-1")
    blur: float = Field(RenderConstants.BLUR_MIN, description="Blur radius in pixels 0-30")
    brightness: float = Field(RenderConstants.PERCENT_IDENTITY, description="Percent 0-300")
    contrast: float = Field(RenderConstants.PERCENT_IDENTITY, description="Percent 0-300")
    saturation: float = Field(RenderConstants.PERCENT_IDENTITY, description="Percent 0-300")


class SharpenOptions(LenientModel):
    strength: float = Field(RenderConstants.SHARPEN_MIN, description="Sharpen strength 0-3")


class WatermarkTextOptions(LenientModel):
    """Translucent text label."""

    text: str = ""
    opacity: float = WatermarkConstants.OPACITY_DEFAULT
    size: float = Field(WatermarkConstants.TEXT_SIZE_DEFAULT, description="Font size in pixels")
    color: str = WatermarkConstants.TEXT_COLOR_DEFAULT
    position: AnchorPosition = AnchorPosition.BOTTOM_RIGHT
    rotate: float = Field(WatermarkConstants.TEXT_ROTATE_DEFAULT, description="Degrees")
    padding: float = WatermarkConstants.PADDING_DEFAULT

    # Unrecognized anchors are placed top-left, like the image tool does
    unknown_enum_values: ClassVar[Dict[str, AnchorPosition]] = {"position": AnchorPosition.TOP_LEFT}


class WatermarkImageOptions(LenientModel):
    """Secondary raster overlay."""

    raster: Optional[str] = Field(None, description="Base64 encoded watermark image")
    opacity: float = WatermarkConstants.OPACITY_DEFAULT
    scale: float = Field(WatermarkConstants.IMAGE_SCALE_DEFAULT, description="Scale 0.05-1")
    position: AnchorPosition = AnchorPosition.BOTTOM_RIGHT
    padding: float = WatermarkConstants.PADDING_DEFAULT

    unknown_enum_values: ClassVar[Dict[str, AnchorPosition]] = {"position": AnchorPosition.TOP_LEFT}


class OutputOptions(LenientModel):
    """Encoder settings."""

    mime_type: str = Field(OutputConstants.DEFAULT_MIME, alias="type")
    quality: float = OutputConstants.DEFAULT_QUALITY
    jpeg_background: str = Field(OutputConstants.DEFAULT_BACKGROUND, alias="jpegBackground")


class RenderPlan(LenientModel):
    """All options for rendering one image."""

    crop: CropOptions = Field(default_factory=CropOptions)
    resize: ResizeOptions = Field(default_factory=ResizeOptions)
    rotate: RotateOptions = Field(default_factory=RotateOptions)
    flip: FlipOptions = Field(default_factory=FlipOptions)
    filters: FilterOptions = Field(default_factory=FilterOptions)
    sharpen: SharpenOptions = Field(default_factory=SharpenOptions)
    watermark_image: Optional[WatermarkImageOptions] = Field(None, alias="watermarkImage")
    watermark_text: Optional[WatermarkTextOptions] = Field(None, alias="watermarkText")
    output: OutputOptions = Field(default_factory=OutputOptions)
