"""
Image format conversion utilities.

Handles conversions between the formats the pipeline touches:
- NumPy RGBA rasters (uint8, non-premultiplied)
- PIL Images
- Base64 encoded strings (plain or data URLs)
- CSS color strings
"""

import base64
import binascii
import logging
from typing import Tuple

import numpy as np
from PIL import Image, ImageColor, ImageOps

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

# Canvas keeps its previous fillStyle on invalid colors, which starts as black
DEFAULT_FILL: RGBA = (0, 0, 0, 255)


class ImageConverters:
    """Utilities for converting between image formats."""

    @staticmethod
    def pil_to_rgba(image: Image.Image, apply_orientation: bool = True) -> np.ndarray:
        """
        Convert PIL Image to an RGBA NumPy raster.

        Args:
            image: PIL Image in any mode
            apply_orientation: If True, honor the EXIF orientation tag

        Returns:
            NumPy array of shape (height, width, 4), dtype uint8
        """
        if apply_orientation:
            image = ImageOps.exif_transpose(image)

        if image.mode != "RGBA":
            image = image.convert("RGBA")

        return np.array(image, dtype=np.uint8)

    @staticmethod
    def rgba_to_pil(raster: np.ndarray) -> Image.Image:
        """
        Convert an RGBA NumPy raster to a PIL Image.

        Args:
            raster: NumPy array of shape (height, width, 4)

        Returns:
            PIL Image in RGBA mode
        """
        return Image.fromarray(np.ascontiguousarray(raster, dtype=np.uint8))

    @staticmethod
    def to_base64(data: bytes) -> str:
        """
        Convert raw bytes to a base64 string.

        Args:
            data: Encoded image bytes

        Returns:
            Base64 encoded string
        """
        return base64.b64encode(data).decode("utf-8")

    @staticmethod
    def from_base64(base64_string: str) -> bytes:
        """
        Convert a base64 string (optionally a data URL) to bytes.

        Args:
            base64_string: Base64 encoded payload

        Returns:
            Decoded bytes (empty when the payload is not valid base64)
        """
        payload = (base64_string or "").strip()

        # Strip "data:image/png;base64," style prefixes
        if payload.startswith("data:") and "," in payload:
            payload = payload.split(",", 1)[1]

        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Failed to decode base64 payload: {e}")
            return b""

    @staticmethod
    def parse_color(value: str, fallback: RGBA = DEFAULT_FILL) -> RGBA:
        """
        Parse a CSS color string into an RGBA tuple.

        Args:
            value: Color such as "#fff", "#ff000080", "rgb(0, 0, 0)" or "white"
            fallback: Color used when the string cannot be parsed

        Returns:
            Tuple of (r, g, b, a) in 0-255
        """
        try:
            color = ImageColor.getrgb(str(value).strip())
        except (ValueError, AttributeError):
            return fallback

        if len(color) == 3:
            return (color[0], color[1], color[2], 255)
        return (color[0], color[1], color[2], color[3])
