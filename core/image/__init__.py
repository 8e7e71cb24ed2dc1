"""
Image utilities shared by the imaging pipeline.

- converters: Format conversions (NumPy RGBA, PIL, base64, CSS colors)
"""

from core.image.converters import ImageConverters

__all__ = ["ImageConverters"]
