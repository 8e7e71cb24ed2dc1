"""
API Routers for Image Render Flow
"""

from . import image, system

__all__ = ["image", "system"]
