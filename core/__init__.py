"""
Core modules for Image Render Flow
"""

from .exceptions import BatchCancelled, DecodeFailure, EncodeFailure, RenderException

__all__ = [
    "RenderException",
    "DecodeFailure",
    "EncodeFailure",
    "BatchCancelled",
]
