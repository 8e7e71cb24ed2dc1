"""
Domain exceptions for the render pipeline.

These carry no HTTP knowledge; api.exceptions maps them to responses.
"""

from typing import Optional


class RenderException(Exception):
    """Base class for fatal render errors."""

    kind = "render"

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index


class DecodeFailure(RenderException):
    """Source bytes are not a valid or loadable raster."""

    kind = "decode"


class EncodeFailure(RenderException):
    """No encoded output could be produced in any attempted format."""

    kind = "encode"


class BatchCancelled(RenderException):
    """Raised at an item boundary after a batch cancellation request."""

    kind = "cancelled"

    def __init__(self, completed: int):
        super().__init__(f"Batch cancelled after {completed} item(s).")
        self.completed = completed
