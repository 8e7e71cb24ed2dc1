"""
Utility modules for core functionality.

Modules:
- decorators: Utility decorators (timer, etc.)
- enum_converter: Enum parsing and conversion
- numeric: Permissive number parsing, clamping and rounding
"""

from .decorators import timer
from .enum_converter import parse_enum
from .numeric import clamp, parse_number, round_half_up

__all__ = [
    "timer",
    "parse_enum",
    "clamp",
    "parse_number",
    "round_half_up",
]
