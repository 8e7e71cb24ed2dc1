"""
Enum conversion utilities.

Provides a standardized way to parse strings into enums,
with support for case-insensitive parsing and fallback defaults.
"""

from typing import Any, Type, TypeVar

T = TypeVar("T")


def parse_enum(value: Any, enum_class: Type[T], default: T, normalize: bool = True) -> T:
    """
    Parse value to enum with fallback to default.

    Render options are permissive, so unknown values never raise.

    Args:
        value: Value to parse (string, enum, or None)
        enum_class: Enum class to parse to
        default: Default enum value if parsing fails
        normalize: Whether to strip and lowercase string before parsing
            (for case-insensitive matching)

    Returns:
        Parsed enum value or default

    Example:
        >>> mode = parse_enum("COVER", ResizeMode, ResizeMode.CONTAIN)
        >>> # Returns ResizeMode.COVER for "cover", "Cover", " COVER "
    """
    # Already an enum instance
    if isinstance(value, enum_class):
        return value

    # None or missing value
    if value is None or value == "":
        return default

    # String value - try to parse
    try:
        str_value = value.strip().lower() if normalize else value
        return enum_class(str_value)
    except (ValueError, AttributeError):
        return default
