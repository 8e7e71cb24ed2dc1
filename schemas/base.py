"""
Base schema for permissive render options.

Render options never fail validation: numeric fields that cannot be parsed
fall back to their defaults, unknown enum values fall back to the field
default (or the value listed in unknown_enum_values), and unknown keys are
ignored. Range clamping is left to the imaging stages so they stay correct
for any caller.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type, get_args

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from core.utils.enum_converter import parse_enum
from core.utils.numeric import parse_number

_FALSY_STRINGS = {"", "false", "0", "no", "off"}


def _accepts(annotation: Any, kind: type) -> bool:
    """Check whether an annotation is (or optionally wraps) the given type."""
    return annotation is kind or kind in get_args(annotation)


def _find_subclass(annotation: Any, base: type) -> Optional[Type]:
    """Return the first class in the annotation that subclasses base."""
    candidates = (annotation,) + get_args(annotation)
    for candidate in candidates:
        if isinstance(candidate, type) and issubclass(candidate, base):
            return candidate
    return None


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return bool(value)


class LenientModel(BaseModel):
    """
    Base model for option blocks.

    Accepts both camelCase aliases and field names, is immutable once built,
    and replaces malformed values with defaults instead of raising.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    # Per-field value for unrecognized (non-empty) enum strings; the field
    # default is used when a field is not listed
    unknown_enum_values: ClassVar[Dict[str, Enum]] = {}

    @field_validator("*", mode="before")
    @classmethod
    def _fallback_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields[info.field_name]
        default = field.get_default(call_default_factory=True)
        annotation = field.annotation

        if value is None or value == "":
            return default

        enum_class = _find_subclass(annotation, Enum)
        if enum_class is not None:
            return parse_enum(value, enum_class, cls.unknown_enum_values.get(info.field_name, default))

        if _accepts(annotation, float):
            return parse_number(value, default)

        if _accepts(annotation, bool):
            return _truthy(value)

        model_class = _find_subclass(annotation, BaseModel)
        if model_class is not None:
            return value if isinstance(value, (dict, BaseModel)) else default

        if _accepts(annotation, str) and not isinstance(value, str):
            return str(value)

        return value
