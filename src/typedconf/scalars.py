"""
Conversion of scalar configuration values to target types.

Rules:
- bool targets accept only booleans
- int targets accept ints and floats; floats truncate toward zero and
  only NaN and infinities (genuine overflow) are rejected
- float targets accept ints and floats
- str targets accept strings and UTF-8 bytes
- bytes targets accept bytes and strings (encoded as UTF-8)
- enum targets accept a member value or a member name
- subclasses of the above are built from the converted base value
- anything else accepts only instances of itself

Booleans never convert to numbers and numbers never convert to strings.
"""

from __future__ import annotations

import enum as _enum
import math as _math
import typing as _typing

import typedconf.dynamic as dynamic


class NotConvertibleError(Exception):
    """A value that cannot be converted to the requested type."""

    def __init__(self, value: _typing.Any, target: type, reason: str = "") -> None:
        self.value = value
        self.target = target
        message = f"{dynamic.type_name(value)} cannot be used to configure {target.__name__}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


def convert(value: _typing.Any, target: type) -> _typing.Any:
    """
    Convert a scalar value to the target type.

    Args:
        value: A scalar from the configuration tree.
        target: The type to convert to.

    Returns:
        The converted value.

    Raises:
        NotConvertibleError: If no conversion exists.
    """
    kind = dynamic.kind_of(value)

    if issubclass(target, _enum.Enum):
        return _convert_enum(value, target)

    if issubclass(target, bool):
        if kind is dynamic.Kind.BOOL:
            return value
        raise NotConvertibleError(value, target)

    if issubclass(target, int):
        if kind is dynamic.Kind.INT:
            return target(value)
        if kind is dynamic.Kind.FLOAT:
            if not _math.isfinite(value):
                raise NotConvertibleError(value, target, "overflow")
            return target(_math.trunc(value))
        raise NotConvertibleError(value, target)

    if issubclass(target, float):
        if kind in (dynamic.Kind.INT, dynamic.Kind.FLOAT):
            try:
                return target(value)
            except OverflowError as e:
                raise NotConvertibleError(value, target, "overflow") from e
        raise NotConvertibleError(value, target)

    if issubclass(target, str):
        if kind is dynamic.Kind.STRING:
            return value if type(value) is target else target(value)
        if kind is dynamic.Kind.BYTES:
            try:
                return target(bytes(value).decode("utf-8"))
            except UnicodeDecodeError as e:
                raise NotConvertibleError(value, target, "invalid UTF-8") from e
        raise NotConvertibleError(value, target)

    if issubclass(target, bytes):
        if kind is dynamic.Kind.BYTES:
            return target(value)
        if kind is dynamic.Kind.STRING:
            return target(value.encode("utf-8"))
        raise NotConvertibleError(value, target)

    if isinstance(value, target):
        return value
    raise NotConvertibleError(value, target)


def _convert_enum(value: _typing.Any, target: type[_enum.Enum]) -> _enum.Enum:
    """Convert by member value first, then by member name."""
    if isinstance(value, target):
        return value
    try:
        return target(value)
    except ValueError:
        pass
    if isinstance(value, str) and value in target.__members__:
        return target.__members__[value]
    raise NotConvertibleError(value, target, f"not a member of {target.__name__}")


def convert_key(key: _typing.Any, target: type) -> _typing.Any:
    """
    Convert a mapping key to the key type of a target mapping.

    Source keys are strings; int and enum key types parse them.

    Raises:
        NotConvertibleError: If the key cannot be converted.
    """
    if isinstance(key, str) and not issubclass(target, str):
        if issubclass(target, bool):
            raise NotConvertibleError(key, target)
        if issubclass(target, int) and not issubclass(target, _enum.Enum):
            try:
                return target(key, 10)
            except ValueError as e:
                raise NotConvertibleError(key, target, "not an integer") from e
    return convert(key, target)
