"""
The dynamic value model: the untyped tree produced by decoders.

A dynamic value is plain Python data: None, bool, int, float, str, bytes,
list and str-keyed dict. Decoders may also produce other leaves (YAML and
TOML timestamps), which are classified as SCALAR.

Integers and floats are kept apart. A value is only narrowed or widened
when a binding target asks for a specific numeric type.
"""

from __future__ import annotations

import collections.abc as _abc
import enum as _enum
import typing as _typing

DynamicValue: _typing.TypeAlias = _typing.Any


class Kind(_enum.Enum):
    """Kind of a dynamic value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    SEQUENCE = "list"
    MAPPING = "map"
    SCALAR = "scalar"


def kind_of(value: DynamicValue) -> Kind:
    """
    Classify a dynamic value.

    Boxed containers (read-only mapping views, tuples and other abstract
    sequences) are classified by what they hold, not by their wrapper type.

    Args:
        value: Any value from a configuration tree.

    Returns:
        The Kind of the value.
    """
    if value is None:
        return Kind.NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, int):
        return Kind.INT
    if isinstance(value, float):
        return Kind.FLOAT
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, (bytes, bytearray)):
        return Kind.BYTES
    if isinstance(value, _abc.Mapping):
        return Kind.MAPPING
    if isinstance(value, _abc.Sequence):
        return Kind.SEQUENCE
    return Kind.SCALAR


def is_mapping(value: DynamicValue) -> bool:
    """Check if a value is a mapping node."""
    return kind_of(value) is Kind.MAPPING


def is_sequence(value: DynamicValue) -> bool:
    """Check if a value is a sequence node."""
    return kind_of(value) is Kind.SEQUENCE


def type_name(value: DynamicValue) -> str:
    """Name of a value's type for error messages."""
    kind = kind_of(value)
    if kind in (Kind.MAPPING, Kind.SEQUENCE, Kind.NULL):
        return kind.value
    return type(value).__name__


def copy_tree(value: DynamicValue) -> DynamicValue:
    """
    Deep copy a dynamic value.

    Every mapping in the result is a dict and every sequence is a list, so
    the copy shares nothing with the original and boxed containers come out
    as plain data.

    Args:
        value: The tree to copy.

    Returns:
        An independent copy of the tree.
    """
    kind = kind_of(value)
    if kind is Kind.MAPPING:
        return {key: copy_tree(item) for key, item in value.items()}
    if kind is Kind.SEQUENCE:
        return [copy_tree(item) for item in value]
    if isinstance(value, bytearray):
        return bytes(value)
    return value
