"""
Dotted-path access into configuration trees.

A path "A.B.C" addresses tree["A"]["B"]["C"]. Segments that walk through
a list are indices: "A.2.B" addresses tree["A"][2]["B"].
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import typedconf.dynamic as dynamic
import typedconf.errors as errors


class _MissingType:
    """Sentinel type for a path that does not resolve."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


MISSING = _MissingType()


def split(path: str) -> list[str]:
    """Split a dotted path into segments."""
    return path.split(".")


def _index(segment: str) -> int | None:
    """Parse a list index segment; None if it is not a non-negative integer."""
    try:
        index = int(segment)
    except ValueError:
        return None
    return index if index >= 0 else None


def get_element(node: dynamic.DynamicValue, segment: str) -> _typing.Any:
    """
    Look up one path segment in a node.

    Returns:
        The child value, or MISSING if the node has no such child.
    """
    kind = dynamic.kind_of(node)
    if kind is dynamic.Kind.MAPPING:
        return node.get(segment, MISSING)
    if kind is dynamic.Kind.SEQUENCE:
        index = _index(segment)
        if index is not None and index < len(node):
            return node[index]
    return MISSING


def get_path(data: dynamic.DynamicValue, path: str) -> _typing.Any:
    """
    Get the value at a dotted path.

    Args:
        data: Root of the tree.
        path: Dotted path.

    Returns:
        The value, or MISSING if any segment does not resolve.
    """
    node = data
    for segment in split(path):
        node = get_element(node, segment)
        if node is MISSING:
            return MISSING
    return node


def _set_element(node: dynamic.DynamicValue, segment: str, value: _typing.Any) -> None:
    if isinstance(node, _abc.MutableMapping):
        node[segment] = value
        return
    if isinstance(node, _abc.MutableSequence):
        index = _index(segment)
        if index is None:
            raise ValueError(f"{segment} is not a valid list index")
        if index >= len(node):
            raise ValueError(f"{segment} is out of the list index bound")
        node[index] = value
        return
    raise ValueError(f"{dynamic.type_name(node)} is read-only")


def set_path(
    data: dynamic.DynamicValue,
    path: str,
    value: _typing.Any,
) -> dynamic.DynamicValue:
    """
    Set the value at a dotted path, creating missing maps on the way.

    An existing value at the path is overwritten. Intermediate segments
    that do not exist become new dicts.

    Args:
        data: Root of the tree. None starts a new dict.
        path: Dotted path.
        value: Value to store.

    Returns:
        The root of the tree (new if data was None).

    Raises:
        ConfigPathError: If a segment walks through a value that is not a
            map or list, or a list index is invalid.
    """
    if data is None:
        data = {}

    parts = split(path)
    node = data
    for i, segment in enumerate(parts):
        prefix = ".".join(parts[: i + 1])
        kind = dynamic.kind_of(node)
        if kind not in (dynamic.Kind.MAPPING, dynamic.Kind.SEQUENCE):
            raise errors.ConfigPathError(
                prefix, f"got {kind.value} instead of a map or list"
            )

        if i == len(parts) - 1:
            try:
                _set_element(node, segment, value)
            except ValueError as e:
                raise errors.ConfigPathError(path, str(e)) from e
            return data

        child = get_element(node, segment)
        if child is not MISSING and child is not None:
            node = child
            continue

        child = {}
        try:
            _set_element(node, segment, child)
        except ValueError as e:
            raise errors.ConfigPathError(prefix, str(e)) from e
        node = child

    return data
