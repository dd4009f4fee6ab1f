"""
Deep merge of configuration trees.

Rules when merging a base tree with an update tree:

- If either side is not a mapping, the update replaces the base entirely
  (scalars, lists and None are never merged element-wise).
- If both sides are mappings, the result holds the union of their keys.
  Keys present on both sides are merged recursively; keys present on one
  side are copied through.

Example:
    >>> merge({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 4, "e": 5}, "d": 30})
    {'a': {'b': 1, 'c': 4, 'e': 5}, 'd': 30}
    >>> merge({"a": [1, 2]}, {"a": [100, 200]})
    {'a': [100, 200]}

Lists are replaced, so incremental list edits go through Config.set().
"""

from __future__ import annotations

import functools as _functools

import typedconf.dynamic as dynamic


def merge(
    base: dynamic.DynamicValue,
    update: dynamic.DynamicValue,
) -> dynamic.DynamicValue:
    """
    Deep merge two trees, with update taking priority.

    Neither argument is modified. The result is a fresh tree that shares no
    containers with either input.

    Args:
        base: The tree to merge into. May be None.
        update: The tree to merge in (takes priority).

    Returns:
        New merged tree.
    """
    if not (dynamic.is_mapping(base) and dynamic.is_mapping(update)):
        return dynamic.copy_tree(update)

    result: dict[str, dynamic.DynamicValue] = {}
    for key, value in base.items():
        if key in update:
            result[key] = merge(value, update[key])
        else:
            result[key] = dynamic.copy_tree(value)
    for key, value in update.items():
        if key not in result:
            result[key] = dynamic.copy_tree(value)
    return result


def merge_all(*sources: dynamic.DynamicValue) -> dynamic.DynamicValue:
    """
    Merge sources left to right; later sources win.

    Args:
        *sources: Trees in ascending priority order.

    Returns:
        The merged tree, or None if no sources were given.
    """
    return _functools.reduce(merge, sources, None)
