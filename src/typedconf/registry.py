"""
Type registry for interface-typed configuration slots.

A configuration map bound onto an interface slot names its concrete type
with a "type" key. The registry maps that name to a factory that builds a
fresh instance, which is then configured field by field.

Each Config owns its own registry; registries are never shared implicitly.
"""

from __future__ import annotations

import collections.abc as _abc
import inspect as _inspect
import logging as _logging
import typing as _typing

import typedconf.errors as errors

_logger = _logging.getLogger(__name__)

Factory: _typing.TypeAlias = _abc.Callable[[], _typing.Any]


def _check_factory(factory: _typing.Any) -> None:
    """
    Validate the shape of a factory.

    A factory must be callable with no arguments and must produce exactly
    one object. Return annotations are inspected: `-> None` produces
    nothing, and a fixed tuple of several items is a multi-value result.

    Raises:
        ProviderError: If the factory has the wrong shape.
    """
    if not callable(factory):
        raise errors.ProviderError(
            factory,
            f"The provider should be callable, got {type(factory).__name__}",
        )

    try:
        signature = _inspect.signature(factory)
    except (TypeError, ValueError):
        # Some builtins have no signature; trust them
        return

    required = [
        p.name
        for p in signature.parameters.values()
        if p.default is p.empty
        and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]
    if required:
        raise errors.ProviderError(
            factory,
            f"The provider should take no arguments, got {', '.join(required)}",
        )

    returns = signature.return_annotation
    if isinstance(factory, type) or returns is signature.empty:
        return
    if isinstance(returns, str):
        try:
            returns = _typing.get_type_hints(factory).get("return", returns)
        except (NameError, TypeError):
            # Unresolvable forward reference; nothing more to check
            return
    if returns is None or returns is type(None):
        raise errors.ProviderError(
            factory, "The provider should have a single output, got none"
        )
    if _typing.get_origin(returns) is tuple:
        args = _typing.get_args(returns)
        if len(args) != 1 and Ellipsis not in args:
            raise errors.ProviderError(
                factory,
                f"The provider should have a single output, got {len(args)}",
            )


class TypeRegistry:
    """
    Registry of named factories.

    Re-registering a name replaces the previous factory without complaint.
    """

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}

    def register(self, name: str, factory: Factory) -> None:
        """
        Associate a type name with a factory.

        Args:
            name: Type name used in "type" keys (case-sensitive).
            factory: Zero-argument callable returning a new instance.

        Raises:
            ProviderError: If the factory is not a zero-argument callable
                with a single output.
        """
        _check_factory(factory)
        if name in self._factories:
            _logger.debug("Replacing factory for type %r", name)
        else:
            _logger.debug("Registered factory for type %r", name)
        self._factories[name] = factory

    def unregister(self, name: str) -> Factory | None:
        """Remove a registered name, returning its factory if present."""
        return self._factories.pop(name, None)

    def get(self, name: str) -> Factory | None:
        """
        Get a factory by type name.

        Returns:
            The factory, or None if the name is not registered.
        """
        return self._factories.get(name)

    def get_or_raise(self, name: str, path: str = "") -> Factory:
        """
        Get a factory by type name, raising if not found.

        Args:
            name: Type name.
            path: Configuration path reported in the error.

        Raises:
            UnknownTypeError: If the name is not registered.
        """
        factory = self._factories.get(name)
        if factory is None:
            raise errors.UnknownTypeError(path, f"type {name!r} is unknown")
        return factory

    def names(self) -> list[str]:
        """Sorted list of registered type names."""
        return sorted(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories
