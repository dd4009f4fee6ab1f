"""Tests for the type registry."""

import dataclasses as _dataclasses
import logging as _logging

import pytest as _pytest

import typedconf.errors as errors
import typedconf.registry as registry


@_dataclasses.dataclass
class Widget:
    Name: str = ""


class NeedsArgs:
    def __init__(self, name: str) -> None:
        self.name = name


def make_widget() -> Widget:
    return Widget()


def make_nothing() -> None:
    pass


def make_pair() -> tuple[Widget, Widget]:
    return Widget(), Widget()


def make_many() -> tuple[Widget, ...]:
    return (Widget(),)


def make_with_default(name: str = "w") -> Widget:
    return Widget(Name=name)


def make_with_arg(name: str) -> Widget:
    return Widget(Name=name)


def make_later() -> "Unresolved":  # noqa: F821
    return Widget()


def make_quoted_nothing() -> "None":
    pass


class TestRegister:
    """Registering factories."""

    @_pytest.mark.parametrize(
        "factory",
        [
            Widget,
            make_widget,
            make_many,
            make_with_default,
            make_later,
            lambda: Widget(),
            dict,
        ],
    )
    def test_valid_factories(self, factory: object) -> None:
        """Zero-argument callables with one output are accepted."""
        types = registry.TypeRegistry()
        types.register("w", factory)
        assert types.get("w") is factory

    def test_not_callable(self) -> None:
        """Non-callables are rejected."""
        with _pytest.raises(errors.ProviderError) as exc_info:
            registry.TypeRegistry().register("w", Widget())
        assert "The provider should be callable, got Widget" in str(exc_info.value)

    @_pytest.mark.parametrize("factory", [make_with_arg, NeedsArgs])
    def test_required_arguments(self, factory: object) -> None:
        """Factories must not need arguments."""
        with _pytest.raises(errors.ProviderError) as exc_info:
            registry.TypeRegistry().register("w", factory)
        assert "should take no arguments" in str(exc_info.value)
        assert exc_info.value.provider is factory

    def test_no_output(self) -> None:
        """A factory returning None is rejected."""
        with _pytest.raises(errors.ProviderError) as exc_info:
            registry.TypeRegistry().register("w", make_nothing)
        assert "single output, got none" in str(exc_info.value)

    def test_quoted_no_output(self) -> None:
        """String return annotations are resolved before checking."""
        with _pytest.raises(errors.ProviderError) as exc_info:
            registry.TypeRegistry().register("w", make_quoted_nothing)
        assert "single output, got none" in str(exc_info.value)

    def test_several_outputs(self) -> None:
        """A factory returning a fixed tuple of several values is rejected."""
        with _pytest.raises(errors.ProviderError) as exc_info:
            registry.TypeRegistry().register("w", make_pair)
        assert "single output, got 2" in str(exc_info.value)

    def test_reregistering_replaces(self, caplog: _pytest.LogCaptureFixture) -> None:
        """A second registration silently replaces the first."""
        caplog.set_level(_logging.DEBUG, logger="typedconf.registry")
        types = registry.TypeRegistry()
        types.register("w", Widget)
        types.register("w", make_widget)
        assert types.get("w") is make_widget
        assert len(types) == 1
        assert "Replacing factory for type 'w'" in caplog.text


class TestLookup:
    """Looking factories up."""

    def test_get_missing(self) -> None:
        """Unknown names give None."""
        assert registry.TypeRegistry().get("nope") is None

    def test_get_or_raise(self) -> None:
        """Unknown names raise with the given path."""
        with _pytest.raises(errors.UnknownTypeError) as exc_info:
            registry.TypeRegistry().get_or_raise("nope", "A.B")
        assert exc_info.value.path == "A.B"

    def test_names_contains_and_unregister(self) -> None:
        """Registry contents can be listed and removed."""
        types = registry.TypeRegistry()
        types.register("b", Widget)
        types.register("a", make_widget)
        assert types.names() == ["a", "b"]
        assert "a" in types
        assert types.unregister("a") is make_widget
        assert "a" not in types
        assert types.unregister("a") is None
        assert len(types) == 1
