"""Tests for reducing type hints to target shapes."""

import abc as _abc
import collections.abc as _collections_abc
import dataclasses as _dataclasses
import datetime as _datetime
import typing as _typing

import pydantic as _pydantic
import pytest as _pytest

import typedconf.errors as errors
import typedconf.shapes as shapes

Port = _typing.NewType("Port", int)


@_dataclasses.dataclass
class Node:
    Name: str = ""
    Children: list["Node"] = _dataclasses.field(default_factory=list)
    _hidden: int = 0


@_dataclasses.dataclass
class Broken:
    Value: "DoesNotExist" = None  # noqa: F821


class Model(_pydantic.BaseModel):
    name: str = ""
    _cache: dict = _pydantic.PrivateAttr(default_factory=dict)


class Sized(_typing.Protocol):
    size: int

    def resize(self, n: int) -> None: ...


class Base(_abc.ABC):
    @_abc.abstractmethod
    def run(self) -> None: ...


@_dataclasses.dataclass
class Required:
    Host: str
    Port: int = 80
    Tags: list[str] = _dataclasses.field(default_factory=list)
    Ready: bool = _dataclasses.field(default=False, init=False)

    def __post_init__(self) -> None:
        self.Ready = True


class NeedsArgs:
    Value: int

    def __init__(self, value: int) -> None:
        self.Value = value


class TestScalarShapes:
    """Leaf types."""

    @_pytest.mark.parametrize("hint", [bool, int, float, str, bytes, _datetime.date])
    def test_leaf_types(self, hint: type) -> None:
        """Leaf types reduce to scalar shapes of themselves."""
        shape = shapes.shape_of(hint)
        assert isinstance(shape, shapes.ScalarShape)
        assert shape.kind is hint

    def test_new_type_uses_supertype(self) -> None:
        """NewType behaves like its supertype."""
        assert shapes.shape_of(Port) == shapes.shape_of(int)

    def test_annotated_is_stripped(self) -> None:
        """Annotated metadata is ignored."""
        assert shapes.shape_of(_typing.Annotated[int, "meta"]) == shapes.shape_of(int)


class TestContainerShapes:
    """Tuples, lists and mappings."""

    def test_fixed_tuple(self) -> None:
        """A fixed tuple has one shape per position."""
        shape = shapes.shape_of(tuple[int, str])
        assert isinstance(shape, shapes.ArrayShape)
        assert [e.kind for e in shape.elements] == [int, str]

    def test_variadic_tuple(self) -> None:
        """tuple[T, ...] is a growable tuple."""
        shape = shapes.shape_of(tuple[int, ...])
        assert isinstance(shape, shapes.ListShape)
        assert shape.container is tuple

    @_pytest.mark.parametrize(
        "hint", [list[int], _collections_abc.Sequence[int], _typing.List[int]]
    )
    def test_list_hints(self, hint: object) -> None:
        """Sequence hints become lists."""
        shape = shapes.shape_of(hint)
        assert isinstance(shape, shapes.ListShape)
        assert shape.container is list
        assert shape.element.kind is int

    def test_bare_list(self) -> None:
        """A bare list holds anything."""
        shape = shapes.shape_of(list)
        assert isinstance(shape.element, shapes.OpaqueShape)

    def test_mapping(self) -> None:
        """dict[K, V] has key and value shapes."""
        shape = shapes.shape_of(dict[int, float])
        assert isinstance(shape, shapes.MappingShape)
        assert shape.key.kind is int
        assert shape.value.kind is float

    def test_bare_dict_has_string_keys(self) -> None:
        """A bare dict uses str keys and opaque values."""
        shape = shapes.shape_of(dict)
        assert shape.key.kind is str
        assert isinstance(shape.value, shapes.OpaqueShape)

    def test_non_scalar_keys_rejected(self) -> None:
        """Keys must be scalars."""
        with _pytest.raises(errors.ConfigTargetError):
            shapes.shape_of(dict[tuple[int, int], str])

    @_pytest.mark.parametrize("hint", [set[int], frozenset[str], _typing.Callable[[], int]])
    def test_unsupported_generics(self, hint: object) -> None:
        """Generics without a shape are rejected."""
        with _pytest.raises(errors.ConfigTargetError):
            shapes.shape_of(hint)


class TestUnionShapes:
    """Optional and other unions."""

    @_pytest.mark.parametrize("hint", [int | None, _typing.Optional[int]])
    def test_optional(self, hint: object) -> None:
        """T | None wraps T."""
        shape = shapes.shape_of(hint)
        assert isinstance(shape, shapes.OptionalShape)
        assert shape.inner.kind is int

    def test_multi_member_union_is_opaque(self) -> None:
        """Unions of several types take values verbatim."""
        assert isinstance(shapes.shape_of(int | str), shapes.OpaqueShape)

    @_pytest.mark.parametrize("hint", [_typing.Any, object, _typing.Literal["a", "b"]])
    def test_opaque_hints(self, hint: object) -> None:
        """Any, object and literals are opaque."""
        assert isinstance(shapes.shape_of(hint), shapes.OpaqueShape)


class TestStructShapes:
    """Dataclasses, models and plain classes."""

    def test_dataclass_fields(self) -> None:
        """Fields come from the dataclass, with resolved hints."""
        shape = shapes.shape_of(Node)
        assert isinstance(shape, shapes.StructShape)
        assert shape.fields["Name"] == shapes.FieldSpec("Name", str, True)
        assert shape.fields["Children"].hint == list[Node]
        assert shape.fields["_hidden"].writable is False

    def test_self_reference(self) -> None:
        """Self-referencing classes resolve lazily."""
        children = shapes.shape_of(shapes.shape_of(Node).fields["Children"].hint)
        assert children.element is shapes.shape_of(Node)

    def test_pydantic_private_attributes(self) -> None:
        """Private attributes are listed but not writable."""
        shape = shapes.shape_of(Model)
        assert shape.fields["name"].writable is True
        assert shape.fields["_cache"].writable is False

    def test_unresolvable_hint(self) -> None:
        """Forward references that do not resolve are target errors."""
        with _pytest.raises(errors.ConfigTargetError) as exc_info:
            shapes.shape_of(Broken)
        assert "Broken" in str(exc_info.value)


class TestInterfaceShapes:
    """Protocols and abstract classes."""

    def test_protocol_members(self) -> None:
        """Protocol members are capabilities."""
        shape = shapes.shape_of(Sized)
        assert isinstance(shape, shapes.InterfaceShape)
        assert shape.structural is True
        assert shape.capabilities == frozenset({"size", "resize"})

    def test_abstract_class(self) -> None:
        """Abstract classes are nominal interfaces."""
        shape = shapes.shape_of(Base)
        assert isinstance(shape, shapes.InterfaceShape)
        assert shape.structural is False
        assert shape.capabilities == frozenset({"run"})


class TestZeroValues:
    """The value an untouched slot holds."""

    @_pytest.mark.parametrize(
        ("hint", "expected"),
        [
            (int, 0),
            (float, 0.0),
            (str, ""),
            (bool, False),
            (bytes, b""),
            (tuple[int, str], (0, "")),
            (tuple[int, ...], ()),
            (list[int], []),
            (dict[str, int], {}),
            (int | None, None),
            (_typing.Any, None),
            (Sized, None),
            (_datetime.date, None),
        ],
    )
    def test_zero_value(self, hint: object, expected: object) -> None:
        """Zero values per shape."""
        assert shapes.zero_value(shapes.shape_of(hint)) == expected

    def test_struct_zero_is_fresh_instance(self) -> None:
        """Each call allocates a new struct."""
        shape = shapes.shape_of(Node)
        first = shapes.zero_value(shape)
        assert first == Node()
        assert shapes.zero_value(shape) is not first

    def test_plain_class_needs_no_arguments(self) -> None:
        """Plain classes needing constructor arguments cannot be allocated."""
        with _pytest.raises(errors.ConfigTargetError) as exc_info:
            shapes.allocate(NeedsArgs)
        assert "Unable to allocate NeedsArgs" in str(exc_info.value)

    def test_dataclass_with_required_fields(self) -> None:
        """Required fields stay unset; defaults and factories are applied."""
        first = shapes.allocate(Required)
        assert isinstance(first, Required)
        assert not hasattr(first, "Host")
        assert first.Port == 80
        assert first.Ready is False
        assert first.Tags == []
        assert shapes.allocate(Required).Tags is not first.Tags

    def test_struct_zero_with_required_fields(self) -> None:
        """zero_value allocates required-field dataclasses too."""
        value = shapes.zero_value(shapes.shape_of(Required))
        value.Host = "h"
        assert value.Port == 80
