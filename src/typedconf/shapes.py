"""
Target shapes: what a typed slot can hold, derived from its type hint.

The bind engine never inspects targets ad hoc. Every type hint is first
reduced to one variant of a closed set:

- ScalarShape: bool, int, float, str, bytes, enums and other leaf classes
- OptionalShape: `T | None`
- StructShape: dataclasses, pydantic models and annotated classes
- ArrayShape: fixed-length tuples such as `tuple[int, int, int]`
- ListShape: `list[T]`, `tuple[T, ...]` and abstract sequences
- MappingShape: `dict[K, V]` and abstract mappings with scalar keys
- InterfaceShape: Protocols (checked structurally) and abstract classes
  (checked with isinstance)
- OpaqueShape: `Any`, `object` and anything accepting raw config values

Example:
    >>> shape_of(dict[str, int]).value
    ScalarShape(hint=<class 'int'>, kind=<class 'int'>)
    >>> shape_of(tuple[int, ...]).container
    <class 'tuple'>
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import enum as _enum
import inspect as _inspect
import types as _types
import typing as _typing

import pydantic as _pydantic

import typedconf.errors as errors

_LEAF_TYPES = (bool, int, float, str, bytes)


def describe(hint: _typing.Any) -> str:
    """Readable name of a type hint for error messages."""
    if isinstance(hint, type) and not _typing.get_args(hint):
        return hint.__name__
    return repr(hint).replace("typing.", "")


# =============================================================================
# Shape variants
# =============================================================================


@_dataclasses.dataclass(frozen=True, slots=True)
class FieldSpec:
    """One settable field of a struct."""

    name: str
    hint: _typing.Any
    writable: bool


@_dataclasses.dataclass(frozen=True, slots=True)
class TargetShape:
    """Base class for shape variants."""

    hint: _typing.Any

    def describe(self) -> str:
        return describe(self.hint)


@_dataclasses.dataclass(frozen=True, slots=True)
class ScalarShape(TargetShape):
    """A leaf value converted with the scalar rules."""

    kind: type


@_dataclasses.dataclass(frozen=True, slots=True)
class OptionalShape(TargetShape):
    """A nullable slot, allocated when something is written through it."""

    inner: TargetShape


@_dataclasses.dataclass(frozen=True, slots=True)
class StructShape(TargetShape):
    """A class whose fields are configured by name."""

    cls: type
    fields: _abc.Mapping[str, FieldSpec]


@_dataclasses.dataclass(frozen=True, slots=True)
class ArrayShape(TargetShape):
    """A fixed-length tuple; one shape per position."""

    elements: tuple[TargetShape, ...]


@_dataclasses.dataclass(frozen=True, slots=True)
class ListShape(TargetShape):
    """A growable sequence of one element shape."""

    element: TargetShape
    container: type


@_dataclasses.dataclass(frozen=True, slots=True)
class MappingShape(TargetShape):
    """An associative container with scalar keys."""

    key: ScalarShape
    value: TargetShape


@_dataclasses.dataclass(frozen=True, slots=True)
class InterfaceShape(TargetShape):
    """A polymorphic slot filled by a registered factory."""

    interface: type
    capabilities: frozenset[str]
    structural: bool

    def satisfied_by(self, instance: _typing.Any) -> bool:
        """
        Check whether an instance provides every capability.

        Protocols are checked member by member (methods must be callable);
        abstract classes are checked nominally.
        """
        if not self.structural:
            return isinstance(instance, self.interface)
        for name in self.capabilities:
            if not hasattr(instance, name):
                return False
            expected = getattr(self.interface, name, None)
            if callable(expected) and not callable(getattr(instance, name)):
                return False
        return True


@_dataclasses.dataclass(frozen=True, slots=True)
class OpaqueShape(TargetShape):
    """A slot that takes configuration values verbatim."""

    pass


# =============================================================================
# Analysis
# =============================================================================

_cache: dict[_typing.Any, TargetShape] = {}


def shape_of(hint: _typing.Any) -> TargetShape:
    """
    Reduce a type hint to its target shape.

    Results are cached per hint. Struct field shapes are resolved lazily,
    so self-referencing classes are fine.

    Args:
        hint: A type or typing construct.

    Returns:
        The shape variant describing the hint.

    Raises:
        ConfigTargetError: If the hint cannot be bound to.
    """
    try:
        return _cache[hint]
    except KeyError:
        pass
    except TypeError:
        # Unhashable hint; analyse without caching
        return _analyze(hint)
    shape = _analyze(hint)
    _cache[hint] = shape
    return shape


def _analyze(hint: _typing.Any) -> TargetShape:
    if hint is _typing.Any or hint is object or hint is None or hint is type(None):
        return OpaqueShape(hint)
    if isinstance(hint, _typing.TypeVar):
        return OpaqueShape(hint)

    # NewType("Port", int) behaves like int
    supertype = getattr(hint, "__supertype__", None)
    if supertype is not None:
        return shape_of(supertype)

    origin = _typing.get_origin(hint)
    args = _typing.get_args(hint)

    if origin is _typing.Annotated:
        return shape_of(args[0])
    if origin is _typing.Union or origin is _types.UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            return OptionalShape(hint, shape_of(members[0]))
        return OpaqueShape(hint)
    if origin is _typing.Literal:
        return OpaqueShape(hint)

    if origin is tuple or hint is tuple:
        if not args:
            return ListShape(hint, OpaqueShape(_typing.Any), tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return ListShape(hint, shape_of(args[0]), tuple)
        return ArrayShape(hint, tuple(shape_of(a) for a in args))

    if origin in (list, _abc.Sequence, _abc.MutableSequence) or hint is list:
        element = shape_of(args[0]) if args else OpaqueShape(_typing.Any)
        return ListShape(hint, element, list)

    if origin in (dict, _abc.Mapping, _abc.MutableMapping) or hint is dict:
        key = shape_of(args[0]) if args else ScalarShape(str, str)
        if not isinstance(key, ScalarShape):
            raise errors.ConfigTargetError(
                hint, f"Unable to configure {describe(hint)}: map keys must be scalars"
            )
        value = shape_of(args[1]) if args else OpaqueShape(_typing.Any)
        return MappingShape(hint, key, value)

    if origin is not None or not isinstance(hint, type):
        raise errors.ConfigTargetError(
            hint, f"Unable to configure unsupported type {describe(hint)}"
        )

    if issubclass(hint, _LEAF_TYPES) or issubclass(hint, _enum.Enum):
        return ScalarShape(hint, hint)

    if getattr(hint, "_is_protocol", False):
        capabilities = _protocol_members(hint)
        if not capabilities:
            return OpaqueShape(hint)
        return InterfaceShape(hint, hint, capabilities, True)

    if _inspect.isabstract(hint):
        return InterfaceShape(hint, hint, frozenset(hint.__abstractmethods__), False)

    struct = struct_shape_of(hint)
    if not struct.fields and not _is_record_class(hint):
        # A leaf class such as datetime.date: accepts instances of itself
        return ScalarShape(hint, hint)
    return struct


def _protocol_members(proto: type) -> frozenset[str]:
    members: set[str] = set()
    for base in proto.__mro__:
        if base in (object, _typing.Protocol, _typing.Generic):
            continue
        if not getattr(base, "_is_protocol", False):
            continue
        names = set(vars(base)) | set(_inspect.get_annotations(base))
        members.update(n for n in names if not n.startswith("_"))
    return frozenset(members)


def _is_record_class(cls: type) -> bool:
    return _dataclasses.is_dataclass(cls) or issubclass(cls, _pydantic.BaseModel)


_struct_cache: dict[type, StructShape] = {}


def struct_shape_of(cls: type) -> StructShape:
    """
    Struct shape of a class, regardless of how shape_of() classifies it.

    Used for instances produced by factories, which are always configured
    field by field.
    """
    shape = _struct_cache.get(cls)
    if shape is None:
        shape = StructShape(cls, cls, _field_table(cls))
        _struct_cache[cls] = shape
    return shape


def _type_hints(cls: type) -> dict[str, _typing.Any]:
    try:
        return _typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise errors.ConfigTargetError(
            cls, f"Unable to resolve field types of {cls.__name__}: {e}"
        ) from e


def _field_table(cls: type) -> dict[str, FieldSpec]:
    """Build the name -> FieldSpec table of a class."""
    if _dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        return {
            f.name: FieldSpec(
                f.name,
                hints.get(f.name, _typing.Any),
                not frozen and not f.name.startswith("_"),
            )
            for f in _dataclasses.fields(cls)
        }

    if issubclass(cls, _pydantic.BaseModel):
        frozen = bool(cls.model_config.get("frozen"))
        table = {
            name: FieldSpec(
                name,
                info.annotation if info.annotation is not None else _typing.Any,
                not frozen and not info.frozen,
            )
            for name, info in cls.model_fields.items()
        }
        for name in cls.__private_attributes__:
            table[name] = FieldSpec(name, _typing.Any, False)
        return table

    table = {}
    for name, hint in _type_hints(cls).items():
        if hint is _typing.ClassVar or _typing.get_origin(hint) is _typing.ClassVar:
            continue
        table[name] = FieldSpec(name, hint, not name.startswith("_"))
    return table


# =============================================================================
# Zero values
# =============================================================================


def _has_required_fields(cls: type) -> bool:
    return any(
        f.init
        and f.default is _dataclasses.MISSING
        and f.default_factory is _dataclasses.MISSING
        for f in _dataclasses.fields(cls)
    )


def _construct_dataclass(cls: type) -> _typing.Any:
    """
    Build a dataclass without calling __init__.

    Fields with a default or default_factory get it; required fields stay
    unset until the bind writes them. __post_init__ does not run.
    """
    instance = cls.__new__(cls)
    for f in _dataclasses.fields(cls):
        if f.default is not _dataclasses.MISSING:
            object.__setattr__(instance, f.name, f.default)
        elif f.default_factory is not _dataclasses.MISSING:
            object.__setattr__(instance, f.name, f.default_factory())
    return instance


def allocate(cls: type) -> _typing.Any:
    """
    Create an empty instance of a struct class.

    Dataclasses and pydantic models with required fields are built without
    running their constructor, so the bind can supply those fields.

    Raises:
        ConfigTargetError: If any other class cannot be built without arguments.
    """
    if _dataclasses.is_dataclass(cls) and _has_required_fields(cls):
        return _construct_dataclass(cls)
    try:
        return cls()
    except _pydantic.ValidationError:
        # Required fields without defaults: build unvalidated, fields fill later
        return cls.model_construct()  # type: ignore[attr-defined]
    except TypeError as e:
        raise errors.ConfigTargetError(
            cls, f"Unable to allocate {cls.__name__}: {e}"
        ) from e


def zero_value(shape: TargetShape) -> _typing.Any:
    """
    The value an untouched slot of this shape holds.

    Scalars get their type's empty value, containers an empty container,
    structs a fresh instance; optional, interface and opaque slots None.
    """
    if isinstance(shape, ScalarShape):
        kind = shape.kind
        if issubclass(kind, _LEAF_TYPES) and not issubclass(kind, _enum.Enum):
            return kind()
        return None
    if isinstance(shape, StructShape):
        return allocate(shape.cls)
    if isinstance(shape, ArrayShape):
        return tuple(zero_value(e) for e in shape.elements)
    if isinstance(shape, ListShape):
        return shape.container()
    if isinstance(shape, MappingShape):
        return {}
    return None
