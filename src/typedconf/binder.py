"""
The bind engine: projects a configuration tree onto typed Python values.

Dispatch looks at both sides. The target is reduced to a shape (see
typedconf.shapes) and the source to a dynamic Kind:

1. Optional slots are unwrapped (allocating on demand). Interface and
   opaque slots that already hold an instance are re-bound in place.
2. Lists go to the sequence handler.
3. Maps go to the interface, struct or map handler.
4. Everything else, including None, goes to the scalar handler.

Binding is fail-fast: the first error aborts the walk and values written
before it stay written. A struct field that needs a new instance (an empty
optional struct or interface slot) receives it before it is filled, so a
failure inside leaves the partly filled instance in place.
"""

from __future__ import annotations

import enum as _enum
import logging as _logging
import typing as _typing

import pydantic as _pydantic

import typedconf.dynamic as dynamic
import typedconf.errors as errors
import typedconf.registry as registry
import typedconf.scalars as scalars
import typedconf.shapes as shapes

_logger = _logging.getLogger(__name__)

# Map key naming the concrete type of an interface slot; never a field name
TYPE_KEY = "type"

_MISSING = object()

# Values that cannot be updated in place
_IMMUTABLE = (bool, int, float, complex, str, bytes, tuple, frozenset, _enum.Enum)

# Low-level failures that indicate a bug rather than bad data
_INTERNAL_ERRORS = (AttributeError, TypeError, IndexError, KeyError, RecursionError)


def _join(path: str, key: _typing.Any) -> str:
    return f"{path}.{key}" if path else str(key)


def _assign(target: _typing.Any, name: str, value: _typing.Any, path: str) -> None:
    try:
        setattr(target, name, value)
    except _pydantic.ValidationError as e:
        # Models with validate_assignment may still reject the value
        raise errors.IncompatibleScalarError(path, str(e)) from e


class Binder:
    """
    Binds configuration trees onto typed targets.

    The binder holds no state besides the registry used to construct
    instances for interface slots.
    """

    def __init__(self, types: registry.TypeRegistry) -> None:
        self._registry = types

    def configure(
        self,
        target: _typing.Any,
        source: dynamic.DynamicValue,
        path: str = "",
        hint: _typing.Any = None,
    ) -> None:
        """
        Configure a mutable target in place.

        Args:
            target: A struct instance, list or dict.
            source: The configuration subtree.
            path: Path of the subtree, for error messages.
            hint: Type hint of the target. Defaults to type(target); pass
                one to give element types to plain lists and dicts.

        Raises:
            ConfigTargetError: If the target cannot be updated in place.
            ConfigValueError: If the configuration does not fit the target.
        """
        if target is None:
            raise errors.ConfigTargetError(target, "Unable to configure None")
        if isinstance(target, type):
            raise errors.ConfigTargetError(
                target, f"Unable to configure the class {target.__name__}; pass an instance"
            )
        if isinstance(target, _IMMUTABLE):
            raise errors.ConfigTargetError(
                target, f"Unable to configure an immutable {type(target).__name__}"
            )

        shape = shapes.shape_of(hint if hint is not None else type(target))
        if isinstance(shape, shapes.OptionalShape):
            shape = shape.inner
        self.bind(shape, target, source, path)

    def bind(
        self,
        target: shapes.TargetShape | _typing.Any,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str = "",
    ) -> _typing.Any:
        """
        Bind a subtree onto a slot and return the slot's new value.

        Structs, lists and dicts held in `current` are updated in place and
        returned; other values are returned fresh.

        Args:
            target: Shape of the slot, or a type hint to derive it from.
            current: The slot's current value.
            source: The configuration subtree.
            path: Path of the subtree, for error messages.

        Raises:
            ConfigValueError: If the configuration does not fit the target.
            BindInternalError: If the walk fails for a reason other than
                bad configuration.
        """
        shape = target if isinstance(target, shapes.TargetShape) else shapes.shape_of(target)
        try:
            return self._bind(shape, current, source, path)
        except errors.ConfigError:
            raise
        except _INTERNAL_ERRORS as e:
            raise errors.BindInternalError(path, f"{type(e).__name__}: {e}") from e

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _bind(
        self,
        shape: shapes.TargetShape,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        if isinstance(shape, shapes.OptionalShape):
            if source is None:
                return None
            if current is None:
                current = shapes.zero_value(shape.inner)
            return self._bind(shape.inner, current, source, path)

        if current is not None:
            concrete = self._populated_shape(shape, current)
            if concrete is not None:
                return self._bind(concrete, current, source, path)

        kind = dynamic.kind_of(source)
        if kind is dynamic.Kind.SEQUENCE:
            return self._bind_sequence(shape, current, source, path)
        if kind is dynamic.Kind.MAPPING:
            if isinstance(shape, shapes.InterfaceShape):
                return self._bind_interface(shape, source, path)
            if isinstance(shape, shapes.StructShape):
                return self._bind_struct(shape, current, source, path)
            if isinstance(shape, shapes.MappingShape):
                return self._bind_map(shape, current, source, path)
            if isinstance(shape, shapes.OpaqueShape):
                return dynamic.copy_tree(source)
            raise errors.ShapeMismatchError(
                path, f"a map cannot be used to configure {shape.describe()}"
            )
        return self._bind_scalar(shape, current, source, path)

    def _populated_shape(
        self,
        shape: shapes.TargetShape,
        current: _typing.Any,
    ) -> shapes.StructShape | None:
        """Shape to re-bind an interface or opaque slot that holds an instance."""
        if isinstance(shape, shapes.InterfaceShape):
            return shapes.struct_shape_of(type(current))
        if isinstance(shape, shapes.OpaqueShape):
            concrete = shapes.shape_of(type(current))
            if isinstance(concrete, shapes.StructShape):
                return concrete
        return None

    # =========================================================================
    # Handlers
    # =========================================================================

    def _bind_sequence(
        self,
        shape: shapes.TargetShape,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        if isinstance(shape, shapes.OpaqueShape):
            return dynamic.copy_tree(source)

        if isinstance(shape, shapes.ArrayShape):
            size = len(shape.elements)
            if isinstance(current, (tuple, list)) and len(current) == size:
                values = list(current)
            else:
                values = [shapes.zero_value(e) for e in shape.elements]
            count = min(len(source), size)
            for i in range(count):
                values[i] = self._bind(shape.elements[i], values[i], source[i], _join(path, i))
            # Positions without source values are reset; extra source items are dropped
            for i in range(count, size):
                values[i] = shapes.zero_value(shape.elements[i])
            return tuple(values)

        if isinstance(shape, shapes.ListShape):
            if shape.container is list and isinstance(current, list):
                values = current
            else:
                values = list(current) if isinstance(current, (tuple, list)) else []
            for i, item in enumerate(source):
                item_path = _join(path, i)
                if i < len(values):
                    values[i] = self._bind(shape.element, values[i], item, item_path)
                else:
                    zero = shapes.zero_value(shape.element)
                    values.append(self._bind(shape.element, zero, item, item_path))
            del values[len(source):]
            return values if shape.container is list else shape.container(values)

        raise errors.ShapeMismatchError(
            path, f"a list cannot be used to configure {shape.describe()}"
        )

    def _bind_struct(
        self,
        shape: shapes.StructShape,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        if current is None:
            current = shapes.allocate(shape.cls)

        for key, value in source.items():
            if key == TYPE_KEY:
                continue
            field_path = _join(path, key)
            spec = shape.fields.get(key) if isinstance(key, str) else None
            if spec is None:
                raise errors.UnknownFieldError(
                    field_path, f"field {key} not found in struct {shape.describe()}"
                )
            if not spec.writable:
                raise errors.UnwritableFieldError(field_path, f"field {key} cannot be set")

            field_shape = shapes.shape_of(spec.hint)
            existing = getattr(current, key, _MISSING)
            if existing is _MISSING:
                existing = shapes.zero_value(field_shape)
            # New structs and interface instances are stored before they are filled
            prepared = self._prepare(field_shape, existing, value, field_path)
            if prepared is not existing:
                _assign(current, key, prepared, field_path)
            bound = self._bind(field_shape, prepared, value, field_path)
            _assign(current, key, bound, field_path)

        return current

    def _prepare(
        self,
        shape: shapes.TargetShape,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        """Allocate or construct the instance an empty slot will be filled into."""
        if current is not None or dynamic.kind_of(source) is not dynamic.Kind.MAPPING:
            return current
        if isinstance(shape, shapes.OptionalShape):
            shape = shape.inner
            if isinstance(shape, shapes.StructShape):
                return shapes.allocate(shape.cls)
        if isinstance(shape, shapes.InterfaceShape):
            return self._construct(shape, source, path)
        return current

    def _bind_interface(
        self,
        shape: shapes.InterfaceShape,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        instance = self._construct(shape, source, path)
        concrete = shapes.struct_shape_of(type(instance))
        return self._bind_struct(concrete, instance, source, path)

    def _construct(
        self,
        shape: shapes.InterfaceShape,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        """Build the registered type named by the map's "type" key."""
        if TYPE_KEY not in source:
            raise errors.MissingTypeTagError(path, "missing the type element")
        name = source[TYPE_KEY]
        if not isinstance(name, str):
            raise errors.InvalidTypeTagError(path, "type must be a string")

        factory = self._registry.get_or_raise(name, path)
        instance = factory()
        _logger.debug(
            "Constructed %s for type %r at %r", type(instance).__name__, name, path
        )
        if not shape.satisfied_by(instance):
            raise errors.CapabilityMismatchError(
                path, f"{type(instance).__name__} does not implement {shape.describe()}"
            )
        return instance

    def _bind_map(
        self,
        shape: shapes.MappingShape,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        result = current if isinstance(current, dict) else {}

        for key, value in source.items():
            item_path = _join(path, key)
            item = self._bind(shape.value, shapes.zero_value(shape.value), value, item_path)
            try:
                converted = scalars.convert_key(key, shape.key.kind)
            except scalars.NotConvertibleError as e:
                raise errors.IncompatibleScalarError(item_path, f"invalid key: {e}") from e
            result[converted] = item

        return result

    def _bind_scalar(
        self,
        shape: shapes.TargetShape,
        current: _typing.Any,
        source: dynamic.DynamicValue,
        path: str,
    ) -> _typing.Any:
        if source is None:
            return self._reset(shape, current)

        if isinstance(shape, shapes.OpaqueShape):
            return dynamic.copy_tree(source)

        if isinstance(shape, shapes.ScalarShape):
            try:
                return scalars.convert(source, shape.kind)
            except scalars.NotConvertibleError as e:
                raise errors.IncompatibleScalarError(path, str(e)) from e

        raise errors.IncompatibleScalarError(
            path,
            f"{dynamic.type_name(source)} cannot be used to configure {shape.describe()}",
        )

    def _reset(self, shape: shapes.TargetShape, current: _typing.Any) -> _typing.Any:
        """Apply a null: empty containers, clear slots, keep scalars and structs."""
        if isinstance(shape, shapes.ListShape):
            if shape.container is list and isinstance(current, list):
                current.clear()
                return current
            return shape.container()
        if isinstance(shape, shapes.MappingShape):
            if isinstance(current, dict):
                current.clear()
                return current
            return {}
        if isinstance(shape, shapes.ArrayShape):
            return shapes.zero_value(shape)
        if isinstance(shape, (shapes.InterfaceShape, shapes.OpaqueShape)):
            return None
        # Nulls never erase scalar values or defaults
        return current
