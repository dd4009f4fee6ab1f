"""
Config: a configuration tree that can be queried and used to configure
typed objects.

A configuration is a hierarchy of maps and lists. Values are addressed
with dotted paths: "Path.To.Xyz" corresponds to config["Path"]["To"]["Xyz"]
and "Path.2.Xyz" to config["Path"][2]["Xyz"].

Configuration can be loaded from one or more JSON, YAML or TOML files, or
given directly as data. Sources loaded later are deep-merged over earlier
ones (see typedconf.merging).

Example:
    >>> config = Config()
    >>> config.load_json('{"Version": "1.0", "Params": {"DataPath": "/data"}}')
    >>> @dataclasses.dataclass
    ... class App:
    ...     Version: str = ""
    ...     Params: dict[str, typing.Any] = dataclasses.field(default_factory=dict)
    >>> app = App()
    >>> config.configure(app)
    >>> app.Params["DataPath"]
    '/data'
"""

from __future__ import annotations

import os as _os
import typing as _typing

import typedconf.binder as binder
import typedconf.dynamic as dynamic
import typedconf.errors as errors
import typedconf.loaders as loaders
import typedconf.merging as merging
import typedconf.paths as paths
import typedconf.registry as registry
import typedconf.scalars as scalars
import typedconf.settings as settings_module
import typedconf.shapes as shapes

_T = _typing.TypeVar("_T")

MISSING = paths.MISSING


class Config:
    """
    A configuration tree with its own type registry.

    The registry and tree belong to this instance only. Config is not
    thread-safe; serialise calls if an instance is shared.
    """

    def __init__(self, settings: settings_module.Settings | None = None) -> None:
        """
        Create an empty configuration.

        Args:
            settings: Library settings. Defaults to Settings(), which reads
                TYPEDCONF_* environment variables.
        """
        self._settings = settings if settings is not None else settings_module.Settings()
        self._data: dynamic.DynamicValue = None
        self._registry = registry.TypeRegistry()
        self._binder = binder.Binder(self._registry)

    @property
    def data(self) -> dynamic.DynamicValue:
        """The complete configuration tree (None if nothing was loaded)."""
        return self._data

    @property
    def registry(self) -> registry.TypeRegistry:
        """Type registry used to construct interface-typed values."""
        return self._registry

    @property
    def settings(self) -> settings_module.Settings:
        return self._settings

    # =========================================================================
    # Reading values
    # =========================================================================

    def get(self, path: str, default: _typing.Any = None) -> _typing.Any:
        """
        Get the value at a dotted path.

        If any part of the path does not resolve (missing key, index out of
        range, or a scalar where a map or list is needed), the default is
        returned.

        If a default is given, the value is converted to the default's type
        using the scalar conversion rules, and the default is returned when
        no conversion exists.

        Args:
            path: Dotted path, e.g. "A.B.0".
            default: Value returned when the path does not resolve.

        Returns:
            The value at the path, or the default.
        """
        value = paths.get_path(self._data, path)
        if value is MISSING:
            return default
        if default is None:
            return value
        if isinstance(value, type(default)) and not (
            isinstance(value, bool) and type(default) is not bool
        ):
            return value
        try:
            return scalars.convert(value, type(default))
        except scalars.NotConvertibleError:
            return default

    def get_string(self, path: str, default: str = "") -> str:
        """Get a string value; see get()."""
        return _typing.cast(str, self.get(path, default))

    def get_int(self, path: str, default: int = 0) -> int:
        """Get an int value; see get()."""
        return _typing.cast(int, self.get(path, default))

    def get_float(self, path: str, default: float = 0.0) -> float:
        """Get a float value; see get()."""
        return _typing.cast(float, self.get(path, default))

    def get_bool(self, path: str, default: bool = False) -> bool:
        """Get a bool value; see get()."""
        return _typing.cast(bool, self.get(path, default))

    # =========================================================================
    # Writing values
    # =========================================================================

    def set(self, path: str, value: _typing.Any) -> None:
        """
        Set the value at a dotted path.

        An existing value is overwritten. Missing maps along the path are
        created, so setting "Path.To.Xyz" creates config["Path"]["To"] if
        needed.

        Raises:
            ConfigPathError: If the path walks through a scalar, or a list
                index is invalid.
        """
        self._data = paths.set_path(self._data, path, value)

    def set_data(self, *data: dynamic.DynamicValue) -> None:
        """
        Replace the configuration with the merge of the given trees.

        Trees are merged in order (later wins). Existing data is discarded.
        """
        self._data = merging.merge_all(*data)

    def load(self, *files: str | _os.PathLike[str]) -> None:
        """
        Load and merge configuration files.

        Formats are chosen by extension (.json, .yaml, .yml, .toml). Files
        are merged over the existing data in order.

        Raises:
            FileTypeError: If an extension is not supported.
            ConfigDecodeError: If a file cannot be parsed.
            OSError: If a file cannot be read.
        """
        for file in files:
            data = loaders.load_file(file, settings=self._settings)
            self._data = merging.merge(self._data, data)

    def load_json(self, *documents: str | bytes) -> None:
        """
        Parse and merge JSON documents over the existing data.

        Raises:
            ConfigDecodeError: If a document cannot be parsed.
        """
        for document in documents:
            data = loaders.decode_json(document, comments=self._settings.json_comments)
            self._data = merging.merge(self._data, data)

    # =========================================================================
    # Configuring objects
    # =========================================================================

    def register(self, name: str, factory: registry.Factory) -> None:
        """
        Associate a type name with a factory creating instances of it.

        Configuring an interface-typed slot uses the map's "type" key to
        choose the factory.

        Raises:
            ProviderError: If the factory is not a zero-argument callable
                with a single output.
        """
        self._registry.register(name, factory)

    def _subtree(self, path: str | None) -> tuple[dynamic.DynamicValue, str]:
        if path is None:
            return self._data, ""
        value = paths.get_path(self._data, path)
        if value is MISSING or value is None:
            raise errors.ConfigPathError(path, "no configuration value was found")
        return value, path

    def configure(
        self,
        target: _typing.Any,
        path: str | None = None,
        *,
        hint: _typing.Any = None,
    ) -> None:
        """
        Configure an object in place.

        Map keys are assigned to struct fields of the same name; nested
        structs, lists and dicts are configured recursively. Interface-typed
        fields are built from the registered type named by the map's "type"
        key.

        Args:
            target: The object to configure: a struct instance, list or dict.
            path: Configure from the subtree at this path instead of the
                whole configuration.
            hint: Type hint of the target, e.g. list[Server] for a list.

        Raises:
            ConfigTargetError: If the target cannot be configured in place.
            ConfigPathError: If the path has no value.
            ConfigValueError: If the configuration does not fit the target.
        """
        source, where = self._subtree(path)
        self._binder.configure(target, source, where, hint)

    def bind(
        self,
        hint: type[_T] | _typing.Any,
        path: str | None = None,
        *,
        current: _typing.Any = MISSING,
    ) -> _typing.Any:
        """
        Build a value of the hinted type from the configuration.

        Unlike configure(), this works for immutable and interface types.

        Args:
            hint: Type hint of the value to build.
            path: Subtree to build from (whole configuration if None).
            current: Starting value. Defaults to the type's empty value; an
                existing instance is re-bound in place.

        Returns:
            The built value.

        Raises:
            ConfigPathError: If the path has no value.
            ConfigValueError: If the configuration does not fit the type.
        """
        source, where = self._subtree(path)
        shape = shapes.shape_of(hint)
        if current is MISSING:
            current = shapes.zero_value(shape)
        return self._binder.bind(shape, current, source, where)
