"""
typedconf - typed configuration binding

Loads layered JSON, YAML and TOML configuration, deep-merges it, and
projects the result onto dataclasses, pydantic models, lists and dicts.
Polymorphic slots are filled from a per-config registry of named types.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("typedconf")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from typedconf.config import Config  # noqa: E402
from typedconf.errors import (  # noqa: E402
    BindInternalError,
    CapabilityMismatchError,
    ConfigDecodeError,
    ConfigError,
    ConfigPathError,
    ConfigTargetError,
    ConfigValueError,
    FileTypeError,
    IncompatibleScalarError,
    InvalidTypeTagError,
    MissingTypeTagError,
    ProviderError,
    ShapeMismatchError,
    UnknownFieldError,
    UnknownTypeError,
    UnwritableFieldError,
)
from typedconf.merging import merge, merge_all  # noqa: E402
from typedconf.registry import TypeRegistry  # noqa: E402
from typedconf.settings import Settings  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Config",
    "Settings",
    "TypeRegistry",
    "merge",
    "merge_all",
    "ConfigError",
    "ConfigPathError",
    "ConfigValueError",
    "ShapeMismatchError",
    "UnknownFieldError",
    "UnwritableFieldError",
    "MissingTypeTagError",
    "InvalidTypeTagError",
    "UnknownTypeError",
    "CapabilityMismatchError",
    "IncompatibleScalarError",
    "ConfigTargetError",
    "ProviderError",
    "FileTypeError",
    "ConfigDecodeError",
    "BindInternalError",
]
