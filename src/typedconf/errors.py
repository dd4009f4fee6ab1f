"""
Exception hierarchy for typedconf.

Expected failures derive from ConfigError:

- ConfigPathError: a dotted path cannot be traversed or created
- ConfigValueError: the configuration does not fit the target at a path
  (one subclass per condition, so callers can catch precisely)
- ConfigTargetError: the caller handed in something that cannot be bound
- ProviderError: a factory with the wrong shape was registered
- FileTypeError: a configuration file with an unsupported extension
- ConfigDecodeError: a decoder rejected the configuration text

BindInternalError is not a ConfigError. It signals a broken invariant
inside the bind walk, not bad configuration data.
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing


class ConfigError(Exception):
    """Base class for all expected typedconf errors."""

    pass


class ConfigPathError(ConfigError):
    """A path which cannot be used to get or set a configuration value."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path!r} is not a valid path: {message}")


# =============================================================================
# Value errors (source shape does not fit target shape)
# =============================================================================


class ConfigValueError(ConfigError):
    """A configuration value that cannot be used to configure its target."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path.strip(".")
        self.message = message
        super().__init__(
            f"{self.path!r} points to an inappropriate configuration value: {message}"
        )


class ShapeMismatchError(ConfigValueError):
    """A list or map was given where the target cannot hold one."""

    pass


class UnknownFieldError(ConfigValueError):
    """A map key has no matching field on the target struct."""

    pass


class UnwritableFieldError(ConfigValueError):
    """A map key names a field that cannot be assigned (private or frozen)."""

    pass


class MissingTypeTagError(ConfigValueError):
    """An interface slot was configured with a map lacking the "type" key."""

    pass


class InvalidTypeTagError(ConfigValueError):
    """The "type" key of an interface map is not a string."""

    pass


class UnknownTypeError(ConfigValueError):
    """The "type" key names a type that was never registered."""

    pass


class CapabilityMismatchError(ConfigValueError):
    """A constructed instance does not satisfy the interface of its slot."""

    pass


class IncompatibleScalarError(ConfigValueError):
    """A scalar cannot be converted to the target type."""

    pass


# =============================================================================
# Caller errors
# =============================================================================


class ConfigTargetError(ConfigError):
    """A target value that cannot be configured."""

    def __init__(self, target: _typing.Any, message: str) -> None:
        self.target = target
        super().__init__(message)


class ProviderError(ConfigError):
    """A provider (factory) that is not appropriate for a registered type."""

    def __init__(self, provider: _typing.Any, message: str) -> None:
        self.provider = provider
        super().__init__(message)


class FileTypeError(ConfigError):
    """The name of a file whose format is not supported."""

    def __init__(self, filename: str | _pathlib.Path) -> None:
        self.filename = str(filename)
        self.extension = _pathlib.Path(filename).suffix
        super().__init__(f"File format not supported: {self.extension}")


class ConfigDecodeError(ConfigError):
    """Error decoding configuration text."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"Error in config {source}: {message}")


# =============================================================================
# Unrecoverable
# =============================================================================


class BindInternalError(RuntimeError):
    """An unexpected failure inside the bind walk (not a data error)."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path.strip(".")
        super().__init__(f"internal error while binding {self.path!r}: {message}")
