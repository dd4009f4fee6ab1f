"""
Decoders turning JSON, YAML and TOML text into configuration trees.

All decoders produce plain trees of dicts, lists and scalars with string
keys. JSON may contain // line comments and /* */ block comments, which
are stripped before parsing.

Files are dispatched on their extension:
- .json → decode_json
- .yaml, .yml → decode_yaml
- .toml → decode_toml

Any other extension is a FileTypeError; there is no fallback format.
"""

from __future__ import annotations

import collections.abc as _abc
import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import tomllib as _tomllib
import typing as _typing

import yaml as _yaml

import typedconf.dynamic as dynamic
import typedconf.errors as errors
import typedconf.settings as settings_module

_logger = _logging.getLogger(__name__)

Decoder: _typing.TypeAlias = _abc.Callable[..., dynamic.DynamicValue]


def _as_text(data: str | bytes, source: str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise errors.ConfigDecodeError(source, f"invalid UTF-8: {e}") from e


def strip_json_comments(text: str, source: str = "<string>") -> str:
    """
    Remove // and /* */ comments from JSON text.

    Comment markers inside string literals are left alone. Newlines inside
    block comments are kept so parser line numbers still match the input.

    Args:
        text: JSON text with comments.
        source: Name reported in errors.

    Returns:
        JSON text without comments.

    Raises:
        ConfigDecodeError: If a block comment is not terminated.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]

        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == "/" and i + 1 < n and text[i + 1] == "/":
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif ch == "/" and i + 1 < n and text[i + 1] == "*":
            end = text.find("*/", i + 2)
            if end == -1:
                raise errors.ConfigDecodeError(source, "unterminated /* comment")
            out.append("\n" * text.count("\n", i, end) or " ")
            i = end + 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def decode_json(
    data: str | bytes,
    *,
    comments: bool = True,
    source: str = "<json>",
) -> dynamic.DynamicValue:
    """
    Decode JSON text.

    Args:
        data: JSON text or UTF-8 bytes.
        comments: Strip comments before parsing.
        source: Name reported in errors.

    Raises:
        ConfigDecodeError: If the text is not valid JSON.
    """
    text = _as_text(data, source)
    if comments:
        text = strip_json_comments(text, source)
    try:
        return _json.loads(text)
    except _json.JSONDecodeError as e:
        raise errors.ConfigDecodeError(source, str(e)) from e


class _StringKeyLoader(_yaml.SafeLoader):
    """Safe loader that keys mappings on the scalar text as written."""

    def construct_mapping(
        self, node: _yaml.MappingNode, deep: bool = False
    ) -> dict[str, _typing.Any]:
        self.flatten_mapping(node)
        mapping: dict[str, _typing.Any] = {}
        for key_node, value_node in node.value:
            if not isinstance(key_node, _yaml.ScalarNode):
                raise _yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    "found a non-scalar key",
                    key_node.start_mark,
                )
            mapping[key_node.value] = self.construct_object(value_node, deep=deep)
        return mapping


def decode_yaml(data: str | bytes, *, source: str = "<yaml>") -> dynamic.DynamicValue:
    """
    Decode YAML text with the safe loader.

    Mapping keys are kept as the text written in the document, so `1`, `1.0`
    and `true` stay distinct keys "1", "1.0" and "true".

    Raises:
        ConfigDecodeError: If the text is not valid YAML.
    """
    try:
        return _yaml.load(data, Loader=_StringKeyLoader)  # noqa: S506
    except _yaml.YAMLError as e:
        raise errors.ConfigDecodeError(source, str(e)) from e


def decode_toml(data: str | bytes, *, source: str = "<toml>") -> dynamic.DynamicValue:
    """
    Decode TOML text.

    Raises:
        ConfigDecodeError: If the text is not valid TOML.
    """
    try:
        return _tomllib.loads(_as_text(data, source))
    except _tomllib.TOMLDecodeError as e:
        raise errors.ConfigDecodeError(source, str(e)) from e


DECODERS: dict[str, Decoder] = {
    ".json": decode_json,
    ".yaml": decode_yaml,
    ".yml": decode_yaml,
    ".toml": decode_toml,
}


def decoder_for(filename: str | _os.PathLike[str]) -> Decoder:
    """
    Pick the decoder for a file by its extension (case-insensitive).

    Raises:
        FileTypeError: If the extension is not supported.
    """
    extension = _pathlib.Path(filename).suffix.lower()
    decoder = DECODERS.get(extension)
    if decoder is None:
        raise errors.FileTypeError(filename)
    return decoder


def load_file(
    path: str | _os.PathLike[str],
    *,
    settings: settings_module.Settings | None = None,
) -> dynamic.DynamicValue:
    """
    Read and decode a configuration file.

    Args:
        path: File to load.
        settings: Library settings (encoding, JSON comments).

    Returns:
        The decoded tree.

    Raises:
        FileTypeError: If the extension is not supported.
        ConfigDecodeError: If the content cannot be decoded.
        OSError: If the file cannot be read.
    """
    if settings is None:
        settings = settings_module.Settings()

    file_path = _pathlib.Path(path)
    decoder = decoder_for(file_path)
    text = file_path.read_text(encoding=settings.encoding)

    if decoder is decode_json:
        data = decode_json(text, comments=settings.json_comments, source=str(file_path))
    else:
        data = decoder(text, source=str(file_path))

    _logger.debug("Loaded config file %s", file_path)
    return data
