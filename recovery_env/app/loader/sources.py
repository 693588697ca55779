"""
Readers for Terraform variable inputs.

Each reader turns one kind of input (HCL `.tfvars` text, `.tfvars.json`
text, `TF_VAR_*` environment variables) into a plain mapping of variable
name to raw value. No validation of the values happens here.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import hcl2
from lark.exceptions import LarkError

from recovery_env.app.errors import ConfigSyntaxError, UnsupportedFormatError

logger = logging.getLogger("recovery_env.sources")

TFVARS = "tfvars"
JSON = "json"

_SUFFIX_FORMATS = {
    ".tfvars": TFVARS,
    ".json": JSON,
}


# HCL string escapes plus the doubled template markers `$${` and `%%{`.
_HCL_ESCAPE = re.compile(
    r'\\(?P<char>["\\nrt])'
    r"|\\u(?P<u4>[0-9A-Fa-f]{4})"
    r"|\\U(?P<u8>[0-9A-Fa-f]{8})"
    r"|(?P<template>\$\$\{|%%\{)"
)

_SIMPLE_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}


def _unescape_match(match: re.Match) -> str:
    if match.group("char"):
        return _SIMPLE_ESCAPES[match.group("char")]
    if match.group("template"):
        return match.group("template")[1:]
    return chr(int(match.group("u4") or match.group("u8"), 16))


def _decode(value: Any) -> Any:
    """
    Undo HCL string escaping in parsed values.

    The parser hands string literals back with their escape sequences
    intact. Object keys written in quotes keep their quotes and are
    unquoted here; string values are never unquoted.
    """
    if isinstance(value, str):
        return _HCL_ESCAPE.sub(_unescape_match, value)
    if isinstance(value, dict):
        return {_unquote_key(k): _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def _unquote_key(key: Any) -> Any:
    if isinstance(key, str) and len(key) >= 2 and key[0] == key[-1] == '"':
        return key[1:-1]
    return key


def parse_tfvars(text: str, *, origin: str = "<tfvars>") -> Dict[str, Any]:
    """Parse HCL variable definitions into a dict."""
    if not text.endswith("\n"):
        text += "\n"
    try:
        parsed = hcl2.loads(text)
    except (LarkError, ValueError) as exc:
        raise ConfigSyntaxError(
            f"{origin}: invalid HCL: {exc}",
            field=origin,
        ) from exc
    return _decode(parsed)


def parse_tfvars_json(text: str, *, origin: str = "<tfvars.json>") -> Dict[str, Any]:
    """Parse JSON variable definitions into a dict."""
    try:
        parsed = json.loads(text)
    except ValueError as exc:
        raise ConfigSyntaxError(
            f"{origin}: invalid JSON: {exc}",
            field=origin,
        ) from exc
    if not isinstance(parsed, dict):
        raise ConfigSyntaxError(
            f"{origin}: top level must be an object, got {type(parsed).__name__}",
            field=origin,
        )
    return parsed


def parse_text(text: str, fmt: str, *, origin: str = "<text>") -> Dict[str, Any]:
    if fmt == TFVARS:
        return parse_tfvars(text, origin=origin)
    if fmt == JSON:
        return parse_tfvars_json(text, origin=origin)
    raise UnsupportedFormatError(
        f"Unsupported configuration format '{fmt}'. "
        f"Allowed values: {sorted(set(_SUFFIX_FORMATS.values()))}",
        field=origin,
    )


def format_for_path(path: Path) -> str:
    """Pick the parser for a file from its suffix (`.tfvars.json` is JSON)."""
    fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise UnsupportedFormatError(
            f"Unsupported configuration file suffix '{path.suffix}' for {path}. "
            f"Allowed suffixes: {sorted(_SUFFIX_FORMATS)}",
            field=str(path),
        )
    return fmt


def read_file(path: Path) -> Dict[str, Any]:
    fmt = format_for_path(path)
    text = path.read_text(encoding="utf-8")
    logger.debug(
        "config_file_read",
        extra={"path": str(path), "format": fmt},
    )
    return parse_text(text, fmt, origin=str(path))


def read_environment(
    environ: Mapping[str, str],
    names: Iterable[str],
    *,
    complex_names: Iterable[str] = (),
    prefix: str = "TF_VAR_",
) -> Dict[str, Any]:
    """
    Collect `<prefix><name>` values from an environment mapping.

    Values of complex variables are parsed as HCL expressions, the way
    Terraform treats TF_VAR_* values of list and object type.
    """
    complex_set = set(complex_names)
    values: Dict[str, Any] = {}

    for name in names:
        key = f"{prefix}{name}"
        if key not in environ:
            continue
        raw = environ[key]
        if name in complex_set:
            values[name] = parse_tfvars(f"{name} = {raw}", origin=key)[name]
        else:
            values[name] = raw

    return values
