from __future__ import annotations

import json
from typing import Any, Optional

import yaml

from lingua.lingua_datatypes import Obj, NumberObj, StringObj, BooleanObj, NullObj, ListObj


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return data.decode('utf-8', errors='replace')
    return data


def to_builtin(value: Any) -> Any:
    """Convert runtime values into plain Python data; other values become their displayed form."""
    match value:
        case NullObj():
            return None
        case BooleanObj():
            return value.value
        case NumberObj():
            v = value.value
            return int(v) if v.is_integer() else v
        case StringObj():
            return value.value
        case ListObj():
            return [to_builtin(x) for x in value.items]
        case Obj():
            return str(value)
        case list() | tuple():
            return [to_builtin(x) for x in value]
    return value


def detect_format(path_hint: Optional[str] = None, data_hint: Optional[str] = None) -> Optional[str]:
    """
    Returns 'json' or 'yaml'. Uses the file suffix first; falls back to
    simple data sniffing if provided.
    """
    hint = (path_hint or "").lower()
    if hint.endswith('.json'):
        return 'json'
    if hint.endswith(('.yaml', '.yml')):
        return 'yaml'
    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            return 'json'
        return 'yaml'
    return None


# --------------------------
# Public API
# --------------------------

def deserialize(data: bytes | bytearray | str,
                *,
                fmt: Optional[str] = None,
                path_hint: Optional[str] = None) -> Any:
    """
    Decode an AST document into plain Python structures.
    Supported fmt: 'json', 'yaml'. If fmt is None, uses path_hint, then sniffing.
    Raises ValueError when the text cannot be decoded.
    """
    text = _norm_text(data)
    f = (fmt or detect_format(path_hint, text) or '').lower()
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON document: {e}") from e
    if f == 'yaml':
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML document: {e}") from e
    raise ValueError(f"Unsupported document format: {fmt!r}")


def serialize(value: Any, *, fmt: str, pretty: bool = True) -> str:
    """
    Convert a runtime value into JSON or YAML text.
    """
    f = (fmt or '').lower()
    built = to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
    "to_builtin",
]
