"""Resolve simplified JSON paths such as ``data[0]/email`` to string values.

A path is a ``/``-separated list of segments. A segment is either a plain
object key (``data``) or a key followed by one bracketed array index
(``data[0]``). Empty segments are skipped, so ``""`` and ``"/"`` address the
document itself.
"""

from __future__ import annotations

import json
import re
from typing import Any

_INDEX_RE = re.compile(r"[+-]?\d+")


class JPathError(ValueError):
    def __init__(self, message: str, path: str, segment: str) -> None:
        super().__init__(f"{message} (segment {segment!r} of path {path!r})")
        self.path = path
        self.segment = segment


class KeyNotFoundError(JPathError):
    pass


class IndexOutOfRangeError(JPathError):
    pass


class TypeMismatchError(JPathError):
    pass


class MalformedPathError(JPathError):
    pass


def resolve(document: Any, path: str) -> str:
    return stringify(resolve_value(document, path))


def resolve_value(document: Any, path: str) -> Any:
    """Return the raw node addressed by ``path`` without stringifying it."""
    current = document
    for segment in split_path(path):
        if "[" not in segment and "]" not in segment:
            current = _lookup_key(current, segment, path)
            continue
        key, index = _parse_indexed(segment, path)
        array = _lookup_key(current, key, path, segment)
        if not isinstance(array, list):
            raise TypeMismatchError(
                f"cannot index {_kind(array)} value of key {key!r}", path, segment
            )
        # negative indices count as out of range, never from the end
        if index < 0 or index >= len(array):
            raise IndexOutOfRangeError(
                f"index {index} out of range for array of length {len(array)}", path, segment
            )
        current = array[index]
    return current


def split_path(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    # bool, None and numbers share JSON's literal spelling
    return json.dumps(value)


def _lookup_key(current: Any, key: str, path: str, segment: str | None = None) -> Any:
    segment = key if segment is None else segment
    if not isinstance(current, dict):
        raise TypeMismatchError(f"cannot look up key {key!r} in {_kind(current)}", path, segment)
    if key not in current:
        raise KeyNotFoundError(f"key {key!r} not found", path, segment)
    return current[key]


def _parse_indexed(segment: str, path: str) -> tuple[str, int]:
    key, bracket, rest = segment.partition("[")
    if not bracket:
        raise MalformedPathError("closing bracket without opening bracket", path, segment)
    if not rest.endswith("]"):
        raise MalformedPathError("index must end with a closing bracket", path, segment)
    content = rest[:-1]
    if not _INDEX_RE.fullmatch(content):
        raise MalformedPathError(f"index {content!r} is not an integer", path, segment)
    return key, int(content)


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"
