from __future__ import annotations

import re
from typing import Any, Iterable

from schemakit.values import UNSET

_INDEX_RE = re.compile(r"^(0|[1-9][0-9]*)$")


class InvalidPointerError(ValueError):
    pass


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def _escape(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


def parse_pointer(pointer: str) -> list[str]:
    """Split ``#/a/b/0`` into ``["a", "b", "0"]``.

    ``#`` and ``#/`` both address the root.
    """

    if not pointer.startswith("#"):
        raise InvalidPointerError(f"Pointer must start with '#': {pointer!r}")
    rest = pointer[1:]
    if rest in {"", "/"}:
        return []
    if not rest.startswith("/"):
        raise InvalidPointerError(f"Pointer segments must follow '#/': {pointer!r}")
    return [_unescape(part) for part in rest[1:].split("/")]


def format_pointer(segments: Iterable[str]) -> str:
    parts = [_escape(str(segment)) for segment in segments]
    if not parts:
        return "#"
    return "#/" + "/".join(parts)


def join_pointer(pointer: str, segment: str | int) -> str:
    if pointer in {"#", "#/"}:
        return format_pointer([str(segment)])
    return f"{pointer}/{_escape(str(segment))}"


def is_index(segment: str) -> bool:
    return bool(_INDEX_RE.match(segment))


def value_at(value: Any, segments: Iterable[str]) -> Any:
    """Return the member of ``value`` at ``segments`` or ``UNSET``."""

    cur = value
    for segment in segments:
        if isinstance(cur, dict):
            if segment not in cur:
                return UNSET
            cur = cur[segment]
        elif isinstance(cur, list):
            if not is_index(segment):
                return UNSET
            idx = int(segment)
            if idx >= len(cur):
                return UNSET
            cur = cur[idx]
        else:
            return UNSET
    return cur


__all__ = [
    "InvalidPointerError",
    "format_pointer",
    "is_index",
    "join_pointer",
    "parse_pointer",
    "value_at",
]
