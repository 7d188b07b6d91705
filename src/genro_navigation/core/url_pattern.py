"""URL patterns: matching, parameter extraction and expansion.

A pattern is literal text with parameter slots::

    "/users"                 -> no parameters
    "/users/:id"             -> one ``str`` parameter
    "/users/{id}"            -> same as above
    "/users/{id:int}"        -> digits only, converted to ``int`` by ``convert``
    "/files/{path:path}"     -> consumes the rest of the path
    "/app#article/{id:int}"  -> fragment-aware pattern

At most one ``#`` marks the fragment boundary. It matches either ``#`` or
``/`` so the same pattern recognises ``/app#article/12`` and
``/app/article/12``. ``expand`` keeps the ``#`` in fragment mode and turns it
into ``/`` otherwise.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

__all__ = ["CONVERTERS", "UrlPattern"]

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/#]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

_PARAM_RE = re.compile(r"\{(?P<braced>\w+)(?::(?P<type>\w+))?\}|:(?P<bare>[A-Za-z_]\w*)")


def _literal(text: str) -> str:
    return "[/#]".join(re.escape(chunk) for chunk in text.split("#"))


class UrlPattern:
    """Compiled URL pattern.

    Equality and hashing use the pattern string, so two ``UrlPattern``
    objects built from the same text address the same router entry.
    """

    __slots__ = ("pattern", "names", "types", "_chunks", "_regex", "_checks")

    def __init__(self, pattern: str) -> None:
        if pattern.count("#") > 1:
            raise ValueError(f"Pattern {pattern!r} has more than one '#'")
        chunks: list[str] = []
        names: list[str] = []
        types: list[str] = []
        pos = 0
        for match in _PARAM_RE.finditer(pattern):
            name = match.group("braced") or match.group("bare")
            param_type = match.group("type") or "str"
            if param_type not in CONVERTERS:
                raise ValueError(f"Unknown converter {param_type!r} in pattern {pattern!r}")
            if name in names:
                raise ValueError(f"Duplicate parameter {name!r} in pattern {pattern!r}")
            chunks.append(pattern[pos : match.start()])
            names.append(name)
            types.append(param_type)
            pos = match.end()
        chunks.append(pattern[pos:])

        regex = [_literal(chunks[0])]
        for param_type, chunk in zip(types, chunks[1:]):
            regex.append(f"({CONVERTERS[param_type][0]})")
            regex.append(_literal(chunk))

        self.pattern = pattern
        self.names: tuple[str, ...] = tuple(names)
        self.types: tuple[str, ...] = tuple(types)
        self._chunks: tuple[str, ...] = tuple(chunks)
        self._regex = re.compile("".join(regex))
        self._checks = tuple(re.compile(CONVERTERS[t][0]) for t in types)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UrlPattern):
            return NotImplemented
        return self.pattern == other.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"UrlPattern({self.pattern!r})"

    def __str__(self) -> str:
        return self.pattern

    def matches(self, path: str) -> bool:
        """Return True when ``path`` matches the whole pattern."""
        return self._regex.fullmatch(path) is not None

    def parse(self, path: str) -> list[str]:
        """Return the parameter values captured from ``path``, in order.

        Raises:
            ValueError: if ``path`` does not match.
        """
        match = self._regex.fullmatch(path)
        if match is None:
            raise ValueError(f"Path {path!r} does not match pattern {self.pattern!r}")
        return list(match.groups())

    def expand(self, params: Sequence[Any], use_fragment: bool = False) -> str:
        """Rebuild a concrete path from ``params``.

        Args:
            params: One value per parameter slot, in order. Values are
                converted with ``str()``.
            use_fragment: Keep the ``#`` boundary instead of turning it into ``/``.

        Raises:
            ValueError: on arity mismatch or when a value does not satisfy
                its converter.
        """
        values = [str(value) for value in params]
        if len(values) != len(self.names):
            raise ValueError(
                f"Pattern {self.pattern!r} expects {len(self.names)} params, got {len(values)}"
            )
        for name, check, value in zip(self.names, self._checks, values):
            if check.fullmatch(value) is None:
                raise ValueError(f"Invalid value {value!r} for parameter {name!r}")
        separator = "#" if use_fragment else "/"
        parts = [self._chunks[0].replace("#", separator)]
        for value, chunk in zip(values, self._chunks[1:]):
            parts.append(value)
            parts.append(chunk.replace("#", separator))
        return "".join(parts)

    def named(self, params: Sequence[str]) -> dict[str, str]:
        """Map parameter names to raw values."""
        return dict(zip(self.names, params))

    def convert(self, params: Sequence[str]) -> dict[str, Any]:
        """Map parameter names to values converted by their converter type."""
        return {
            name: CONVERTERS[param_type][1](value)
            for name, param_type, value in zip(self.names, self.types, params)
        }
