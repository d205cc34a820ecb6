"""Naming service: IR value names to Go identifiers.

The translator only depends on the ``Namer`` protocol. ``LocalNamer`` is the
default policy used when the caller does not supply one.
"""

from __future__ import annotations

import re
from typing import Protocol

from ll2go.ir import GlobalRef

GO_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var",
})

_INVALID_CHARS = re.compile(r"[^0-9A-Za-z_]")


class Namer(Protocol):
    def identifier_for(self, value) -> str:
        """Return a stable, unique, valid Go identifier for a named value."""
        ...

    def fresh(self, hint: str) -> str:
        """Return a new identifier that no IR value is or will be named."""
        ...


class LocalNamer:
    """Default naming policy.

    Numbered temporaries (``%1``) become ``<temp_prefix>1``; other names are
    sanitized into Go identifiers. Globals and locals are named in separate
    namespaces, and names that sanitize to an identifier already handed out
    get a numeric suffix. The same value always maps to the same identifier.
    Identifiers from ``fresh`` share the used set, so IR names never land on
    them.
    """

    def __init__(self, temp_prefix: str = "t"):
        if not temp_prefix or not (temp_prefix[0].isalpha() or temp_prefix[0] == "_"):
            raise ValueError(f"temp_prefix must start an identifier: {temp_prefix!r}")
        self.temp_prefix = temp_prefix
        self._names: dict[tuple[bool, str], str] = {}  # (is_global, IR name) -> ident
        self._used: set[str] = set()

    def identifier_for(self, value) -> str:
        name = getattr(value, "name", None)
        if not name:
            raise ValueError(f"cannot name unnamed value {value!r}")
        key = (isinstance(value, GlobalRef), name)
        ident = self._names.get(key)
        if ident is None:
            ident = self._unique(self._sanitize(name))
            self._names[key] = ident
        return ident

    def fresh(self, hint: str) -> str:
        return self._unique(self._sanitize(hint))


    def _sanitize(self, name: str) -> str:
        if name.isdigit():
            return f"{self.temp_prefix}{name}"
        ident = _INVALID_CHARS.sub("_", name)
        if ident[0].isdigit():
            ident = f"_{ident}"
        if ident in GO_KEYWORDS or ident == "_":
            ident = f"{ident}_"
        return ident

    def _unique(self, ident: str) -> str:
        candidate = ident
        n = 1
        while candidate in self._used:
            candidate = f"{ident}_{n}"
            n += 1
        self._used.add(candidate)
        return candidate
