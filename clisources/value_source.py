"""Sources that a command-line flag can read its value from.

A source is looked up on demand. Environment variables, files and nested
mappings (such as parsed configuration documents) are supported, and several
sources can be chained so that the first one that resolves wins.
"""

from __future__ import annotations

import math
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Union

__all__ = [
    "ValueSource",
    "EnvValueSource",
    "ValueSourceChain",
    "EnvVarValueSource",
    "FileValueSource",
    "MapSource",
    "MapValueSource",
    "env_var",
    "env_vars",
    "file",
    "files",
]

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _quote(text: str) -> str:
    """Return ``text`` as a double-quoted, escaped string literal."""
    parts = []
    for ch in text:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        else:
            code = ord(ch)
            if code < 0x80:
                parts.append(f"\\x{code:02x}")
            elif code < 0x10000:
                parts.append(f"\\u{code:04x}")
            else:
                parts.append(f"\\U{code:08x}")
    return '"' + "".join(parts) + '"'


def _format_float(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    if number == 0:
        return "-0" if math.copysign(1.0, number) < 0 else "0"
    value = Decimal(repr(number)).normalize()
    sign, digits, exponent = value.as_tuple()
    decimal_exponent = len(digits) + exponent - 1
    prefix = "-" if sign else ""
    if decimal_exponent < -4 or decimal_exponent >= 21:
        mantissa = str(digits[0])
        rest = "".join(str(d) for d in digits[1:])
        if rest:
            mantissa += "." + rest
        exp_sign = "-" if decimal_exponent < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(decimal_exponent):02d}"
    return format(value, "f")


def _format_value(value: Any) -> str:
    """Render a looked-up value the way it is handed to a flag."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (str, bytes)):
        return value.decode("utf-8", "replace") if isinstance(value, bytes) else value
    if isinstance(value, Mapping):
        try:
            keys = sorted(value)
        except TypeError:
            keys = sorted(value, key=str)
        items = " ".join(f"{_format_value(k)}:{_format_value(value[k])}" for k in keys)
        return f"map[{items}]"
    if isinstance(value, (list, tuple, set, frozenset)):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    return str(value)


class ValueSource(ABC):
    """A place a value can be looked up from."""

    @abstractmethod
    def lookup(self) -> str | None:
        """Return the value, or ``None`` when the source has none."""


class EnvValueSource(ABC):
    """Marks a source backed by an environment variable."""

    key: str

    @abstractmethod
    def is_from_env(self) -> bool:
        """Return True when the value comes from the environment."""


class ValueSourceChain(ValueSource):
    """An ordered series of sources; the first one that resolves wins."""

    def __init__(self, *sources: ValueSource) -> None:
        self.chain: list[ValueSource] = list(sources)

    def append(self, other: ValueSourceChain) -> None:
        """Add every source of ``other`` to the end of this chain."""
        self.chain.extend(other.chain)

    def env_keys(self) -> list[str]:
        """Return the names of the environment variables in the chain."""
        return [
            src.key
            for src in self.chain
            if isinstance(src, EnvValueSource) and src.is_from_env()
        ]

    def lookup(self) -> str | None:
        found = self.lookup_with_source()
        return None if found is None else found[0]

    def lookup_with_source(self) -> tuple[str, ValueSource] | None:
        """Return the first value found together with its source, or None."""
        for src in self.chain:
            value = src.lookup()
            if value is not None:
                return value, src
        return None

    def __str__(self) -> str:
        return ",".join(str(src) for src in self.chain)

    def __repr__(self) -> str:
        inner = ",".join(repr(src) for src in self.chain)
        return f"&ValueSourceChain{{Chain:{{{inner}}}}}"


@dataclass(frozen=True, repr=False)
class EnvVarValueSource(ValueSource, EnvValueSource):
    """Reads a value from an environment variable."""

    key: str

    def lookup(self) -> str | None:
        name = self.key.strip()
        if not name:
            return None
        return os.environ.get(name)

    def is_from_env(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"environment variable {_quote(self.key)}"

    def __repr__(self) -> str:
        return f"&envVarValueSource{{Key:{_quote(self.key)}}}"


@dataclass(frozen=True, repr=False)
class FileValueSource(ValueSource):
    """Reads a value from the whole contents of a file."""

    path: str

    def lookup(self) -> str | None:
        try:
            data = Path(self.path).read_bytes()
        except OSError:
            return None
        return data.decode("utf-8", errors="surrogateescape")

    def __str__(self) -> str:
        return f"file {_quote(str(self.path))}"

    def __repr__(self) -> str:
        return f"&fileValueSource{{Path:{_quote(str(self.path))}}}"


class MapSource:
    """A named mapping whose values are found by dot-separated paths."""

    def __init__(self, name: str, mapping: Mapping[Any, Any] | None = None) -> None:
        self.name = name
        self.mapping: Mapping[Any, Any] = mapping if mapping is not None else {}

    def lookup(self, name: str) -> Any:
        """Return the value at ``name``, descending into nested mappings.

        Raises KeyError when no value exists at that path.
        """
        if not name:
            raise KeyError(name)
        *parents, last = name.split(".")
        node: Mapping[Any, Any] = self.mapping
        for section in parents:
            try:
                child = node[section]
            except (KeyError, TypeError):
                raise KeyError(name) from None
            if not isinstance(child, Mapping):
                raise KeyError(name)
            node = child
        try:
            return node[last]
        except (KeyError, TypeError):
            raise KeyError(name) from None

    def __str__(self) -> str:
        return f"map source {_quote(self.name)}"

    def __repr__(self) -> str:
        return f"&mapSource{{name:{_quote(self.name)}}}"


class MapValueSource(ValueSource):
    """Reads one key out of a MapSource."""

    def __init__(self, key: str, source: MapSource) -> None:
        self.key = key
        self.source = source

    def lookup(self) -> str | None:
        try:
            value = self.source.lookup(self.key)
        except KeyError:
            return None
        return _format_value(value)

    def __str__(self) -> str:
        return f"key {_quote(self.key)} from {self.source}"

    def __repr__(self) -> str:
        return f"&mapValueSource{{key:{_quote(self.key)}, src:{self.source!r}}}"


def env_var(key: str) -> EnvVarValueSource:
    """Return a source reading the environment variable ``key``."""
    return EnvVarValueSource(key)


def env_vars(*args: str) -> ValueSourceChain:
    """Return a chain of environment-variable sources, in order."""
    return ValueSourceChain(*(env_var(key) for key in args))


def file(path: Union[str, os.PathLike]) -> FileValueSource:
    """Return a source reading the contents of the file at ``path``."""
    return FileValueSource(os.fspath(path))


def files(*args: Union[str, os.PathLike]) -> ValueSourceChain:
    """Return a chain of file sources, in order."""
    return ValueSourceChain(*(file(path) for path in args))


def _sources(items: Iterable[ValueSource]) -> ValueSourceChain:
    return ValueSourceChain(*items)