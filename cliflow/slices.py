"""Repeatable flags that collect lists, and flags backed by custom value types."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from cliflow.flags import Flag, each_name, flag_from_file_env
from cliflow.flagset import FlagError, FlagSet, Value

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _parse_decimal(text: str) -> int:
    """Parse a base-10 signed 64-bit integer, without prefixes or underscores."""
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"parsing {_quote(text)}: invalid syntax")
    value = int(text, 10)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"parsing {_quote(text)}: value out of range")
    return value


class _SliceValue(Value):
    """A value holding a list; each ``set`` appends one parsed item."""

    def __init__(self, values: Iterable[Any] | None = None) -> None:
        super().__init__(list(values) if values is not None else [])

    def replace(self, other: _SliceValue) -> None:
        """Replace the held items with those of ``other``."""
        self.value[:] = other.value

    def __iter__(self) -> Iterator[Any]:
        return iter(self.value)

    def __len__(self) -> int:
        return len(self.value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _SliceValue):
            return type(self) is type(other) and self.value == other.value
        if isinstance(other, list):
            return self.value == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class IntSlice(_SliceValue):
    """A list of integers collected from repeated flags."""

    def set(self, text: str) -> None:
        self.value.append(_parse_decimal(text))

    def get(self) -> list[int]:
        return self.value

    def __str__(self) -> str:
        return "IntSlice{" + ", ".join(str(item) for item in self.value) + "}"


class Int64Slice(_SliceValue):
    """A list of 64-bit integers collected from repeated flags."""

    def set(self, text: str) -> None:
        self.value.append(_parse_decimal(text))

    def get(self) -> list[int]:
        return self.value

    def __str__(self) -> str:
        return "Int64Slice{" + ", ".join(str(item) for item in self.value) + "}"


class StringSlice(_SliceValue):
    """A list of strings collected from repeated flags."""

    def set(self, text: str) -> None:
        self.value.append(text)

    def get(self) -> list[str]:
        return self.value

    def __str__(self) -> str:
        return "[" + " ".join(self.value) + "]"


def _slice_from_environment(
    flag: Flag, current: _SliceValue | None, factory: type[_SliceValue], kind: str
) -> _SliceValue | None:
    text = flag_from_file_env(flag.file_path, flag.env_var)
    if text is None:
        return current
    fresh = factory()
    for item in text.split(","):
        try:
            fresh.set(item.strip())
        except ValueError as exc:
            raise FlagError(
                f"could not parse {text} as {kind} value for flag {flag.name}: {exc}"
            ) from exc
    if current is None:
        return fresh
    current.replace(fresh)
    return current


def _define_slice(
    flag: Flag, flag_set: FlagSet, factory: type[_SliceValue], kind: str
) -> None:
    value = _slice_from_environment(flag, flag.value, factory, kind)  # type: ignore[attr-defined]
    if value is None:
        value = factory()
    for name in each_name(flag.name):
        flag_set.var(value, name, flag.usage)


@dataclass(kw_only=True)
class _SliceFlag(Flag):
    def takes_value(self) -> bool:
        return True


@dataclass(kw_only=True)
class IntSliceFlag(_SliceFlag):
    """A repeatable flag collecting integers."""

    value: IntSlice | None = None

    def default_text(self) -> str:
        if self.value is None:
            return ""
        return ", ".join(str(item) for item in self.value)

    def apply(self, flag_set: FlagSet) -> None:
        _define_slice(self, flag_set, IntSlice, "int slice")


@dataclass(kw_only=True)
class Int64SliceFlag(_SliceFlag):
    """A repeatable flag collecting 64-bit integers."""

    value: Int64Slice | None = None

    def default_text(self) -> str:
        if self.value is None:
            return ""
        return ", ".join(str(item) for item in self.value)

    def apply(self, flag_set: FlagSet) -> None:
        _define_slice(self, flag_set, Int64Slice, "int64 slice")


@dataclass(kw_only=True)
class StringSliceFlag(_SliceFlag):
    """A repeatable flag collecting strings; empty strings are left out of help."""

    value: StringSlice | None = None
    takes_file: bool = False

    def default_text(self) -> str:
        if self.value is None:
            return ""
        return ", ".join(_quote(item) for item in self.value if item)

    def apply(self, flag_set: FlagSet) -> None:
        _define_slice(self, flag_set, StringSlice, "string")


@dataclass(kw_only=True)
class GenericFlag(Flag):
    """A flag backed by any object with ``set(text)`` and a string form."""

    value: Any = None
    takes_file: bool = False

    def takes_value(self) -> bool:
        return True

    def default_text(self) -> str:
        return "" if self.value is None else str(self.value)

    def apply(self, flag_set: FlagSet) -> None:
        text = flag_from_file_env(self.file_path, self.env_var)
        if text is not None:
            try:
                self.value.set(text)
            except ValueError as exc:
                raise FlagError(
                    f"could not parse {text} as value for flag {self.name}: {exc}"
                ) from exc
        for name in each_name(self.name):
            flag_set.var(self.value, name, self.usage)


def _lookup_slice(name: str, flag_set: FlagSet, kind: type[_SliceValue]) -> list[Any] | None:
    entry = flag_set.lookup(name)
    if entry is None:
        return None
    if not isinstance(entry.value, kind):
        raise TypeError(f"flag {name} does not hold a {kind.__name__}")
    return entry.value.get()


def lookup_int_slice(name: str, flag_set: FlagSet) -> list[int] | None:
    """Return an int slice flag's items, or None if it is not defined."""
    return _lookup_slice(name, flag_set, IntSlice)


def lookup_int64_slice(name: str, flag_set: FlagSet) -> list[int] | None:
    """Return an int64 slice flag's items, or None if it is not defined."""
    return _lookup_slice(name, flag_set, Int64Slice)


def lookup_string_slice(name: str, flag_set: FlagSet) -> list[str] | None:
    """Return a string slice flag's items, or None if it is not defined."""
    return _lookup_slice(name, flag_set, StringSlice)


def lookup_generic(name: str, flag_set: FlagSet) -> Any:
    """Return a generic flag's value object, or None if it is not defined."""
    entry = flag_set.lookup(name)
    if entry is None:
        return None
    return entry.value