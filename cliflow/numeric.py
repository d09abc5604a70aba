"""Numeric and duration flags: int, int64, uint, uint64, float64 and duration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from cliflow.flags import Flag, flag_from_file_env
from cliflow.flagset import (
    DurationValue,
    FlagError,
    FlagSet,
    FloatValue,
    IntValue,
    UintValue,
    format_duration,
    parse_duration,
    parse_float,
    parse_int,
    parse_uint,
)


def _default_from_environment(
    flag: Flag, default: Any, parse: Callable[[str], Any], kind: str
) -> Any:
    """Return the flag's default, overridden by its environment variable or file."""
    text = flag_from_file_env(flag.file_path, flag.env_var)
    if text is None:
        return default
    try:
        return parse(text)
    except ValueError as exc:
        raise FlagError(
            f"could not parse {text} as {kind} for flag {flag.name}: {exc}"
        ) from exc


@dataclass(kw_only=True)
class _NumericFlag(Flag):
    def takes_value(self) -> bool:
        return True


@dataclass(kw_only=True)
class DurationFlag(_NumericFlag):
    """A flag holding a duration such as ``1h30m`` or ``250ms``."""

    value: timedelta = timedelta(0)
    destination: Callable[[timedelta], object] | None = None

    def default_text(self) -> str:
        return format_duration(self.value)

    def apply(self, flag_set: FlagSet) -> None:
        default = _default_from_environment(self, self.value, parse_duration, "duration")
        self._define(flag_set, lambda: DurationValue(default))


@dataclass(kw_only=True)
class Float64Flag(_NumericFlag):
    """A flag holding a floating-point number."""

    value: float = 0.0
    destination: Callable[[float], object] | None = None

    def default_text(self) -> str:
        return str(FloatValue(self.value))

    def apply(self, flag_set: FlagSet) -> None:
        default = _default_from_environment(self, self.value, parse_float, "float64 value")
        self._define(flag_set, lambda: FloatValue(default))


@dataclass(kw_only=True)
class IntFlag(_NumericFlag):
    """A flag holding a signed integer."""

    value: int = 0
    destination: Callable[[int], object] | None = None

    def default_text(self) -> str:
        return str(self.value)

    def apply(self, flag_set: FlagSet) -> None:
        default = _default_from_environment(self, self.value, parse_int, "int value")
        self._define(flag_set, lambda: IntValue(default))


@dataclass(kw_only=True)
class Int64Flag(_NumericFlag):
    """A flag holding a signed 64-bit integer."""

    value: int = 0
    destination: Callable[[int], object] | None = None

    def default_text(self) -> str:
        return str(self.value)

    def apply(self, flag_set: FlagSet) -> None:
        default = _default_from_environment(self, self.value, parse_int, "int value")
        self._define(flag_set, lambda: IntValue(default))


@dataclass(kw_only=True)
class UintFlag(_NumericFlag):
    """A flag holding an unsigned integer."""

    value: int = 0
    destination: Callable[[int], object] | None = None

    def default_text(self) -> str:
        return str(self.value)

    def apply(self, flag_set: FlagSet) -> None:
        default = _default_from_environment(self, self.value, parse_uint, "uint value")
        self._define(flag_set, lambda: UintValue(default))


@dataclass(kw_only=True)
class Uint64Flag(_NumericFlag):
    """A flag holding an unsigned 64-bit integer."""

    value: int = 0
    destination: Callable[[int], object] | None = None

    def default_text(self) -> str:
        return str(self.value)

    def apply(self, flag_set: FlagSet) -> None:
        default = _default_from_environment(self, self.value, parse_uint, "uint64 value")
        self._define(flag_set, lambda: UintValue(default))


def _lookup(name: str, flag_set: FlagSet, parse: Callable[[str], Any], missing: Any) -> Any:
    entry = flag_set.lookup(name)
    if entry is None:
        return missing
    try:
        return parse(str(entry.value))
    except ValueError:
        return missing


def lookup_duration(name: str, flag_set: FlagSet) -> timedelta:
    """Return a duration flag's value, or zero if it is not defined."""
    return _lookup(name, flag_set, parse_duration, timedelta(0))


def lookup_float64(name: str, flag_set: FlagSet) -> float:
    """Return a float flag's value, or 0.0 if it is not defined."""
    return _lookup(name, flag_set, parse_float, 0.0)


def lookup_int(name: str, flag_set: FlagSet) -> int:
    """Return an int flag's value, or 0 if it is not defined."""
    return _lookup(name, flag_set, parse_int, 0)


def lookup_int64(name: str, flag_set: FlagSet) -> int:
    """Return an int64 flag's value, or 0 if it is not defined."""
    return _lookup(name, flag_set, parse_int, 0)


def lookup_uint(name: str, flag_set: FlagSet) -> int:
    """Return a uint flag's value, or 0 if it is not defined."""
    return _lookup(name, flag_set, parse_uint, 0)


def lookup_uint64(name: str, flag_set: FlagSet) -> int:
    """Return a uint64 flag's value, or 0 if it is not defined."""
    return _lookup(name, flag_set, parse_uint, 0)