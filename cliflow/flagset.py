"""A command-line flag set: typed values, flag definitions and parsing."""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from fractions import Fraction
from typing import Any


class FlagError(Exception):
    """Raised when flags are defined, set or parsed incorrectly."""

    def __init__(self, message: str, *, help_requested: bool = False) -> None:
        super().__init__(message)
        self.help_requested = help_requested
        self.flag_set: FlagSet | None = None


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _syntax_error(text: str) -> ValueError:
    return ValueError(f"parsing {_quote(text)}: invalid syntax")


def _range_error(text: str) -> ValueError:
    return ValueError(f"parsing {_quote(text)}: value out of range")


_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(text: str) -> bool:
    """Parse the boolean spellings accepted on the command line."""
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise _syntax_error(text)


_DIGIT_VALUES = {ch: index for index, ch in enumerate("0123456789abcdefghijklmnopqrstuvwxyz")}
_BASE_PREFIXES = {"b": 2, "o": 8, "x": 16}


def _underscores_ok(text: str) -> bool:
    if "_" not in text:
        return True
    last = "^"
    rest = text
    if len(rest) >= 2 and rest[0] == "0" and rest[1].lower() in _BASE_PREFIXES:
        rest = rest[2:]
        last = "0"
    for ch in rest:
        if ch.isascii() and ch.isdigit():
            last = "0"
        elif ch == "_":
            if last != "0":
                return False
            last = "_"
        else:
            if last == "_":
                return False
            last = "!"
    return last != "_"


def _parse_unsigned(text: str, original: str) -> int:
    if not text:
        raise _syntax_error(original)
    base = 10
    body = text
    if text[0] == "0":
        if len(text) >= 3 and text[1].lower() in _BASE_PREFIXES:
            base = _BASE_PREFIXES[text[1].lower()]
            body = text[2:]
        else:
            base = 8
            body = text[1:]
    digits = body.replace("_", "")
    for ch in digits:
        value = _DIGIT_VALUES.get(ch.lower()) if len(ch.lower()) == 1 else None
        if value is None or value >= base:
            raise _syntax_error(original)
    if not _underscores_ok(text):
        raise _syntax_error(original)
    return int(digits, base) if digits else 0


def parse_int(text: str, bits: int = 64) -> int:
    """Parse a signed integer with base prefixes (0x, 0o, 0b, leading 0)."""
    negative = False
    body = text
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    magnitude = _parse_unsigned(body, text)
    value = -magnitude if negative else magnitude
    if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
        raise _range_error(text)
    return value


def parse_uint(text: str, bits: int = 64) -> int:
    """Parse an unsigned integer with base prefixes (0x, 0o, 0b, leading 0)."""
    value = _parse_unsigned(text, text)
    if value >= 1 << bits:
        raise _range_error(text)
    return value


_DECIMAL_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_HEX_FLOAT = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)


def parse_float(text: str) -> float:
    """Parse a floating-point number; overflow to infinity is an error."""
    if _DECIMAL_FLOAT.fullmatch(text):
        value = float(text)
    elif _HEX_FLOAT.fullmatch(text):
        value = float.fromhex(text)
    else:
        raise _syntax_error(text)
    if math.isinf(value) and "inf" not in text.lower():
        raise _range_error(text)
    return value


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    if not stripped:
        digits, point = "0", 1
    else:
        exponent += len(digits) - len(stripped)
        digits = stripped
        point = len(digits) + exponent
    prefix = "-" if sign else ""
    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{prefix}{digits}{'0' * (point - len(digits))}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_DURATION_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}
_DURATION_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_MAX_NANOSECONDS = (1 << 63) - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``300ms``, ``1.5h`` or ``2h45m``."""
    quoted = _quote(text)
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"time: invalid duration {quoted}")

    total = Fraction(0)
    position = 0
    while position < len(rest):
        match = _DURATION_COMPONENT.match(rest, position)
        whole, fraction, unit = match.groups()
        if not whole and not fraction:
            raise ValueError(f"time: invalid duration {quoted}")
        if not unit:
            raise ValueError(f"time: missing unit in duration {quoted}")
        scale = _DURATION_UNITS.get(unit)
        if scale is None:
            raise ValueError(f"time: unknown unit {_quote(unit)} in duration {quoted}")
        amount = Fraction(int(whole or "0"))
        if fraction:
            amount += Fraction(int(fraction), 10 ** len(fraction))
        total += amount * scale
        if total > _MAX_NANOSECONDS:
            raise ValueError(f"time: invalid duration {quoted}")
        position = match.end()

    microseconds = round(Fraction(int(total), _MICROSECOND))
    return timedelta(microseconds=-microseconds if negative else microseconds)


def _split_fraction(value: int, precision: int) -> tuple[int, str]:
    whole, remainder = divmod(value, 10**precision)
    if precision == 0:
        return whole, ""
    digits = f"{remainder:0{precision}d}".rstrip("0")
    return whole, ("." + digits if digits else "")


def format_duration(value: timedelta) -> str:
    """Format a duration as ``72h3m0.5s``, ``1.5ms`` or ``0s``."""
    nanoseconds = (value.days * 86400 + value.seconds) * _SECOND
    nanoseconds += value.microseconds * _MICROSECOND
    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)
    if magnitude == 0:
        return "0s"
    if magnitude < _SECOND:
        if magnitude < _MICROSECOND:
            unit, precision = "ns", 0
        elif magnitude < _MILLISECOND:
            unit, precision = "\u00b5s", 3
        else:
            unit, precision = "ms", 6
        whole, fraction = _split_fraction(magnitude, precision)
        return f"{sign}{whole}{fraction}{unit}"

    seconds, fraction = _split_fraction(magnitude, 9)
    text = f"{seconds % 60}{fraction}s"
    minutes = seconds // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


class Value(ABC):
    """A typed value that a flag parses text into."""

    is_bool_flag = False

    def __init__(self, value: Any = None) -> None:
        self.value = value

    @abstractmethod
    def set(self, text: str) -> None:
        """Parse ``text`` and store the result, raising ValueError if invalid."""

    def get(self) -> Any:
        return self.value

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


class BoolValue(Value):
    is_bool_flag = True

    def __init__(self, value: bool = False) -> None:
        super().__init__(value)

    def set(self, text: str) -> None:
        self.value = parse_bool(text)

    def __str__(self) -> str:
        return "true" if self.value else "false"


class IntValue(Value):
    def __init__(self, value: int = 0, bits: int = 64) -> None:
        super().__init__(value)
        self.bits = bits

    def set(self, text: str) -> None:
        self.value = parse_int(text, self.bits)


class UintValue(Value):
    def __init__(self, value: int = 0, bits: int = 64) -> None:
        super().__init__(value)
        self.bits = bits

    def set(self, text: str) -> None:
        self.value = parse_uint(text, self.bits)


class FloatValue(Value):
    def __init__(self, value: float = 0.0) -> None:
        super().__init__(float(value))

    def set(self, text: str) -> None:
        self.value = parse_float(text)

    def __str__(self) -> str:
        return _format_float(self.value)


class StringValue(Value):
    def __init__(self, value: str = "") -> None:
        super().__init__(value)

    def set(self, text: str) -> None:
        self.value = text


class DurationValue(Value):
    def __init__(self, value: timedelta | None = None) -> None:
        super().__init__(value if value is not None else timedelta(0))

    def set(self, text: str) -> None:
        self.value = parse_duration(text)

    def __str__(self) -> str:
        return format_duration(self.value)


@dataclass
class FlagEntry:
    """A defined flag: its name, usage, value and default as text."""

    name: str
    usage: str
    value: Any
    default_text: str


class FlagSet:
    """A named set of flags that parses an argument list."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.parsed = False
        self._formal: dict[str, FlagEntry] = {}
        self._actual: dict[str, FlagEntry] = {}
        self._args: list[str] = []

    def var(self, value: Any, name: str, usage: str = "") -> Any:
        """Define a flag backed by ``value``, any object with ``set`` and ``__str__``."""
        if name in self._formal:
            prefix = f"{self.name} " if self.name else ""
            raise FlagError(f"{prefix}flag redefined: {name}")
        self._formal[name] = FlagEntry(name, usage, value, str(value))
        return value

    def add_bool(self, name: str, default: bool = False, usage: str = "") -> BoolValue:
        return self.var(BoolValue(default), name, usage)

    def add_int(self, name: str, default: int = 0, usage: str = "") -> IntValue:
        return self.var(IntValue(default), name, usage)

    def add_uint(self, name: str, default: int = 0, usage: str = "") -> UintValue:
        return self.var(UintValue(default), name, usage)

    def add_float(self, name: str, default: float = 0.0, usage: str = "") -> FloatValue:
        return self.var(FloatValue(default), name, usage)

    def add_string(self, name: str, default: str = "", usage: str = "") -> StringValue:
        return self.var(StringValue(default), name, usage)

    def add_duration(
        self, name: str, default: timedelta | None = None, usage: str = ""
    ) -> DurationValue:
        return self.var(DurationValue(default), name, usage)

    def lookup(self, name: str) -> FlagEntry | None:
        return self._formal.get(name)

    def set(self, name: str, value: str) -> None:
        """Set a defined flag from text and mark it as set."""
        entry = self._formal.get(name)
        if entry is None:
            raise FlagError(f"no such flag -{name}")
        try:
            entry.value.set(value)
        except ValueError as exc:
            raise FlagError(str(exc)) from exc
        self._actual[name] = entry

    def parse(self, arguments: Iterable[str]) -> None:
        """Parse flags from ``arguments``; what remains is available from ``args``."""
        self.parsed = True
        self._args = list(arguments)
        try:
            while self._parse_one():
                pass
        except FlagError as exc:
            exc.flag_set = self
            raise

    def _parse_one(self) -> bool:
        if not self._args:
            return False
        arg = self._args[0]
        if len(arg) < 2 or arg[0] != "-":
            return False
        minuses = 1
        if arg[1] == "-":
            minuses = 2
            if len(arg) == 2:
                self._args = self._args[1:]
                return False
        name = arg[minuses:]
        if not name or name[0] in "-=":
            raise FlagError(f"bad flag syntax: {arg}")
        self._args = self._args[1:]

        name, separator, text = name.partition("=")
        has_value = bool(separator)

        entry = self._formal.get(name)
        if entry is None:
            if name in ("help", "h"):
                raise FlagError("flag: help requested", help_requested=True)
            raise FlagError(f"flag provided but not defined: -{name}")

        if getattr(entry.value, "is_bool_flag", False):
            try:
                entry.value.set(text if has_value else "true")
            except ValueError as exc:
                if has_value:
                    raise FlagError(
                        f"invalid boolean value {_quote(text)} for -{name}: {exc}"
                    ) from exc
                raise FlagError(f"invalid boolean flag {name}: {exc}") from exc
        else:
            if not has_value and self._args:
                text = self._args[0]
                self._args = self._args[1:]
                has_value = True
            if not has_value:
                raise FlagError(f"flag needs an argument: -{name}")
            try:
                entry.value.set(text)
            except ValueError as exc:
                raise FlagError(
                    f"invalid value {_quote(text)} for flag -{name}: {exc}"
                ) from exc

        self._actual[name] = entry
        return True

    def args(self) -> list[str]:
        """Return the arguments left after the flags."""
        return list(self._args)

    def n_flag(self) -> int:
        """Return how many flags have been set."""
        return len(self._actual)

    def visit(self) -> Iterator[FlagEntry]:
        """Yield the flags that have been set, ordered by name."""
        for name in sorted(self._actual):
            yield self._actual[name]

    def visit_all(self) -> Iterator[FlagEntry]:
        """Yield every defined flag, ordered by name."""
        for name in sorted(self._formal):
            yield self._formal[name]