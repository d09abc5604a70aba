"""Flag definitions: the common flag base, help-text rendering and boolean flags."""

from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import cmp_to_key
from pathlib import Path
from typing import Any

from cliflow.flagset import BoolValue, FlagError, FlagSet, Value, parse_bool
from cliflow.sortutil import lexicographic_less

DEFAULT_PLACEHOLDER = "value"

NamePrefixer = Callable[[str, str], str]
Hinter = Callable[[str, str], str]


class _BoundValue(Value):
    """A value that reports every assignment to a destination callback."""

    def __init__(self, inner: Any, destination: Callable[[Any], object]) -> None:
        self.inner = inner
        self.destination = destination
        destination(inner.get())

    @property
    def is_bool_flag(self) -> bool:  # type: ignore[override]
        return getattr(self.inner, "is_bool_flag", False)

    @property
    def value(self) -> Any:
        return self.inner.get()

    def set(self, text: str) -> None:
        self.inner.set(text)
        self.destination(self.inner.get())

    def get(self) -> Any:
        return self.inner.get()

    def __str__(self) -> str:
        return str(self.inner)


@dataclass(kw_only=True)
class Flag(ABC):
    """Common fields and behaviour of every flag kind.

    ``name`` may hold several comma-separated names, e.g. ``"config, c"``.
    ``env_var`` and ``file_path`` may likewise list several sources; the
    first environment variable that exists wins, then the first readable file.
    """

    name: str = ""
    usage: str = ""
    env_var: str = ""
    file_path: str = ""
    required: bool = False
    hidden: bool = False

    @abstractmethod
    def apply(self, flag_set: FlagSet) -> None:
        """Define this flag, under each of its names, on ``flag_set``."""

    def takes_value(self) -> bool:
        """Tell whether the flag expects a value on the command line."""
        return False

    def default_text(self) -> str:
        """Return the default value as shown in help, or an empty string."""
        return ""

    def __str__(self) -> str:
        return stringify_flag(self)

    def _define(self, flag_set: FlagSet, make_value: Callable[[], Any]) -> None:
        destination = getattr(self, "destination", None)
        for name in each_name(self.name):
            value = make_value()
            if destination is not None:
                value = _BoundValue(value, destination)
            flag_set.var(value, name, self.usage)


def _bool_from_environment(flag: Flag, default: bool) -> bool:
    text = flag_from_file_env(flag.file_path, flag.env_var)
    if text is None:
        return default
    if text == "":
        return False
    try:
        return parse_bool(text)
    except ValueError as exc:
        raise FlagError(
            f"could not parse {text} as bool value for flag {flag.name}: {exc}"
        ) from exc


@dataclass(kw_only=True)
class BoolFlag(Flag):
    """A boolean flag that is false unless given.

    ``destination``, if set, is called with the value whenever it is assigned.
    """

    destination: Callable[[bool], object] | None = None

    def apply(self, flag_set: FlagSet) -> None:
        default = _bool_from_environment(self, False)
        self._define(flag_set, lambda: BoolValue(default))


@dataclass(kw_only=True)
class BoolTFlag(Flag):
    """A boolean flag that is true unless turned off.

    ``destination``, if set, is called with the value whenever it is assigned.
    """

    destination: Callable[[bool], object] | None = None

    def apply(self, flag_set: FlagSet) -> None:
        default = _bool_from_environment(self, True)
        self._define(flag_set, lambda: BoolValue(default))


BASH_COMPLETION_FLAG = BoolFlag(name="generate-bash-completion", hidden=True)
VERSION_FLAG = BoolFlag(name="version, v", usage="print the version")
HELP_FLAG = BoolFlag(name="help, h", usage="show help")


def each_name(long_name: str) -> list[str]:
    """Split a comma-separated name list and trim spaces from each name."""
    return [name.strip(" ") for name in long_name.split(",")]


def visible_flags(flags: Iterable[Flag]) -> list[Flag]:
    """Return the flags that are not hidden."""
    return [flag for flag in flags if not getattr(flag, "hidden", False)]


def _compare_names(left: Flag, right: Flag) -> int:
    if lexicographic_less(left.name, right.name):
        return -1
    if lexicographic_less(right.name, left.name):
        return 1
    return 0


def sort_flags_by_name(flags: Iterable[Flag]) -> list[Flag]:
    """Return the flags ordered by name, case-insensitively first."""
    return sorted(flags, key=cmp_to_key(_compare_names))


def prefix_for(name: str) -> str:
    """Return ``-`` for a one-character name and ``--`` otherwise."""
    return "-" if len(name.encode("utf-8")) == 1 else "--"


def unquote_usage(usage: str) -> tuple[str, str]:
    """Return the back-quoted placeholder, if any, and the usage without quotes."""
    start = usage.find("`")
    if start == -1:
        return "", usage
    end = usage.find("`", start + 1)
    if end == -1:
        return "", usage
    placeholder = usage[start + 1 : end]
    return placeholder, usage[:start] + placeholder + usage[end + 1 :]


def prefixed_names(full_name: str, placeholder: str) -> str:
    """Render every name of a flag with its dashes and placeholder."""
    parts = []
    for name in each_name(full_name):
        text = prefix_for(name) + name
        if placeholder:
            text += " " + placeholder
        parts.append(text)
    return ", ".join(parts)


def with_env_hint(env_var: str, text: str) -> str:
    """Append the environment variables a flag reads to its help line."""
    if not env_var:
        return text
    if sys.platform == "win32":
        prefix, suffix, separator = "%", "%", "%, %"
    else:
        prefix, suffix, separator = "$", "", ", $"
    return f"{text} [{prefix}{separator.join(env_var.split(','))}{suffix}]"


def with_file_hint(file_path: str, text: str) -> str:
    """Append the file paths a flag reads to its help line."""
    if not file_path:
        return text
    return f"{text} [{file_path}]"


def stringify_flag(
    flag: Flag,
    name_prefixer: NamePrefixer = prefixed_names,
    env_hinter: Hinter = with_env_hint,
    file_hinter: Hinter = with_file_hint,
) -> str:
    """Render a flag as a single help line: names, tab, usage and default."""
    placeholder, usage = unquote_usage(flag.usage)
    default = flag.default_text()
    default_part = f" (default: {default})" if default else ""
    if flag.takes_value() and not placeholder:
        placeholder = DEFAULT_PLACEHOLDER
    usage_with_default = (usage + default_part).strip()
    line = name_prefixer(flag.name, placeholder) + "\t" + usage_with_default
    return file_hinter(flag.file_path, env_hinter(flag.env_var, line))


def flag_from_file_env(file_path: str, env_name: str) -> str | None:
    """Return a flag's value from the first set variable or readable file.

    Environment variables are tried first, in order, then files. Returns
    None when none of them provides a value.
    """
    for env in env_name.split(","):
        env = env.strip()
        if env and env in os.environ:
            return os.environ[env]
    for path in file_path.split(","):
        if not path:
            continue
        try:
            return Path(path).read_bytes().decode("utf-8", errors="surrogateescape")
        except OSError:
            continue
    return None


def build_flag_set(name: str, flags: Iterable[Flag]) -> FlagSet:
    """Create a flag set with every flag applied to it."""
    flag_set = FlagSet(name)
    for flag in flags:
        flag.apply(flag_set)
    return flag_set


def _lookup_boolean(name: str, flag_set: FlagSet) -> bool:
    entry = flag_set.lookup(name)
    if entry is None:
        return False
    try:
        return parse_bool(str(entry.value))
    except ValueError:
        return False


def lookup_bool(name: str, flag_set: FlagSet) -> bool:
    """Return a boolean flag's value, or False if it is not defined."""
    return _lookup_boolean(name, flag_set)


def lookup_bool_t(name: str, flag_set: FlagSet) -> bool:
    """Return a true-by-default flag's value, or False if it is not defined."""
    return _lookup_boolean(name, flag_set)