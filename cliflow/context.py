"""Per-invocation context: parsed flags, arguments and the chain of parent contexts."""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Iterable
from datetime import timedelta
from typing import Any

from cliflow.flags import Flag, each_name, lookup_bool, lookup_bool_t
from cliflow.flagset import FlagError, FlagSet
from cliflow.numeric import (
    lookup_duration,
    lookup_float64,
    lookup_int,
    lookup_int64,
    lookup_uint,
    lookup_uint64,
)
from cliflow.slices import (
    StringSlice,
    lookup_generic,
    lookup_int64_slice,
    lookup_int_slice,
    lookup_string_slice,
)

BashCompleteFunc = Callable[["Context"], None]
BeforeFunc = Callable[["Context"], None]
AfterFunc = Callable[["Context"], None]
ActionFunc = Callable[["Context"], None]
CommandNotFoundFunc = Callable[["Context", str], None]
OnUsageErrorFunc = Callable[["Context", Exception, bool], None]
ExitErrHandlerFunc = Callable[["Context", Exception], None]


class Args(list):
    """The positional arguments of a command line."""

    def get(self, n: int) -> str:
        """Return the n-th argument, or an empty string."""
        if 0 <= n < len(self):
            return self[n]
        return ""

    def first(self) -> str:
        """Return the first argument, or an empty string."""
        return self.get(0)

    def tail(self) -> list[str]:
        """Return every argument but the first."""
        if len(self) >= 2:
            return list(self[1:])
        return []

    def present(self) -> bool:
        """Tell whether there are any arguments."""
        return len(self) != 0

    def swap(self, from_index: int, to_index: int) -> None:
        """Swap the arguments at two positions."""
        if from_index >= len(self) or to_index >= len(self):
            raise IndexError("index out of range")
        self[from_index], self[to_index] = self[to_index], self[from_index]


class RequiredFlagsError(Exception):
    """Raised when flags marked as required were not given."""

    def __init__(self, missing_flags: Iterable[str]) -> None:
        self.missing_flags = list(missing_flags)
        if len(self.missing_flags) == 1:
            message = f"Required flag {_quote(self.missing_flags[0])} not set"
        else:
            message = f"Required flags {_quote(', '.join(self.missing_flags))} not set"
        super().__init__(message)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class Context:
    """The state handed to actions: the app, the command, parsed flags and parents."""

    def __init__(
        self,
        app: Any = None,
        flag_set: FlagSet | None = None,
        parent: Context | None = None,
    ) -> None:
        self.app = app
        self.command: Any = None
        self.flag_set = flag_set if flag_set is not None else FlagSet()
        self.parent = parent
        self.shell_complete = parent.shell_complete if parent is not None else False
        self._set_flags: dict[str, bool] | None = None

    def num_flags(self) -> int:
        """Return how many flags were set."""
        return self.flag_set.n_flag()

    def set(self, name: str, value: str) -> None:
        """Set a flag of this context from text."""
        self._set_flags = None
        self.flag_set.set(name, value)

    def global_set(self, name: str, value: str) -> None:
        """Set a flag of the outermost context from text."""
        root = global_context(self)
        root._set_flags = None
        root.flag_set.set(name, value)

    def _declared_flags(self) -> list[Flag]:
        command = self.command
        flags = list(getattr(command, "flags", None) or [])
        if not getattr(command, "name", ""):
            if self.app is not None:
                flags = list(getattr(self.app, "flags", None) or [])
        return flags

    def is_set(self, name: str) -> bool:
        """Tell whether a flag was given, on the command line, in the environment or a file."""
        if self._set_flags is None:
            state = {entry.name: True for entry in self.flag_set.visit()}
            for entry in self.flag_set.visit_all():
                state.setdefault(entry.name, False)
            for flag in self._declared_flags():
                for flag_name in each_name(getattr(flag, "name", "")):
                    if state.get(flag_name, True):
                        continue
                    paths = each_name(getattr(flag, "file_path", "") or "")
                    if any(path and os.path.exists(path) for path in paths):
                        state[flag_name] = True
                    envs = (env.strip() for env in each_name(getattr(flag, "env_var", "") or ""))
                    if any(env and env in os.environ for env in envs):
                        state[flag_name] = True
            self._set_flags = state
        return self._set_flags.get(name, False)

    def global_is_set(self, name: str) -> bool:
        """Tell whether a flag was set in any enclosing context."""
        current = self.parent if self.parent is not None else self
        while current is not None:
            if current.is_set(name):
                return True
            current = current.parent
        return False

    def flag_names(self) -> list[str]:
        """Return the first name of each of the command's flags, except help."""
        flags = getattr(self.command, "flags", None) or []
        names = [flag.name.split(",")[0] for flag in flags]
        return [name for name in names if name != "help"]

    def global_flag_names(self) -> list[str]:
        """Return the first name of each of the app's flags, except help and version."""
        flags = getattr(self.app, "flags", None) or []
        names = [flag.name.split(",")[0] for flag in flags]
        return [name for name in names if name not in ("help", "version")]

    def args(self) -> Args:
        """Return the positional arguments."""
        return Args(self.flag_set.args())

    def narg(self) -> int:
        """Return the number of positional arguments."""
        return len(self.args())

    def value(self, name: str) -> Any:
        """Return the parsed value of a flag; raise KeyError if it is not defined."""
        entry = self.flag_set.lookup(name)
        if entry is None:
            raise KeyError(name)
        getter = getattr(entry.value, "get", None)
        return getter() if callable(getter) else entry.value

    def bool(self, name: str) -> bool:
        return lookup_bool(name, self.flag_set)

    def bool_t(self, name: str) -> bool:
        return lookup_bool_t(name, self.flag_set)

    def int(self, name: str) -> int:
        return lookup_int(name, self.flag_set)

    def int64(self, name: str) -> int:
        return lookup_int64(name, self.flag_set)

    def uint(self, name: str) -> int:
        return lookup_uint(name, self.flag_set)

    def uint64(self, name: str) -> int:
        return lookup_uint64(name, self.flag_set)

    def float64(self, name: str) -> float:
        return lookup_float64(name, self.flag_set)

    def duration(self, name: str) -> timedelta:
        return lookup_duration(name, self.flag_set)

    def generic(self, name: str) -> Any:
        return lookup_generic(name, self.flag_set)

    def int_slice(self, name: str) -> list[int] | None:
        return lookup_int_slice(name, self.flag_set)

    def int64_slice(self, name: str) -> list[int] | None:
        return lookup_int64_slice(name, self.flag_set)

    def string_slice(self, name: str) -> list[str] | None:
        return lookup_string_slice(name, self.flag_set)

    def _global(self, name: str, lookup: Callable[[str, FlagSet], Any], missing: Any) -> Any:
        flag_set = lookup_global_flag_set(name, self)
        if flag_set is None:
            return missing
        return lookup(name, flag_set)

    def global_bool(self, name: str) -> bool:
        return self._global(name, lookup_bool, False)

    def global_bool_t(self, name: str) -> bool:
        return self._global(name, lookup_bool_t, False)

    def global_int(self, name: str) -> int:
        return self._global(name, lookup_int, 0)

    def global_int64(self, name: str) -> int:
        return self._global(name, lookup_int64, 0)

    def global_uint(self, name: str) -> int:
        return self._global(name, lookup_uint, 0)

    def global_uint64(self, name: str) -> int:
        return self._global(name, lookup_uint64, 0)

    def global_float64(self, name: str) -> float:
        return self._global(name, lookup_float64, 0.0)

    def global_duration(self, name: str) -> timedelta:
        return self._global(name, lookup_duration, timedelta(0))

    def global_generic(self, name: str) -> Any:
        return self._global(name, lookup_generic, None)

    def global_int_slice(self, name: str) -> list[int] | None:
        return self._global(name, lookup_int_slice, None)

    def global_int64_slice(self, name: str) -> list[int] | None:
        return self._global(name, lookup_int64_slice, None)

    def global_string_slice(self, name: str) -> list[str] | None:
        return self._global(name, lookup_string_slice, None)


def global_context(ctx: Context | None) -> Context | None:
    """Return the outermost context of the chain."""
    if ctx is None:
        return None
    while ctx.parent is not None:
        ctx = ctx.parent
    return ctx


def lookup_global_flag_set(name: str, ctx: Context) -> FlagSet | None:
    """Return the nearest enclosing flag set that defines ``name``."""
    current = ctx.parent if ctx.parent is not None else ctx
    while current is not None:
        if current.flag_set.lookup(name) is not None:
            return current.flag_set
        current = current.parent
    return None


def normalize_flags(flags: Iterable[Flag], flag_set: FlagSet) -> None:
    """Copy a value given under one name of a flag to its other names."""
    visited = {entry.name for entry in flag_set.visit()}
    for flag in flags:
        parts = flag.name.split(",")
        if len(parts) == 1:
            continue
        given = None
        for part in parts:
            name = part.strip(" ")
            if name in visited:
                if given is not None:
                    raise FlagError(
                        f"Cannot use two forms of the same flag: {name} {given.name}"
                    )
                given = flag_set.lookup(name)
        if given is None:
            continue
        for part in parts:
            name = part.strip(" ")
            if name in visited or isinstance(given.value, StringSlice):
                continue
            try:
                flag_set.set(name, str(given.value))
            except FlagError:
                pass


def check_required_flags(flags: Iterable[Flag], context: Context) -> None:
    """Raise RequiredFlagsError naming every required flag that was not set."""
    missing = []
    for flag in flags:
        if not getattr(flag, "required", False):
            continue
        present = False
        flag_name = ""
        for key in flag.name.split(","):
            if len(key) > 1:
                flag_name = key
            if context.is_set(key.strip()):
                present = True
        if not present and flag_name:
            missing.append(flag_name)
    if missing:
        raise RequiredFlagsError(missing)