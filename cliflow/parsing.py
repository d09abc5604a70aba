"""Argument parsing with support for combined short options such as ``-abc``."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from cliflow.flagset import FlagError, FlagSet

_UNDEFINED_PREFIX = "flag provided but not defined: "


def parse_iter(
    new_flag_set: Callable[[], FlagSet],
    use_short_option_handling: bool,
    args: Sequence[str],
) -> FlagSet:
    """Parse ``args`` into a fresh flag set, splitting combined short options.

    When short-option handling is on and parsing fails on an undefined flag
    made of known one-letter flags, that argument is split into separate
    flags and parsing starts again with a new flag set.
    """
    args = list(args)
    while True:
        flag_set = new_flag_set()
        try:
            flag_set.parse(args)
        except FlagError as err:
            if not use_short_option_handling:
                raise
            message = str(err)
            if not message.startswith(_UNDEFINED_PREFIX):
                raise
            offending = message[len(_UNDEFINED_PREFIX):]
            if offending not in args:
                raise
            short_opts = split_short_options(flag_set, offending)
            if len(short_opts) == 1:
                raise
            index = args.index(offending)
            args = args[:index] + short_opts + args[index + 1:]
            continue
        return flag_set


def split_short_options(flag_set: FlagSet, arg: str) -> list[str]:
    """Split ``-abc`` into ``-a -b -c`` when every letter is a defined flag."""
    if not is_splittable(arg):
        return [arg]
    letters = arg[1:]
    if any(flag_set.lookup(letter) is None for letter in letters):
        return [arg]
    return [f"-{letter}" for letter in letters]


def is_splittable(flag_arg: str) -> bool:
    """Tell whether an argument looks like several combined short options."""
    return flag_arg.startswith("-") and not flag_arg.startswith("--") and len(flag_arg) > 2