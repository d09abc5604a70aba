"""Markdown documentation generated from an app's commands and flags."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from typing import Any

from cliflow.flagset import format_duration
from cliflow.templates import MARKDOWN_DOC_TEMPLATE, render


def to_markdown(app: Any) -> str:
    """Render the app's documentation as Markdown."""
    flags = getattr(app, "flags", None) or []
    return render(
        MARKDOWN_DOC_TEMPLATE,
        {
            "app": app,
            "commands": prepare_commands(getattr(app, "commands", None) or [], 0),
            "global_args": prepare_args_with_values(flags),
            "synopsis_args": prepare_args_synopsis(flags),
        },
    )


def prepare_commands(commands: Iterable[Any], level: int) -> list[str]:
    """Render each visible command, and its subcommands one level deeper."""
    sections: list[str] = []
    for command in commands:
        if getattr(command, "hidden", False):
            continue
        usage = getattr(command, "usage", "") or ""
        prepared = f"{'#' * (level + 2)} {', '.join(command.names())}\n\n{usage}\n"
        flags = prepare_args_with_values(getattr(command, "flags", None) or [])
        if flags:
            prepared += "\n" + "\n".join(flags)
        sections.append(prepared)
        subcommands = getattr(command, "subcommands", None) or []
        if subcommands:
            sections.extend(prepare_commands(subcommands, level + 1))
    return sections


def prepare_args_with_values(flags: Iterable[Any]) -> list[str]:
    """Render flags with their usage and default, one per line, sorted."""
    return _prepare_flags(flags, ", ", "**", "**", '""', True)


def prepare_args_synopsis(flags: Iterable[Any]) -> list[str]:
    """Render flags for the synopsis, one per line, sorted."""
    return _prepare_flags(flags, "|", "[", "]", "[value]", False)


def _documentable(flag: Any) -> bool:
    return callable(getattr(flag, "takes_value", None)) and hasattr(flag, "usage")


def _prepare_flags(
    flags: Iterable[Any],
    separator: str,
    opener: str,
    closer: str,
    value: str,
    add_details: bool,
) -> list[str]:
    args = []
    for flag in flags:
        if not _documentable(flag):
            continue
        names = []
        for part in flag.name.split(","):
            trimmed = part.strip()
            names.append(f"--{trimmed}" if len(trimmed) > 1 else f"-{trimmed}")
        arg = opener + separator.join(names) + closer
        if flag.takes_value():
            arg += f"={value}"
        if add_details:
            arg += flag_details(flag)
        args.append(arg + "\n")
    return sorted(args)


def _doc_value(flag: Any) -> str:
    if not flag.takes_value():
        return ""
    value = getattr(flag, "value", None)
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:f}"
    if isinstance(value, timedelta):
        return format_duration(value)
    return str(value)


def flag_details(flag: Any) -> str:
    """Return ``": usage"``, followed by the default value when there is one."""
    description = flag.usage
    value = _doc_value(flag)
    if value:
        description += f" (default: {value})"
    return ": " + description