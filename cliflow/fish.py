"""Fish shell completion script generated from an app's commands and flags."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from cliflow import flags as _flags
from cliflow.flags import visible_flags
from cliflow.templates import FISH_COMPLETION_TEMPLATE, render


def to_fish_completion(app: Any) -> str:
    """Render a fish completion script for the app."""
    all_commands: list[str] = []
    completions = _prepare_fish_flags(app, visible_flags(getattr(app, "flags", None) or []), [])
    if not getattr(app, "hide_help", False):
        completions.extend(_prepare_fish_flags(app, [_flags.HELP_FLAG], []))
    if not getattr(app, "hide_version", False):
        completions.extend(_prepare_fish_flags(app, [_flags.VERSION_FLAG], []))
    commands = [c for c in getattr(app, "commands", None) or [] if not getattr(c, "hidden", False)]
    completions.extend(_prepare_fish_commands(app, commands, all_commands, []))
    return render(
        FISH_COMPLETION_TEMPLATE,
        {"app": app, "completions": completions, "all_commands": all_commands},
    )


def _prepare_fish_commands(
    app: Any,
    commands: Iterable[Any],
    all_commands: list[str],
    previous_commands: Sequence[str],
) -> list[str]:
    completions: list[str] = []
    for command in commands:
        if getattr(command, "hidden", False):
            continue
        names = command.names()
        completion = (
            f"complete -r -c {app.name} -n '{_subcommand_helper(app, previous_commands)}'"
            f" -a '{' '.join(names)}'"
        )
        usage = getattr(command, "usage", "") or ""
        if usage:
            completion += f" -d '{escape_single_quotes(usage)}'"
        if not getattr(command, "hide_help", False):
            completions.extend(_prepare_fish_flags(app, [_flags.HELP_FLAG], names))
        all_commands.extend(names)
        completions.append(completion)
        completions.extend(_prepare_fish_flags(app, getattr(command, "flags", None) or [], names))
        subcommands = getattr(command, "subcommands", None) or []
        if subcommands:
            completions.extend(_prepare_fish_commands(app, subcommands, all_commands, names))
    return completions


def _prepare_fish_flags(
    app: Any, flags: Iterable[Any], previous_commands: Sequence[str]
) -> list[str]:
    completions = []
    for flag in flags:
        if not callable(getattr(flag, "takes_value", None)):
            continue
        completion = f"complete -c {app.name} -n '{_subcommand_helper(app, previous_commands)}'"
        if not getattr(flag, "takes_file", False):
            completion += " -f"
        for index, option in enumerate(flag.name.split(",")):
            switch = "-l" if index == 0 else "-s"
            completion += f" {switch} {option.strip()}"
        if flag.takes_value():
            completion += " -r"
        if flag.usage:
            completion += f" -d '{escape_single_quotes(flag.usage)}'"
        completions.append(completion)
    return completions


def _subcommand_helper(app: Any, commands: Sequence[str]) -> str:
    if commands:
        return f"__fish_seen_subcommand_from {' '.join(commands)}"
    return f"__fish_{app.name}_no_subcommand"


def escape_single_quotes(text: str) -> str:
    """Escape every single quote with a backslash."""
    return text.replace("'", "\\'")