"""Errors carrying exit codes, and the handler that turns them into exits."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO


class MultiError(Exception):
    """An error that wraps several errors."""

    def __init__(self, *errors: BaseException) -> None:
        super().__init__(*errors)
        self.errors = list(errors)

    def __str__(self) -> str:
        return "\n".join(str(err) for err in self.errors)


class ExitError(Exception):
    """An error with a message and the exit code the program should end with."""

    def __init__(self, message: object, exit_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return f"{self.message}"


def _exit_code_of(err: BaseException) -> int | None:
    code = getattr(err, "exit_code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return None


def _handle_multi_error(multi: MultiError, writer: TextIO) -> int:
    code = 1
    for inner in multi.errors:
        if isinstance(inner, MultiError):
            code = _handle_multi_error(inner, writer)
            continue
        print(inner, file=writer)
        inner_code = _exit_code_of(inner)
        if inner_code is not None:
            code = inner_code
    return code


def handle_exit_coder(
    err: BaseException | None,
    exiter: Callable[[int], object] | None = None,
    writer: TextIO | None = None,
) -> None:
    """Print an error that carries an exit code and exit with that code.

    A :class:`MultiError` has each member printed and exits with the last
    exit code found among them (1 if none has one). Other errors are ignored.
    """
    if err is None:
        return
    exiter = exiter if exiter is not None else sys.exit
    writer = writer if writer is not None else sys.stderr

    if isinstance(err, MultiError):
        exiter(_handle_multi_error(err, writer))
        return

    code = _exit_code_of(err)
    if code is not None:
        text = str(err)
        if text:
            print(text, file=writer)
        exiter(code)