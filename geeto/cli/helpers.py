"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from geeto.core.errors import GeetoError, exit_code_for
from geeto.core.result import Err, Result
from geeto.output.console import ConsoleProtocol, Style

T = TypeVar("T")


def exit_with_error(error: GeetoError, console: ConsoleProtocol) -> NoReturn:
    """Report ``error`` and exit with its code.

    A cancelled run is not a failure: it prints a short note and exits 0.
    Anything else is printed as one ``error:`` line plus an optional hint.
    """
    if error.is_cancelled:
        console.info(error.message)
    else:
        console.error(error.message)
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(exit_code_for(error)))


def value_or_exit[T](result: Result[T, GeetoError], console: ConsoleProtocol) -> T:
    if isinstance(result, Err):
        exit_with_error(result.error, console)
    return result.value
