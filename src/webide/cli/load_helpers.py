from __future__ import annotations

"""Shared helpers for loading configuration and workspace snapshots with CLI-friendly errors."""

from pathlib import Path
from typing import Any, Callable

import typer
from rich.console import Console
from rich.markup import escape

from webide.core.errors import ConfigurationError, ParseError


def load_or_exit(
    loader_fn: Callable[..., Any],
    *args: Any,
    console: Console,
    verbose_errors: bool = False,
    **kwargs: Any,
) -> Any:
    if args:
        first = args[0]
        if isinstance(first, (str, Path)) and not Path(first).exists():
            console.print(f"[red]Path not found:[/red] {escape(str(first))}")
            raise typer.Exit(code=1)
    try:
        return loader_fn(*args, **kwargs)
    except (ParseError, ConfigurationError) as err:
        if verbose_errors and err.cause:
            console.print(f"[red]Failed to load data:[/red] {escape(err.message)}\n{escape(str(err.cause))}")
        else:
            console.print(f"[red]Failed to load data:[/red] {escape(str(err))}", soft_wrap=True)
        raise typer.Exit(code=1)


__all__ = ["load_or_exit"]
