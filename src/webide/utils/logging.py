from __future__ import annotations
import inspect
import logging
from functools import wraps
from typing import Any, Callable, Iterable

from rich.console import Console
from rich.logging import RichHandler

_HIDDEN = "<hidden>"


def log_calls(
    logger_name: str | None = None,
    *,
    hide: Iterable[str] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to log function calls at DEBUG level with basic error logging.

    Arguments named in ``hide`` (file contents, credentials) are logged as
    ``<hidden>``.
    """
    hidden = frozenset(hide)

    def _decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = logger_name or func.__module__
        logger = logging.getLogger(name)
        signature = inspect.signature(func)

        def _describe(args: tuple, kwargs: dict) -> dict:
            try:
                bound = signature.bind_partial(*args, **kwargs)
            except TypeError:
                return {"args": args, "kwargs": kwargs}
            return {
                key: (_HIDDEN if key in hidden else value)
                for key, value in bound.arguments.items()
                if key != "self"
            }

        @wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> Any:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Calling %s %s", func.__name__, _describe(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.debug("%s failed: %s", func.__name__, e)
                raise
            logger.debug("%s returned %s", func.__name__, type(result).__name__)
            return result

        return _wrapper

    return _decorator


def configure_logging(level: str | int = "WARNING", *, console: Console | None = None) -> None:
    """Route the ``webide`` loggers to a rich handler on stderr."""
    root = logging.getLogger("webide")
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
