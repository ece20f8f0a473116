"""Logging configuration and error reporting helpers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, Optional, TypeVar, Union

from graphdata.errors import GraphDataError

DEFAULT_LOGGER_NAME = "graphdata"
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_T = TypeVar("_T")


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}.")
    return resolved


def configure_logging(
    level: Union[int, str] = DEFAULT_LOG_LEVEL,
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    fmt: str = DEFAULT_LOG_FORMAT,
    force: bool = False,
) -> logging.Logger:
    level = _coerce_level(level)
    logging.basicConfig(level=level, format=fmt, force=force)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger


def get_user_message(exc: BaseException, *, field: Optional[str] = None) -> str:
    """User-facing message, naming the field when the error itself does not."""
    if isinstance(exc, GraphDataError):
        message = exc.user_message
        field = field or exc.context.get("field")
    else:
        message = f"Unexpected error: {exc}"
    if field and f"'{field}'" not in message:
        message = f"Failed to ingest '{field}': {message}"
    return message


def failure_context(
    exc: BaseException, context: Optional[Mapping[str, Any]] = None
) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    if isinstance(exc, GraphDataError):
        merged.update(exc.context)
    if context:
        merged.update(context)
    return merged


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    *,
    show_traceback: bool = False,
    context: Optional[Mapping[str, Any]] = None,
) -> str:
    """Log the user message at ERROR, the error context and traceback at DEBUG."""
    details = failure_context(exc, context)
    user_message = get_user_message(exc, field=details.get("field"))
    logger.error(user_message)
    if details:
        logger.debug("Failure context (%s): %s", type(exc).__name__, details)
    if show_traceback:
        logger.error("Detailed traceback:", exc_info=exc)
    else:
        logger.debug("Detailed traceback:", exc_info=exc)
    return user_message


def run_with_error_handling(
    func: Callable[..., _T],
    *args: Any,
    logger: Optional[logging.Logger] = None,
    show_traceback: bool = False,
    context: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> _T:
    logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        log_exception(logger, exc, show_traceback=show_traceback, context=context)
        raise


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FORMAT",
    "configure_logging",
    "get_user_message",
    "failure_context",
    "log_exception",
    "run_with_error_handling",
]
