"""Logging helpers with request context and conditional debug output."""

import logging
import traceback
from os import getenv
from typing import Optional, Any

DEBUG = getenv("APP_DEBUG", "false").lower() == "true"

logger = logging.getLogger("Togetai")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(debug: bool = DEBUG) -> None:
    """Configure the root logger once for the whole process."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )


def debug_log(message: str, *args, **kwargs) -> None:
    """
    Log a debug message only if APP_DEBUG is enabled.

    Args:
        message: Log message (supports % formatting)
        *args: Positional arguments for message formatting
        **kwargs: Keyword arguments (level, exc_info, etc.)
    """
    if DEBUG:
        level = kwargs.pop("level", logging.DEBUG)
        logger.log(level, message, *args, **kwargs)


def error_log(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[dict] = None,
    *args,
    **kwargs
) -> None:
    """
    Error logging with context and, in debug mode, the full traceback.

    Args:
        message: Error message
        exc: Optional exception object
        context: Optional dictionary with additional context (path, entry id, ...)
    """
    parts = [message]

    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        parts.append(f"Context: {context_str}")

    if exc:
        parts.append(f"Exception: {type(exc).__name__}: {exc}")
        if DEBUG:
            parts.append(f"Traceback:\n{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}")

    full_message = " | ".join(parts)

    if exc:
        logger.error(full_message, exc_info=exc, *args, **kwargs)
    else:
        logger.error(full_message, *args, **kwargs)


def log_request_error(
    request: Any,
    exc: Exception,
    message: Optional[str] = None
) -> None:
    """
    Log an error with request context.

    Args:
        request: Request object (should have url, method, headers)
        exc: The exception
        message: Optional custom message
    """
    context = {}

    try:
        if hasattr(request, "url"):
            context["path"] = str(request.url.path) if hasattr(request.url, "path") else str(request.url)
        if hasattr(request, "method"):
            context["method"] = request.method
        if hasattr(request, "headers"):
            context["user_agent"] = request.headers.get("user-agent", "unknown")
    except (AttributeError, TypeError):
        pass  # context is best-effort

    error_log(message or f"Unhandled exception: {type(exc).__name__}", exc=exc, context=context)
