"""
structlog setup and per-request log context.

Request-scoped values (``request_id``, ``user_id``) live in structlog's
contextvars and are merged into every event logged while a request is handled.
"""

import logging
import secrets
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, unbind_contextvars


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Route stdlib and structlog output to stdout.

    Debug mode renders colored console lines; otherwise events are JSON.
    ``level`` overrides the level implied by ``debug``.
    """
    log_level = logging.getLevelName(level.upper()) if level else None
    if not isinstance(log_level, int):
        log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)

    renderer = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(request_id: str | None = None) -> str:
    """Start a fresh log context for one request and return its id."""
    clear_contextvars()
    request_id = request_id or secrets.token_urlsafe(9)
    bind_contextvars(request_id=request_id)
    return request_id


def bind_user_id(user_id: str | None) -> None:
    """Tag the rest of the request's events with the caller, or untag an anonymous one."""
    if user_id:
        bind_contextvars(user_id=user_id)
    else:
        unbind_contextvars("user_id")


def clear_request_context() -> None:
    clear_contextvars()
