"""Structured logging via structlog.

Configured once by the CLI before any action runs. Library modules keep
using `logging.getLogger(__name__)`; a `ProcessorFormatter` on the root
handler runs their records through the same processors and renderer as
structlog's own loggers.

Renderer selection:
  debug=True  -> `ConsoleRenderer` with colours for local runs.
  debug=False -> `JSONRenderer` for CI log collectors.

ContextVar injection:
  `source_key` is bound by the report action so every line emitted while
  reporting carries it. The dispatcher runs its workers in a copy of the
  caller's context, so lines from worker threads carry it too.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar, Token
from typing import IO, Optional

import structlog

_source_key_var: ContextVar[str] = ContextVar("source_key", default="")

_handler: Optional[logging.Handler] = None


def bind_source_key(source_key: str) -> Token:
    return _source_key_var.set(source_key)


def unbind_source_key(token: Token) -> None:
    _source_key_var.reset(token)


def get_source_key() -> str:
    """Return the source key of the current dispatch, or empty string."""
    return _source_key_var.get()


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject source_key from its ContextVar."""
    source_key = get_source_key()
    if source_key:
        event_dict["source_key"] = source_key
    return event_dict


def configure_structlog(debug: bool = True, stream: Optional[IO[str]] = None) -> logging.Handler:
    """Configure structlog and the root stdlib handler for the process lifetime.

    Calling multiple times is safe: the handler installed by the previous
    call is replaced. Returns the installed handler.
    """
    global _handler

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx and our own modules log through stdlib logging.
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(level)
    _handler = handler
    return handler
