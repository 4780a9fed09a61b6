"""structlog configuration for dddcheck.

Logs always go to stderr so stdout carries only command output. The
default renderer is structlog's console renderer (colored on a TTY);
``--log-json`` switches to one JSON object per line with tracebacks as
structured dicts.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

# Chatty dependencies kept at WARNING even under --verbose.
_QUIET_LIBRARIES = ("ruamel", "pluggy", "networkx")


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _render_chain(log_json: bool) -> list[Processor]:
    if log_json:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib ``logging`` through one stderr handler.

    Safe to call more than once: the root handler is replaced, not added.

    Args:
        verbose: DEBUG for ``dddcheck.*`` loggers; WARNING otherwise.
        log_json: JSON lines instead of the console renderer.
    """
    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("dddcheck").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
