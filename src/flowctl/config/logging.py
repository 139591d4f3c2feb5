"""Diagnostic logging for flowctl.

Command output goes to stdout; everything logged here goes to stderr, so
``flowctl convert a.json > a.xml`` stays clean even with ``--verbose``.

flowctl modules log through stdlib ``logging.getLogger(__name__)``. A
structlog ``ProcessorFormatter`` on the root handler gives those records
the same timestamp, level and logger fields as structlog loggers, rendered
either for a console or as JSON lines (``--log-json``).

Levels for the ``flowctl`` logger tree:

- ``-v/--verbose``: DEBUG, including one line per signed API request
- default: WARNING
- ``-q/--quiet``: ERROR
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

# Third-party loggers whose chatter duplicates flowctl.client.rest's request lines.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def flow_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Level for the ``flowctl`` logger; ``verbose`` wins over ``quiet``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route stdlib and structlog records to *stream* (stderr by default).

    Safe to call more than once: the root handler is replaced, not added.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    out = stream if stream is not None else sys.stderr
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("flowctl").setLevel(flow_level(verbose=verbose, quiet=quiet))
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
