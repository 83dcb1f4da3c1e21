"""Logging setup for the chaosselect CLI.

The selection pipeline and its collaborators log through plain
``logging.getLogger(__name__)``: skipped explicit picks at WARNING, policy
and provider events at INFO, stage counts at DEBUG.  This module routes
those records, together with native structlog events such as
``span.complete``, through one structlog ``ProcessorFormatter`` on stderr
so stdout stays reserved for command output.

``--verbose`` lowers the ``chaosselect`` logger to DEBUG; ``--log-json``
swaps the console renderer for JSON lines.
"""

from __future__ import annotations

import logging
import sys

import structlog

APP_LOGGER = "chaosselect"


def _pre_chain() -> list[structlog.types.Processor]:
    # shared by structlog events and stdlib records
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and set the chaosselect log level.

    Safe to call repeatedly; the root handler list is replaced each time.
    Third-party loggers stay at WARNING regardless of *verbose*.
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
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger(APP_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
