"""structlog setup: stdlib records and compile-phase events share one stderr stream.

The compiler logs one structlog event per phase (``compile.resolve``,
``compile.reachability``, ``compile.metadata``, ``compile.emit``) with the
run's ``package`` and ``protocol`` bound in context. Those events gain a
``phase`` key so ``--log-json`` output can be filtered per phase.

``--log-json`` writes one JSON object per line; otherwise the console
renderer is used, colored when stderr is a terminal.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Libraries cdpbind drives whose DEBUG chatter never helps a bindings run.
QUIET_LOGGERS = ("jinja2", "networkx")

PHASE_PREFIX = "compile."


def add_compile_phase(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag ``compile.<phase>`` events with ``phase=<phase>``."""
    event = event_dict.get("event")
    if isinstance(event, str) and event.startswith(PHASE_PREFIX):
        event_dict.setdefault("phase", event.removeprefix(PHASE_PREFIX))
    return event_dict


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route cdpbind's stdlib and structlog loggers to stderr.

    ``verbose`` lowers the ``cdpbind`` logger to DEBUG, which is the level
    compile phases and renderer progress are logged at. Everything else
    stays at WARNING. Calling this again replaces the previous handler.
    """
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_compile_phase,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("cdpbind").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
