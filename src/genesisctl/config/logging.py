"""structlog setup shared by every genesisctl command.

Everything goes to stderr so stdout stays clean for ``--json`` results and
``-q`` waypoints that scripts capture. ``--log-json`` switches the renderer
to one JSON object per line for ceremony log collection.

Key material never reaches a log line: fields named like a seed or a private
key are replaced before rendering, whichever logger emitted them.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

REDACTED = "[redacted]"

GIT_LOGGER = "genesisctl.infrastructure.store.git"

# Levels that do not follow --verbose.
_PINNED_LEVELS = {
    "pluggy": logging.WARNING,
}


def _is_secret(key: str) -> bool:
    return key == "seed" or key.endswith("private_key")


def redact_key_material(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor blanking seed and private-key fields."""
    for key in event_dict:
        if _is_secret(key):
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    trace_git: bool = False,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        verbose: DEBUG for genesisctl loggers; git store stays at INFO
            (commits, pushes, pulls) unless *trace_git* is set.
        log_json: JSON lines instead of the console renderer.
        trace_git: Log every git subprocess the store runs.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_key_material,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("genesisctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    if trace_git:
        git_level = logging.DEBUG
    elif verbose:
        git_level = logging.INFO
    else:
        git_level = logging.NOTSET
    logging.getLogger(GIT_LOGGER).setLevel(git_level)
    for name, level in _PINNED_LEVELS.items():
        logging.getLogger(name).setLevel(level)
