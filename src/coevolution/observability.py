"""
coevolution.observability - Trace Logging Setup
=================================================

Every component logs through structlog with a module-level logger bound to
its component name. This module configures where those events go and how
they look; it is called once by the CLI (or by any embedding application).

A cascade reads like this with the console renderer:

    2026-01-01T10:00:00Z [info ] artifact_committed   tag=PUSH artifact=microservice@1 ...
    2026-01-01T10:00:00Z [info ] transformation_fired tag=FIRE transformation=coEvModelGen@0 ...

and as one JSON object per line with ``log_format="json"``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, TextIO

import structlog

from coevolution.core.config import CoEvolutionConfig


def configure_logging(
    config: Optional[CoEvolutionConfig] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog from ``config``.

    Args:
        config: Supplies ``log_level`` and ``log_format``. Defaults apply
            when None.
        stream: Where rendered lines are written. Defaults to stdout.
    """
    config = config or CoEvolutionConfig()
    level = getattr(logging, config.log_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )
