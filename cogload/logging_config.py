from __future__ import annotations
import logging
import sys
import structlog

def configure_logging(debug: bool = False, json: bool = True) -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    # also route stdlib logging -> stdout
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
