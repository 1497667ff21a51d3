from __future__ import annotations

import logging
import logging.config
import sys

import structlog

# Third-party loggers that are chatty at INFO; they only surface warnings.
_QUIET_LOGGERS = ("pymongo", "asyncio")


def configure_logging(*, log_level: str = "INFO", json_logs: bool | None = None) -> None:
    """Route structlog and stdlib logging through one JSON (or console) handler."""

    is_tty = sys.stdout.isatty()
    use_json = json_logs if json_logs is not None else not is_tty
    log_level = log_level.upper()

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=is_tty, exception_short=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            timestamper,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = {"handlers": ["default"], "level": log_level, "propagate": False}
    loggers = {name: dict(handler) for name in ("", "uvicorn", "uvicorn.error", "uvicorn.access")}
    for name in _QUIET_LOGGERS:
        loggers[name] = {**handler, "level": "WARNING"}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": "structlog.stdlib.ProcessorFormatter",
                    "foreign_pre_chain": [
                        structlog.stdlib.add_logger_name,
                        structlog.processors.add_log_level,
                        timestamper,
                    ],
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "structlog",
                    "stream": "ext://sys.stdout",
                }
            },
            "loggers": loggers,
        }
    )


__all__ = ["configure_logging"]
