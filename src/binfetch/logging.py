"""Logging configuration."""
import datetime
import inspect
import json
import logging
import sys
from typing import Any, List, Optional, TextIO

import structlog
from structlog.types import Processor, EventDict

DEFAULT_LOG_LEVEL = "WARNING"
IGNORED_LOGGERS = [
    "aiohttp",
    "asyncio"
]


def add_timestamp(_, __, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to the event dict."""
    if 'timestamp' not in event_dict:
        event_dict['timestamp'] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


def add_caller_info(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Add caller info to the event dict."""
    frame = inspect.currentframe()
    if frame is not None:
        caller = frame.f_back
        while caller and ("structlog" in caller.f_code.co_filename
                          or caller.f_code.co_filename == __file__):
            caller = caller.f_back
        if caller:
            event_dict.update({
                "module": caller.f_code.co_name,
                "line": caller.f_lineno,
                "file": caller.f_code.co_filename.split("/")[-1]
            })
    return event_dict


def drop_ignored(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Drop events from noisy third-party loggers."""
    logger_name = getattr(logger, "name", "") or ""
    if any(logger_name.startswith(ignored) for ignored in IGNORED_LOGGERS):
        raise structlog.DropEvent
    return event_dict


class CompactJSONRenderer:
    """Single-line JSON renderer with minimal output."""
    def __call__(self, _: Any, __: str, event_dict: EventDict) -> str:
        items = {
            "ts": event_dict.pop("timestamp", None),
            "lvl": event_dict.pop("level", "???"),
            "msg": event_dict.pop("event", ""),
            **{k: v for k, v in event_dict.items() if k in ('module', 'line', 'file')}
        }
        if other := {k: v for k, v in event_dict.items() if k not in ('module', 'line', 'file')}:
            items["data"] = other
        return json.dumps(items, separators=(',', ':'), default=str)


def configure_logging(level: str = DEFAULT_LOG_LEVEL, stream: Optional[TextIO] = None) -> None:
    """Configure structured logging for the application.

    This sets up:
    - interactive STDERR: colored console rendering
    - anything else: compact single-line JSON
    """
    stream = stream or sys.stderr
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, level),
        force=True
    )
    for ignored in IGNORED_LOGGERS:
        logging.getLogger(ignored).setLevel(logging.WARNING)

    json_processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        drop_ignored,
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_caller_info,
        CompactJSONRenderer()
    ]

    console_processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        drop_ignored,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(colors=True)
    ]

    structlog.configure(
        processors=console_processors if stream.isatty() else json_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
