from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

import structlog
from structlog.typing import EventDict, Processor

from backend.bridge.config import BridgeSettings
from backend.bridge.telemetry import TELEMETRY_LOGGER_NAME

ROOT_LOGGER_NAME = "newstube"
LOG_FILE_NAME = "newstube.log"
TELEMETRY_LOG_FILE_NAME = "newstube-telemetry.log"

# Accessor lookups and raw HTTP exchanges are DEBUG-level chatter: file only.
FILE_ONLY_LOGGERS: tuple[str, ...] = ("newstube.prober", "newstube.transport")
LOGGER_LEVELS: dict[str, int] = {
    "newstube.prober": logging.DEBUG,
    "newstube.transport": logging.DEBUG,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}
# Keys every file record carries so per-call lines can be grouped.
CALL_CONTEXT_KEYS: tuple[str, ...] = ("http_request_id", "method_name", "method_invocation_id")


class ConsoleScopeFilter(logging.Filter):
    """Keep DEBUG/INFO lines of the named loggers (and their children) off the console."""

    def __init__(self, logger_names: Iterable[str]) -> None:
        super().__init__()
        self._logger_names = tuple(logger_names)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.WARNING:
            return True
        return not any(
            record.name == name or record.name.startswith(f"{name}.")
            for name in self._logger_names
        )


def configure_application_logging(settings: BridgeSettings) -> Path:
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / LOG_FILE_NAME
    telemetry_log_file = settings.log_dir / TELEMETRY_LOG_FILE_NAME

    _configure_structlog()

    console_stream = sys.stdout
    console_handler = logging.StreamHandler(stream=console_stream)
    console_handler.setLevel(resolve_log_level(settings.log_level))
    console_handler.setFormatter(_console_formatter(colors=stream_supports_color(console_stream)))
    console_handler.addFilter(ConsoleScopeFilter(FILE_ONLY_LOGGERS))

    _attach_handlers(
        logging.getLogger(ROOT_LOGGER_NAME),
        level=logging.DEBUG,
        handlers=[console_handler, _file_handler(log_file, logging.DEBUG)],
    )
    _attach_handlers(
        logging.getLogger(TELEMETRY_LOGGER_NAME),
        level=logging.INFO,
        handlers=[_file_handler(telemetry_log_file, logging.INFO)],
    )
    for logger_name, level in LOGGER_LEVELS.items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger(ROOT_LOGGER_NAME).info(
        "logging configured console_level=%s path=%s telemetry_path=%s file_only=%s",
        settings.log_level.upper(),
        log_file,
        telemetry_log_file,
        ",".join(FILE_ONLY_LOGGERS),
    )
    return log_file


def resolve_log_level(raw_level: str) -> int:
    resolved = getattr(logging, raw_level.strip().upper(), None)
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def stream_supports_color(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except Exception:
        return False


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _attach_handlers(
    logger: logging.Logger,
    *,
    level: int,
    handlers: list[logging.Handler],
) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    for handler in handlers:
        logger.addHandler(handler)


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                _add_call_context,
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
        )
    )
    return handler


def _console_formatter(*, colors: bool) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_pre_chain(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
    )


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]


def _add_call_context(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    # Method calls each run on a thread named after the method.
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        event_dict["thread_name"] = record.threadName
        event_dict["lineno"] = record.lineno
    for key in CALL_CONTEXT_KEYS:
        event_dict.setdefault(key, None)
    return event_dict
