# src/tctree/telemetry/logger/base.py

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

from tctree.telemetry.logger.processors import add_emoji_processor

BASE_LOGGER_NAME = "tctree"


class LevelFilteringBoundLogger(structlog.stdlib.BoundLogger):
    """Drops events the wrapped stdlib logger would discard before any processor runs."""

    def _proxy_to_logger(self, method_name: str, event: str | None = None, *event_args: str, **event_kw):
        level = logging.getLevelName(method_name.upper())
        if isinstance(level, int) and not self._logger.isEnabledFor(level):
            return None
        return super()._proxy_to_logger(method_name, event, *event_args, **event_kw)


def get_logger(name: str) -> LevelFilteringBoundLogger:
    """
    Library logger routed through stdlib logging.

    Until setup_logging() runs, events are subject to the stdlib defaults
    (WARNING and above, on stderr), so an embedding test process never sees
    debug chatter mixed into its stdout protocol stream. Events below the
    stdlib logger's effective level are dropped before structlog formats them.
    """
    return structlog.wrap_logger(
        logging.getLogger(f"{BASE_LOGGER_NAME}.{name}"),
        wrapper_class=LevelFilteringBoundLogger,
    )


def set_library_log_level(level: int) -> None:
    """Sets the threshold for every tctree logger without touching handlers."""
    logging.getLogger(BASE_LOGGER_NAME).setLevel(level)


def setup_logging(
    level: int = logging.WARNING,
    json_logs: bool = False,
    log_file: str | None = None,
    file_only: bool = False,
) -> None:
    """
    Configures structlog for the entire application.

    Console logs go to stderr: stdout is reserved for protocol lines.
    """
    log_level_name = logging.getLevelName(level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_emoji_processor,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=shared_processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if json_logs:
        final_renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        final_renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(processor=final_renderer)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    slog = structlog.get_logger(BASE_LOGGER_NAME)

    if not file_only:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
        slog.debug("StreamHandler added for console output.")

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_formatter = structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(sort_keys=True)
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)
            slog.info(f"File logging enabled to '{log_file}'")
        except OSError as e:
            slog.error(f"Failed to setup file logging to '{log_file}': {e}", exc_info=True)

    slog.debug(
        "structlog logging initialization complete",
        log_level=log_level_name,
        json_console_format=json_logs,
        console_output_enabled=not file_only,
        log_file=log_file or "None",
    )


StructLogger = FilteringBoundLogger

# 🔼⚙️
