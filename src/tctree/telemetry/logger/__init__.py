# src/tctree/telemetry/logger/__init__.py

from tctree.telemetry.logger.base import (
    BASE_LOGGER_NAME,
    StructLogger,
    get_logger,
    set_library_log_level,
    setup_logging,
)

__all__ = ["BASE_LOGGER_NAME", "StructLogger", "get_logger", "set_library_log_level", "setup_logging"]

# 🔼⚙️
