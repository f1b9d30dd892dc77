# src/tctree/telemetry/__init__.py

"""
Logging setup for tctree.
"""

from tctree.telemetry.logger import (
    BASE_LOGGER_NAME,
    StructLogger,
    get_logger,
    set_library_log_level,
    setup_logging,
)

__all__ = ["BASE_LOGGER_NAME", "StructLogger", "get_logger", "set_library_log_level", "setup_logging"]

# 🔼⚙️
