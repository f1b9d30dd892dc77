# src/tctree/telemetry/logger/processors.py

import logging

from structlog.typing import EventDict, WrappedLogger

LOG_EMOJIS = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}


def add_emoji_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event text with an emoji for its level."""
    level = logging.getLevelName(str(event_dict.get("level", method_name)).upper())
    emoji = LOG_EMOJIS.get(level) if isinstance(level, int) else None
    event = event_dict.get("event")
    if emoji and isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict

# 🔼⚙️
