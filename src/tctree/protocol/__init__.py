#
# src/tctree/protocol/__init__.py
#
"""
Service-message protocol helpers: escaping, formatting and parsing.
"""
from .escaping import escape_attribute_value, is_escaping_needed, unescape_attribute_value
from .messages import MESSAGE_PREFIX, format_message
from .parser import ProtocolValidator, ServiceMessage, ValidationReport, parse_message

__all__ = [
    "MESSAGE_PREFIX",
    "ProtocolValidator",
    "ServiceMessage",
    "ValidationReport",
    "escape_attribute_value",
    "format_message",
    "is_escaping_needed",
    "parse_message",
    "unescape_attribute_value",
]

# 🔼⚙️
