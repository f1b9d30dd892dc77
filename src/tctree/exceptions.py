# src/tctree/exceptions.py

"""
Custom exceptions for tctree.

Every error raised by the tree is a caller contract violation; nothing in the
core catches or retries them.
"""

from typing import Any


class TreeError(Exception):
    """Base class for all tctree errors."""

    pass


class IllegalStateError(TreeError):
    """Raised when a node operation is attempted from a state that forbids it."""

    def __init__(self, message: str, node_id: Any = None, state: Any = None):
        self.node_id = node_id
        self.state = state
        full_message = message
        if node_id is not None:
            full_message += f" (node: '{node_id}'"
            if state is not None:
                full_message += f", state: {state}"
            full_message += ")"
        super().__init__(full_message)


class AlreadySetError(TreeError):
    """Raised when a leaf test outcome is assigned more than once."""

    def __init__(self, message: str, node_id: Any = None):
        self.node_id = node_id
        super().__init__(message if node_id is None else f"{message} (node: '{node_id}')")


class MissingOverrideError(TreeError, NotImplementedError):
    """Raised when a node variant does not supply a required hook."""

    pass


class ProtocolError(TreeError):
    """Raised when a protocol line or attribute value cannot be decoded."""

    def __init__(self, message: str, line: str | None = None):
        self.line = line
        super().__init__(message)
        if line is not None and hasattr(self, "add_note"):
            self.add_note(f"Offending line: {line!r}")


class ConfigurationError(TreeError):
    """Raised for invalid reporter configuration."""

    pass


# 🔼⚙️
