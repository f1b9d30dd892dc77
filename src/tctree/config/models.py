#
# config/models.py
#
"""
Attrs-based data models for tctree reporter configuration.
"""

import logging
from typing import Any

from attrs import define, field

STREAM_CHOICES = ("stdout", "stderr")


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_stream(inst: Any, attr: Any, value: str) -> None:
    if value not in STREAM_CHOICES:
        raise ValueError(f"Field '{attr.name}' must be one of {list(STREAM_CHOICES)}, got '{value}'")


def _validate_id_prefix(inst: Any, attr: Any, value: str | None) -> None:
    """Prefix ends up inside node ids, so it must be a non-blank single token."""
    if value is None:
        return
    if not isinstance(value, str) or not value.strip() or any(ch.isspace() for ch in value):
        raise ValueError(f"Field '{attr.name}' must be a non-empty string without whitespace, got {value!r}")


@define(frozen=True, slots=True)
class ReporterConfig:
    """Settings for one reporting session."""
    id_prefix: str | None = field(default=None, validator=_validate_id_prefix)
    stream: str = field(default="stdout", validator=_validate_stream)
    flush: bool = field(default=True)
    log_level: str = field(default="WARNING", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


# 🔼⚙️
