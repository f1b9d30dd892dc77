#
# config/loader.py
#
"""
Builds a ReporterConfig from environment variables.
"""

import os
from collections.abc import Mapping

from tctree.config.models import ReporterConfig
from tctree.exceptions import ConfigurationError
from tctree.telemetry import get_logger

log = get_logger("config.loader")

ENV_PREFIX = "TCTREE_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Environment variable {name} must be a boolean, got '{raw}'")


def load_config(environ: Mapping[str, str] | None = None) -> ReporterConfig:
    """
    Reads TCTREE_ID_PREFIX, TCTREE_STREAM, TCTREE_FLUSH and TCTREE_LOG_LEVEL.

    Unset or empty variables fall back to the model defaults.

    Raises:
        ConfigurationError: if a value fails validation.
    """
    env = os.environ if environ is None else environ
    kwargs: dict[str, object] = {}

    if env.get(f"{ENV_PREFIX}ID_PREFIX"):
        kwargs["id_prefix"] = env[f"{ENV_PREFIX}ID_PREFIX"]
    if env.get(f"{ENV_PREFIX}STREAM"):
        kwargs["stream"] = env[f"{ENV_PREFIX}STREAM"].strip().lower()
    if env.get(f"{ENV_PREFIX}FLUSH"):
        kwargs["flush"] = _parse_bool(f"{ENV_PREFIX}FLUSH", env[f"{ENV_PREFIX}FLUSH"])
    if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
        kwargs["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"].strip().upper()

    try:
        config = ReporterConfig(**kwargs)
    except ValueError as e:
        log.error("Invalid reporter configuration", error=str(e))
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    log.debug("Reporter configuration loaded", **{k: str(v) for k, v in kwargs.items()})
    return config


# 🔼⚙️
