# src/tctree/cli/utils.py

import logging

import attrs
import click
import structlog

from tctree.config import ReporterConfig, load_config
from tctree.exceptions import ConfigurationError
from tctree.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


def logging_options(f):
    """
    Adds --log-level, --log-file and --json-logs.

    --log-level has no envvar of its own: TCTREE_LOG_LEVEL is read by
    load_config() and the flag only overrides it.
    """
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        help="Override the log level from TCTREE_LOG_LEVEL.",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="TCTREE_LOG_FILE",
        help="Also write logs to this file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=False,
        envvar="TCTREE_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def load_cli_config(log_level: str | None = None) -> ReporterConfig:
    """Reads the TCTREE_* environment, applying a --log-level override on top."""
    try:
        config = load_config()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    if log_level:
        config = attrs.evolve(config, log_level=log_level.upper())
    return config


def setup_cli_logging(config: ReporterConfig, log_file: str | None, json_logs: bool) -> None:
    core_setup_logging(
        level=config.numeric_log_level,
        json_logs=json_logs,
        log_file=log_file,
    )
    log.debug(
        "CLI logging initialized",
        level=config.log_level,
        file=log_file or "console",
        json=json_logs,
    )

# ⚙️🛠️
