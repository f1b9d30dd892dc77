# src/tctree/cli/main.py

"""
Command line entry point: escaping helpers and a protocol stream checker.
"""

from importlib.metadata import PackageNotFoundError, version

import click

from tctree.cli.protocol_cmds import escape_cli, unescape_cli, validate_cli
from tctree.cli.utils import load_cli_config, logging_options, setup_cli_logging

try:
    __version__ = version("tctree")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="tctree")
@logging_options
def cli(log_level: str | None, log_file: str | None, json_logs: bool):
    """
    tctree: ##teamcity service-message toolkit.

    Escape and decode attribute values, and check captured test-run output.
    Settings come from TCTREE_* environment variables.
    """
    config = load_cli_config(log_level)
    setup_cli_logging(config, log_file, json_logs)


cli.add_command(escape_cli)
cli.add_command(unescape_cli)
cli.add_command(validate_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
