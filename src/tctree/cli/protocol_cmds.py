# src/tctree/cli/protocol_cmds.py

import sys

import click
import structlog

from tctree.exceptions import ProtocolError
from tctree.protocol import ProtocolValidator, escape_attribute_value, unescape_attribute_value
from tctree.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.protocol")


@click.command(name="escape")
@click.argument("text")
def escape_cli(text: str):
    """Print TEXT escaped as a service-message attribute value."""
    click.echo(escape_attribute_value(text))


@click.command(name="unescape")
@click.argument("text")
def unescape_cli(text: str):
    """Print the decoded form of an escaped attribute value."""
    try:
        click.echo(unescape_attribute_value(text))
    except ProtocolError as e:
        raise click.ClickException(str(e)) from e


@click.command(name="validate")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--allow-unfinished",
    is_flag=True,
    default=False,
    help="Do not fail when nodes were never finished.",
)
def validate_cli(source, allow_unfinished: bool):
    """Check a captured protocol stream (FILE or stdin) for consistency."""
    log.info("Validating protocol stream", source=getattr(source, "name", "-"))

    validator = ProtocolValidator()
    validator.feed_lines(line.rstrip("\r\n") for line in source)
    report = validator.finish()

    for problem in report.problems:
        click.echo(f"error: {problem}")
    if report.unfinished:
        prefix = "warning" if allow_unfinished else "error"
        click.echo(f"{prefix}: unfinished nodes: {', '.join(report.unfinished)}")

    failed = bool(report.problems) or (bool(report.unfinished) and not allow_unfinished)
    click.echo(
        f"{report.message_count} service messages, {len(report.problems)} problems, "
        f"{len(report.unfinished)} unfinished"
    )
    log.info("Validation finished", ok=not failed)
    if failed:
        sys.exit(1)

# 🔼⚙️
