# src/rprelay/cli/launch_cmds.py

from pathlib import Path

import click
import structlog

from rprelay.cli.utils import logging_options, setup_logging_from_context
from rprelay.exceptions import ConfigurationError
from rprelay.phase import DEFAULT_LAUNCH_ID_FILE, Phase, PhaseResolver
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.cli.launch")

PHASE_CHOICES = click.Choice([p.value for p in Phase], case_sensitive=False)


@click.group(name="launch")
def launch_cli():
    """Commands for the launch id shared between split phases."""
    pass


@launch_cli.command(name="show")
@click.option(
    "-p",
    "--phase",
    type=PHASE_CHOICES,
    default=Phase.TEST.value,
    show_default=True,
    envvar="RP_PHASE",
    help="Phase whose view of the launch id to show.",
)
@click.option(
    "-f",
    "--file",
    "launch_id_file",
    default=DEFAULT_LAUNCH_ID_FILE,
    show_default=True,
    envvar="RP_LAUNCH_ID_FILE",
    help="Launch id file, relative to the working directory unless absolute.",
)
@logging_options
@click.pass_context
def show_launch(ctx: click.Context, phase: str, launch_id_file: str, **kwargs):
    """Print the launch id a phase would report to."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    resolver = PhaseResolver(phase, launch_id_file, cwd=Path.cwd())

    if not resolver.requires_launch_id:
        click.echo(f"Phase '{resolver.phase.value}' creates its own launch; nothing persisted to read.")
        return

    try:
        launch_id = resolver.resolve_launch_id()
    except ConfigurationError as e:
        log.error("Failed to resolve launch id", error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(launch_id)

# 🔼⚙️
