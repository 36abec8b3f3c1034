# src/rprelay/cli/main.py

"""
Main CLI entry point for rprelay using Click.
Handles global options like logging level.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from rprelay.cli.config_cmds import config_cli
from rprelay.cli.launch_cmds import launch_cli
from rprelay.cli.utils import logging_options, setup_logging_from_context
from rprelay.telemetry import StructLogger

try:
    __version__ = version("rprelay")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("rprelay.cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="rprelay")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    rprelay: report test framework runs to ReportPortal.

    Inspect configuration and the launch id shared between split phases.
    """
    ctx.ensure_object(dict)

    ctx.obj["LOG_LEVEL"] = log_level
    ctx.obj["LOG_FILE"] = log_file
    ctx.obj["JSON_LOGS"] = json_logs if json_logs is not None else False

    setup_logging_from_context(ctx)
    log.debug(
        "Main CLI group initialized",
        log_level=log_level,
        log_file=log_file,
        json_logs=json_logs,
    )


cli.add_command(config_cli)
cli.add_command(launch_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
