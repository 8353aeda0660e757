"""Command line interface for vtranscode.

``main`` is the click group behind the ``vtranscode`` console script. The
group options set up logging once; each subcommand loads the rest of the
configuration itself from ``ctx.obj["config_path"]``.
"""

import logging
from pathlib import Path

import click

from vtranscode.cli.probe import probe_command
from vtranscode.cli.screenshot import screenshot_command
from vtranscode.cli.transcode import transcode_command

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")

# Logging is process-wide; repeated invocations in one process keep the first setup
_logging_ready = False


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Apply the logging flags on top of the configured logging settings."""
    global _logging_ready
    if _logging_ready:
        return

    from vtranscode.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_ready = True
    logger.debug("Logging configured", extra={"config_path": str(config_path)})


@click.group()
@click.version_option(package_name="vtranscode")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Config file (default: ~/.vtranscode/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level; overrides the config file.",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Write logs to this file instead of stderr.",
)
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Transcode media with ffmpeg, reporting progress and validating output."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _configure_logging(config_path, log_level, log_file, log_json)


for _command in (transcode_command, screenshot_command, probe_command):
    main.add_command(_command)
