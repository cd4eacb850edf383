"""Click CLI definitions - main entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from pollhost.commands.config_cmd import config_group
from pollhost.commands.poll_cmd import poll_group
from pollhost.commands.run_cmd import drain_command, run_command


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $POLLHOST_CONFIG or ~/.config/pollhost/config.toml)",
)
@click.pass_context
def cli(ctx, debug: bool, config_path: Path | None) -> None:
    """pollhost - LLM host for a live chat poll backed by MongoDB."""
    load_dotenv()
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # pymongo's own DEBUG output drowns out ours.
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = config_path


cli.add_command(run_command, "run")
cli.add_command(drain_command, "drain")
cli.add_command(poll_group, "poll")
cli.add_command(config_group, "config")


if __name__ == "__main__":
    cli()
