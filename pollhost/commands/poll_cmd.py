"""CLI handlers for poll commands."""

from __future__ import annotations

import asyncio

import click

from pollhost.errors import PollNotFoundError, StartupError


@click.group("poll")
def poll_group():
    """Inspect the live poll."""
    pass


@poll_group.command("show")
@click.option("--key", default=None, help="Poll document key (default: poll.key from config)")
@click.pass_context
def poll_show(ctx, key: str | None):
    """Print the current poll question and tallies."""

    async def _show() -> int:
        from pollhost.context import AppContext

        app = AppContext(config_path=ctx.obj.get("config_path"))
        try:
            await app.initialize()
            poll = await app.poll_repo.get(key or app.config.poll.key)
        except (StartupError, PollNotFoundError) as e:
            click.echo(f"Error: {e}", err=True)
            return 1
        finally:
            await app.close()

        click.echo(poll.summary_text(), nl=False)
        click.echo(f"Total votes: {poll.total_votes}")
        return 0

    ctx.exit(asyncio.run(_show()))
