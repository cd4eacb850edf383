"""CLI handlers for running the bridge: run, drain."""

from __future__ import annotations

import asyncio
import signal

import click

from pollhost.errors import PollhostError


def _run(coro):
    return asyncio.run(coro)


@click.command("run")
@click.pass_context
def run_command(ctx):
    """Drain the backlog, then reply to messages and host the poll."""

    async def _start() -> int:
        from pollhost.context import AppContext

        app = AppContext(config_path=ctx.obj.get("config_path"))
        try:
            await app.initialize(require_change_streams=True)
            click.echo(f"MongoDB connected ({app.config.mongodb.database})")
            bridge = app.build_bridge()

            stop_event = asyncio.Event()

            def _handle_signal(signum, frame):
                click.echo(f"\nReceived signal {signum}, shutting down...")
                stop_event.set()

            signal.signal(signal.SIGTERM, _handle_signal)
            signal.signal(signal.SIGINT, _handle_signal)

            bridge_task = asyncio.create_task(bridge.run())
            stop_task = asyncio.create_task(stop_event.wait())
            await asyncio.wait({bridge_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

            if not bridge_task.done():
                bridge_task.cancel()
                try:
                    await bridge_task
                except asyncio.CancelledError:
                    pass
                return 0

            stop_task.cancel()
            bridge_task.result()
            click.echo("All workers finished")
            return 0
        except PollhostError as e:
            click.echo(f"Error: {e}", err=True)
            return 1
        finally:
            await app.close()
            click.echo("Bridge stopped")

    ctx.exit(_run(_start()))


@click.command("drain")
@click.pass_context
def drain_command(ctx):
    """Mark every unprocessed message as processed without replying."""

    async def _drain() -> int:
        from pollhost.context import AppContext

        app = AppContext(config_path=ctx.obj.get("config_path"))
        try:
            await app.initialize()
            pending = await app.message_repo.count_unprocessed()
            if not pending:
                click.echo("No unprocessed messages")
                return 0
            count = await app.message_worker.drain_backlog()
            click.echo(f"Drained {count} message(s)")
            return 0
        except PollhostError as e:
            click.echo(f"Error: {e}", err=True)
            return 1
        finally:
            await app.close()

    ctx.exit(_run(_drain()))
