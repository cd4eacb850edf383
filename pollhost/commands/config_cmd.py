"""CLI handlers for config commands."""

from __future__ import annotations

import json

import click

from pollhost.config import init_config, load_config, resolve_config_path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


@click.group("config")
def config_group():
    """Manage configuration."""
    pass


@config_group.command("init")
@click.pass_context
def config_init(ctx):
    """Create default configuration file."""
    path = init_config(ctx.obj.get("config_path"))
    click.echo(f"Configuration created at: {path}")


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Show current configuration."""
    config = load_config(ctx.obj.get("config_path"))
    click.echo(f"Config file: {config.config_path}")
    click.echo(f"  MongoDB: {config.mongodb.uri}/{config.mongodb.database}")
    click.echo(
        f"  Collections: messages={config.collections.messages}, "
        f"replies={config.collections.replies}, polls={config.collections.polls}"
    )
    click.echo(f"  Poll key: {config.poll.key}")
    click.echo(
        f"  Host: provider={config.host.provider}, temperature={config.host.temperature}, "
        f"sentinel={config.host.sentinel_id}"
    )
    listen = f"{config.host.listen_timeout}s" if config.host.listen_timeout else "none"
    click.echo(f"  Listen timeout: {listen}")
    m = config.monitor
    click.echo(
        f"  Monitor: tick={m.tick_interval}s, idle>{m.idle_after}s, "
        f"cooldown={m.idle_cooldown}s, poll update={m.poll_update_after}s"
    )
    click.echo(f"  On worker failure: {config.supervisor.on_failure}")

    click.echo("\n  Providers:")
    for name, prov in config.providers.items():
        has_key = "configured" if prov.api_key else "not set"
        click.echo(f"    {name}: model={prov.default_model or '-'}, key={has_key}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx, key: str, value: str):
    """Set a configuration value.

    Modifies the TOML config file. Key uses dot notation, e.g.:
    host.provider, monitor.tick_interval, supervisor.on_failure
    """
    import tomli_w

    path = resolve_config_path(ctx.obj.get("config_path"))
    if not path.exists():
        click.echo("No config file found. Run 'pollhost config init' first.", err=True)
        return

    with open(path, "rb") as f:
        data = tomllib.load(f)

    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        if part not in target:
            target[part] = {}
        target = target[part]

    final_key = parts[-1]
    target[final_key] = _coerce(value)

    with open(path, "wb") as f:
        tomli_w.dump(data, f)

    click.echo(f"Set {key} = {value}")


def _coerce(value: str):
    """Best-effort conversion of a CLI string to a TOML value."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        pass
    if value.startswith("[") or value.startswith("{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value
