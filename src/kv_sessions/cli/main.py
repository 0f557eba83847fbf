"""CLI entry point for kv-sessions.

Invoked as::

    kv-sessions [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m kv_sessions.cli.main

Commands
--------
- version   — Show version information
- create    — Start a session for a user and print its ID
- validate  — Check a user/session pair (refreshes its TTL)
- show      — Display a user's stored session
- delete    — Remove a user's session
- count     — Print the number of active sessions
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
from redis.exceptions import RedisError
from rich.console import Console
from rich.table import Table

from kv_sessions.config import RedisConfig, SessionConfig
from kv_sessions.convenience import create
from kv_sessions.errors import BackendConnectionError, ConfigurationError, InvalidSessionError
from kv_sessions.session.manager import SessionManager
from kv_sessions.storage.base import KeyValueBackend

console = Console()

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Backend factory
# ---------------------------------------------------------------------------


def _make_backend(storage: str, config: SessionConfig) -> KeyValueBackend:
    """Instantiate the requested backend.

    Parameters
    ----------
    storage:
        Backend name: ``"redis"`` or ``"memory"``.
    config:
        Resolved configuration; ``config.redis`` is used for ``"redis"``.

    Returns
    -------
    KeyValueBackend
        A configured, not yet initialised, backend.
    """
    from kv_sessions.storage.memory import InMemoryBackend
    from kv_sessions.storage.redis import RedisBackend

    if storage == "memory":
        return InMemoryBackend()
    if storage == "redis":
        if config.redis is None:
            raise ConfigurationError("Redis config is not defined")
        return RedisBackend(config.redis)
    raise ConfigurationError(f"Unknown storage backend: {storage!r}")


def _load_config(
    config_path: str | None,
    host: str | None,
    port: int | None,
    no_expiration: bool,
    expiration_minutes: int | None,
) -> SessionConfig:
    """Merge the optional YAML file with command-line overrides."""
    config = SessionConfig.from_yaml(config_path) if config_path else SessionConfig()
    updates: dict[str, Any] = {}
    if no_expiration:
        updates["expiration_enabled"] = False
    if expiration_minutes is not None:
        updates["expiration_in_minutes"] = expiration_minutes
    if host is not None or port is not None or config.redis is None:
        redis_data = config.redis.model_dump() if config.redis else {"host": "localhost"}
        if host is not None:
            redis_data["host"] = host
        if port is not None:
            redis_data["port"] = port
        updates["redis"] = RedisConfig.model_validate(redis_data)
    if not updates:
        return config
    return SessionConfig.from_mapping({**config.model_dump(), **updates})


def _run(ctx: click.Context, action: Callable[[SessionManager], Awaitable[T]]) -> T:
    """Build a manager from the group options, run ``action``, clean up."""
    settings: dict[str, Any] = ctx.obj

    async def _main() -> T:
        backend = _make_backend(settings["storage"], settings["config"])
        try:
            manager = await create(settings["config"], backend=backend)
            result = await action(manager)
            await manager.wait_for_refreshes()
            return result
        finally:
            await backend.close()

    try:
        return asyncio.run(_main())
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(2)
    except BackendConnectionError as exc:
        console.print(f"[red]Cannot reach the session store:[/red] {exc}")
        sys.exit(1)
    except RedisError as exc:
        console.print(f"[red]Session store error:[/red] {exc}")
        sys.exit(1)


def _parse_params(params: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``KEY=VALUE`` pairs into a dict; JSON values are decoded."""
    parsed: dict[str, Any] = {}
    for item in params:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="--param")
        try:
            parsed[key] = json.loads(value)
        except json.JSONDecodeError:
            parsed[key] = value
    return parsed


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="kv-sessions")
@click.option(
    "--storage",
    default="redis",
    show_default=True,
    type=click.Choice(["redis", "memory"], case_sensitive=False),
    help="Backend to use.",
)
@click.option("--host", default=None, help="Redis host (default: localhost).")
@click.option("--port", default=None, type=int, help="Redis port (default: 6379).")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML configuration file.",
)
@click.option("--no-expiration", is_flag=True, help="Store sessions without a TTL.")
@click.option(
    "--expiration-minutes",
    default=None,
    type=click.IntRange(min=1),
    help="Session lifetime in minutes.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    storage: str,
    host: str | None,
    port: int | None,
    config_path: str | None,
    no_expiration: bool,
    expiration_minutes: int | None,
    verbose: bool,
) -> None:
    """User session management over a key-value store"""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    try:
        config = _load_config(config_path, host, port, no_expiration, expiration_minutes)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(2)
    ctx.ensure_object(dict)
    ctx.obj["storage"] = storage.lower()
    ctx.obj["config"] = config


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from kv_sessions import __version__

    console.print(f"[bold]kv-sessions[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


@cli.command(name="create")
@click.argument("user_id", type=int)
@click.option(
    "--param",
    "params",
    multiple=True,
    help="Session parameter as KEY=VALUE (repeatable).",
)
@click.pass_context
def create_command(ctx: click.Context, user_id: int, params: tuple[str, ...]) -> None:
    """Start a new session for USER_ID and print its ID."""
    parameters = _parse_params(params)
    session_id = _run(ctx, lambda manager: manager.create_session(user_id, parameters))
    console.print(f"[green]Session created:[/green] {session_id}")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("user_id", type=int)
@click.argument("session_id", type=int)
@click.pass_context
def validate_command(ctx: click.Context, user_id: int, session_id: int) -> None:
    """Check that SESSION_ID is USER_ID's current session."""
    try:
        _run(ctx, lambda manager: manager.validate_session(user_id, session_id))
    except InvalidSessionError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)
    console.print(f"[green]Valid session:[/green] userId={user_id}, sessionId={session_id}")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@cli.command(name="show")
@click.argument("user_id", type=int)
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of a table.")
@click.pass_context
def show_command(ctx: click.Context, user_id: int, json_output: bool) -> None:
    """Display the stored session of USER_ID."""
    session = _run(ctx, lambda manager: manager.get_session_data(user_id))
    if session is None:
        console.print(f"[red]No session for user:[/red] {user_id}")
        sys.exit(1)

    if json_output:
        console.print_json(session.serialize())
        return

    table = Table(title=f"Session of user {user_id}", show_lines=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("userId", str(session.user_id))
    table.add_row("sessionId", str(session.session_id))
    table.add_row("parameters", json.dumps(session.parameters, indent=2, default=str))
    console.print(table)


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


@cli.command(name="delete")
@click.argument("user_id", type=int)
@click.pass_context
def delete_command(ctx: click.Context, user_id: int) -> None:
    """Remove the session of USER_ID (no error if there is none)."""
    _run(ctx, lambda manager: manager.delete_session(user_id))
    console.print(f"[green]Session deleted for user:[/green] {user_id}")


# ---------------------------------------------------------------------------
# count
# ---------------------------------------------------------------------------


@cli.command(name="count")
@click.pass_context
def count_command(ctx: click.Context) -> None:
    """Print the number of active sessions."""
    count = _run(ctx, lambda manager: manager.get_active_sessions_count())
    console.print(f"Active sessions: [bold]{count}[/bold]")


if __name__ == "__main__":
    cli()
