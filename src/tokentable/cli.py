# src/tokentable/cli.py
"""tokentable Command Line Interface.

Operational access to an authorization code table: inspect, remove and
revoke codes without going through the identity server.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import typer

from tokentable import __version__
from tokentable.contracts.errors import (
    ConfigurationError,
    PartialRevokeError,
    TokenStoreError,
)
from tokentable.core.config import TokenTableSettings, load_settings
from tokentable.core.logging import configure_logging
from tokentable.store.authorization_codes import AuthorizationCodeStore

R = TypeVar("R")

app = typer.Typer(
    name="tokentable",
    help="tokentable: authorization codes on Azure Table Storage.",
    no_args_is_help=True,
)

SETTINGS_OPTION = typer.Option(
    ...,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tokentable version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """tokentable: authorization codes on Azure Table Storage."""
    pass


def _load(settings_path: str) -> TokenTableSettings:
    """Load settings or exit with readable errors."""
    try:
        config = load_settings(Path(settings_path))
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
        raise typer.Exit(1) from None
    except ConfigurationError as e:
        typer.echo("Configuration errors:", err=True)
        for line in e.errors:
            typer.echo(f"  - {line}", err=True)
        raise typer.Exit(1) from None

    configure_logging(config.logging.level, json_output=config.logging.json_output)
    return config


def _open_store(config: TokenTableSettings) -> AuthorizationCodeStore:
    return AuthorizationCodeStore.from_settings(config)


def _run(
    config: TokenTableSettings,
    operation: Callable[[AuthorizationCodeStore], Awaitable[R]],
) -> R:
    """Run one store operation and close the store afterwards."""

    async def runner() -> R:
        async with _open_store(config) as store:
            return await operation(store)

    try:
        return asyncio.run(runner())
    except PartialRevokeError:
        raise
    except TokenStoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


@app.command()
def fetch(
    key: str = typer.Argument(..., help="Authorization code key."),
    settings: str = SETTINGS_OPTION,
) -> None:
    """Show the authorization code stored under KEY."""
    config = _load(settings)
    code = _run(config, lambda store: store.fetch(key))
    if code is None:
        typer.echo(f"Not found: {key}", err=True)
        raise typer.Exit(1)
    _echo_json(code.model_dump(mode="json"))


@app.command()
def remove(
    key: str = typer.Argument(..., help="Authorization code key."),
    settings: str = SETTINGS_OPTION,
) -> None:
    """Remove the authorization code stored under KEY (idempotent)."""
    config = _load(settings)
    _run(config, lambda store: store.remove(key))
    typer.echo(f"Removed: {key}")


@app.command("list")
def list_codes(
    owner: str = typer.Argument(..., help="Subject id to list codes for."),
    settings: str = SETTINGS_OPTION,
) -> None:
    """List every authorization code issued to OWNER."""
    config = _load(settings)
    codes = _run(config, lambda store: store.list_by_owner(owner))
    _echo_json([code.model_dump(mode="json") for code in codes])


@app.command()
def revoke(
    owner: str = typer.Argument(..., help="Subject id."),
    issuer: str = typer.Argument(..., help="Client id."),
    settings: str = SETTINGS_OPTION,
) -> None:
    """Revoke every code issued to OWNER by ISSUER.

    Not atomic: on partial failure some codes may already be gone.
    Re-running the command is safe.
    """
    config = _load(settings)
    try:
        result = _run(
            config, lambda store: store.revoke_by_owner_and_issuer(owner, issuer)
        )
    except PartialRevokeError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"  Deleted: {len(e.result.deleted_keys)}", err=True)
        typer.echo(f"  Failed: {', '.join(e.result.failed_keys)}", err=True)
        typer.echo("Re-run the command to retry the remaining codes.", err=True)
        raise typer.Exit(1) from None

    _echo_json(
        {
            "owner_id": result.owner_id,
            "issuer_id": result.issuer_id,
            "matched": result.matched_count,
            "deleted": result.deleted_keys,
        }
    )


@app.command("ensure-table")
def ensure_table(
    settings: str = SETTINGS_OPTION,
) -> None:
    """Create the backing table if it does not exist."""
    config = _load(settings)
    _run(config, lambda store: store.ensure_table())
    typer.echo(f"Table ready: {config.storage.table_name}")


if __name__ == "__main__":
    app()
