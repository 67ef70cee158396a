"""
StateBridge Command-Line Interface

Starts the HTTP façade and drives its account API from a shell.
"""

import json
import os
import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import httpx
import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from statebridge import __version__
from statebridge.core.config_manager import ConfigManager
from statebridge.core.runtime import create_app


CONFIG_FILE_ENV = "STATEBRIDGE_CONFIG_FILE"


def create_app_from_env() -> FastAPI:
    """Factory for ``--reload`` mode, where only an import string can be passed."""
    return create_app(config_file=os.getenv(CONFIG_FILE_ENV))


@click.group()
@click.version_option(version=__version__, prog_name="statebridge")
@click.pass_context
def cli(ctx):
    """
    StateBridge - HTTP façade over a sidecar state store.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind to (default: from configuration, 0.0.0.0)",
)
@click.option(
    "--port",
    default=None,
    help="Port to bind to (default: from configuration, 8000)",
    type=int,
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload on code changes (development mode)",
)
def start(host: Optional[str], port: Optional[int], config: Optional[Path], log_level: Optional[str], reload: bool):
    """
    Start the StateBridge API server.

    Examples:
        statebridge start
        statebridge start --port 8080
        statebridge start --config config.yaml --log-level DEBUG
    """
    overrides = _cli_overrides(host, port, log_level)

    try:
        settings = ConfigManager().load(
            config_file=str(config) if config else None,
            cli_overrides=overrides
        )
    except (ValidationError, ValueError, FileNotFoundError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"Starting StateBridge v{__version__}")
    click.echo(f"Host: {settings.server.host}:{settings.server.port}")
    click.echo(f"State endpoint: {settings.state.endpoint}")
    click.echo()

    try:
        if reload:
            if config:
                os.environ[CONFIG_FILE_ENV] = str(config)
            uvicorn.run(
                "statebridge.cli:create_app_from_env",
                host=settings.server.host,
                port=settings.server.port,
                log_level=settings.logging.level.lower(),
                reload=True,
                factory=True,
            )
        else:
            uvicorn.run(
                create_app(config=settings),
                host=settings.server.host,
                port=settings.server.port,
                log_level=settings.logging.level.lower(),
                access_log=True,
            )
    except KeyboardInterrupt:
        click.echo("\nShutting down StateBridge...")


@cli.command()
def version():
    """Show StateBridge version."""
    click.echo(f"StateBridge version {__version__}")


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
def config(config: Optional[Path]):
    """Show the active configuration as JSON."""
    logging.getLogger("statebridge.core.config_manager").setLevel(logging.WARNING)
    try:
        settings = ConfigManager().load(config_file=str(config) if config else None)
    except (ValidationError, ValueError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)
    click.echo(json.dumps(settings.model_dump(), indent=2))


# ========== Account Commands ==========

@cli.group()
def account():
    """
    Manage accounts through a running StateBridge server.
    """
    pass


_url_option = click.option(
    "--url",
    default="http://127.0.0.1:8000",
    help="StateBridge base URL",
    show_default=True,
)


@account.command("create")
@click.argument("account_id", type=int)
@click.option("--name", help="Account name")
@click.option("--email", help="Account email")
@_url_option
def create_account(account_id: int, name: Optional[str], email: Optional[str], url: str):
    """
    Create or update an account.

    Example:
        statebridge account create 42 --name Ada --email ada@x.io
    """
    payload: Dict[str, Any] = {"accountId": account_id, "name": name, "email": email}
    try:
        response = httpx.post(f"{url.rstrip('/')}/account", json=payload, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        click.echo(f"[ERROR] Failed to save account: {e}", err=True)
        sys.exit(1)

    click.echo(f"[OK] Account {account_id} saved")


@account.command("get")
@click.argument("account_id", type=int)
@_url_option
def get_account(account_id: int, url: str):
    """
    Show an account.

    Example:
        statebridge account get 42
    """
    try:
        response = httpx.get(f"{url.rstrip('/')}/account/{account_id}", timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        click.echo(f"[ERROR] Failed to get account: {e}", err=True)
        sys.exit(1)

    if response.status_code == httpx.codes.NO_CONTENT:
        click.echo(f"Account {account_id} not found")
        return

    click.echo(json.dumps(response.json(), indent=2))


@account.command("delete")
@click.argument("account_id", type=int)
@_url_option
def delete_account(account_id: int, url: str):
    """
    Delete an account.

    Example:
        statebridge account delete 42
    """
    try:
        response = httpx.delete(f"{url.rstrip('/')}/account/{account_id}", timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        click.echo(f"[ERROR] Failed to delete account: {e}", err=True)
        sys.exit(1)

    click.echo(f"[OK] Account {account_id} deleted")


def _cli_overrides(host: Optional[str], port: Optional[int], log_level: Optional[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if host:
        overrides.setdefault("server", {})["host"] = host
    if port:
        overrides.setdefault("server", {})["port"] = port
    if log_level:
        overrides.setdefault("logging", {})["level"] = log_level.upper()
    return overrides


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
