"""
Command-line interface for zkLogin.
"""

from __future__ import annotations

import os

import click

from zklogin.client.client import ZkLoginClient
from zklogin.common.address import jwt_to_address
from zklogin.common.config import Config
from zklogin.common.exceptions import ZkLoginError
from zklogin.common.tokens import decode_token
from zklogin.server import start_server
from zklogin.server.salt_store import SaltStore


def _client(config: Config) -> ZkLoginClient:
    try:
        return ZkLoginClient(
            session_file=config.SESSION_FILE_PATH,
            device_file=config.DEVICE_FILE_PATH,
            config=config,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e


@click.group()
def cli() -> None:
    """zkLogin CLI"""


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind server to (default: from ZKLOGIN_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind server to (default: from ZKLOGIN_SERVER_PORT env or 3001)",
)
def serve(host: str | None, port: int | None) -> None:
    """Start the zkLogin backend"""
    if host:
        os.environ["ZKLOGIN_SERVER_HOST"] = host
    if port:
        os.environ["ZKLOGIN_SERVER_PORT"] = str(port)

    config = Config()
    if not config.SALT_MASTER_SECRET:
        msg = "ERROR: ZKLOGIN_SALT_MASTER_SECRET env var must be set to a secure secret."
        raise click.ClickException(msg)
    if not config.ALLOWED_CLIENT_IDS:
        msg = "ERROR: ZKLOGIN_CLIENT_ID or ZKLOGIN_ALLOWED_CLIENT_IDS must be set."
        raise click.ClickException(msg)

    start_server(config)


@cli.command("derive-salt")
@click.argument("subject")
def derive_salt(subject: str) -> None:
    """Print the deterministic salt for a subject"""
    config = Config()
    if not config.SALT_MASTER_SECRET:
        msg = "ERROR: ZKLOGIN_SALT_MASTER_SECRET env var must be set."
        raise click.ClickException(msg)
    store = SaltStore(config.SALT_MASTER_SECRET, config.ALLOWED_CLIENT_IDS)
    click.echo(store.derive_salt(subject))


@cli.command()
@click.option("--token", required=True, help="Identity token (JWT)")
@click.option("--salt", required=True, help="User salt (decimal string)")
def address(token: str, salt: str) -> None:
    """Print the account address for a token and salt"""
    try:
        click.echo(jwt_to_address(decode_token(token), salt))
    except ZkLoginError as e:
        raise click.ClickException(str(e)) from e


@cli.command("login-url")
def login_url() -> None:
    """Start a login attempt and print the provider URL"""
    client = _client(Config())
    try:
        click.echo(client.prepare_login())
    except ZkLoginError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("token_or_callback")
def complete(token_or_callback: str) -> None:
    """Finish a login from the provider token or redirect URL"""
    client = _client(Config())
    try:
        session = client.complete_login(token_or_callback)
    except ZkLoginError as e:
        raise click.ClickException(str(e)) from e
    click.echo(session.address)


@cli.command()
def logout() -> None:
    """Clear the persisted login session"""
    client = _client(Config())
    client.logout()
    click.echo("Logged out")


if __name__ == "__main__":
    cli()
