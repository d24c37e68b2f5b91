"""Auth CLI commands - mint back-office access tokens."""

import click

from sbe_earthing.auth import JWTService
from sbe_earthing.config import DEFAULT_SECRET_KEY, Settings


@click.group()
def auth():
    """Authentication commands."""
    pass


@auth.command()
@click.option("--subject", required=True, help="Operator the token is issued to.")
@click.option("--role", default="admin", show_default=True)
@click.option(
    "--ttl",
    type=click.IntRange(min=1),
    default=JWTService.ACCESS_TOKEN_TTL,
    show_default=True,
    help="Token lifetime in seconds.",
)
def token(subject: str, role: str, ttl: int):
    """Print a signed bearer token for the admin API."""
    settings = Settings.from_env()
    if settings.secret_key == DEFAULT_SECRET_KEY:
        click.echo(
            click.style(
                "Warning: SBE_SECRET_KEY is not set; using the development key.",
                fg="yellow",
            ),
            err=True,
        )

    click.echo(JWTService(settings.secret_key).generate_access_token(subject, role=role, ttl=ttl))
