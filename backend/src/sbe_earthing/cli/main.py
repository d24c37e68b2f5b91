"""SBE Earthing CLI entry point."""

import click

from sbe_earthing.config import configure_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """SBE Earthing back-office CLI."""
    if verbose:
        configure_logging("DEBUG")


# Register subcommand groups
from sbe_earthing.cli.auth_cmd import auth  # noqa: E402
from sbe_earthing.cli.export_cmd import export  # noqa: E402
from sbe_earthing.cli.forms_cmd import forms  # noqa: E402
from sbe_earthing.cli.metadata_cmd import metadata  # noqa: E402

cli.add_command(metadata)
cli.add_command(forms)
cli.add_command(export)
cli.add_command(auth)
