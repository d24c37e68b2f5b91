"""Form CLI commands - list definitions and check payloads offline."""

import json
from pathlib import Path

import click

from sbe_earthing.config import Settings
from sbe_earthing.forms import FormConfigLoader, FormDefinition, FormValidator


def _load_forms() -> FormConfigLoader:
    loader = FormConfigLoader(Settings.from_env().forms_path)
    loader.load_all()
    return loader


def _get_form(slug: str) -> FormDefinition:
    definition = _load_forms().get_form(slug)
    if definition is None:
        click.echo(click.style(f"Error: Form '{slug}' not found", fg="red"), err=True)
        raise SystemExit(1)
    return definition


@click.group()
def forms():
    """Form definition commands."""
    pass


@forms.command("list")
def list_cmd():
    """List loaded form definitions."""
    definitions = _load_forms().list_forms()
    if not definitions:
        click.echo("No forms found.")
        return

    for definition in definitions:
        click.echo(
            f"{definition.slug:<14} {definition.name:<22} "
            f"{definition.access:<7} {len(definition.fields)} fields"
        )


@forms.command("validate")
@click.argument("slug")
@click.option(
    "--data",
    "data_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file holding one submission object.",
)
def validate_cmd(slug: str, data_path: Path):
    """Validate a JSON submission against form SLUG."""
    definition = _get_form(slug)

    try:
        payload = json.loads(data_path.read_text())
    except json.JSONDecodeError as e:
        click.echo(click.style(f"Error: {data_path} is not valid JSON: {e}", fg="red"), err=True)
        raise SystemExit(1)

    if not isinstance(payload, dict):
        click.echo(click.style("Error: submission must be a JSON object", fg="red"), err=True)
        raise SystemExit(1)

    data = {**definition.initial_data(), **definition.coerce(payload)}
    result = FormValidator(definition.rules).validate(data)

    if not result.is_valid:
        for field, message in result.errors.items():
            click.echo(click.style(f"  ✗ {field}: {message}", fg="red"))
        click.echo(click.style(f"\n{len(result.errors)} field error(s)", fg="red", bold=True))
        raise SystemExit(1)

    click.echo(click.style(f"Submission is valid for form '{slug}'.", fg="green", bold=True))
