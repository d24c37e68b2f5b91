"""Metadata CLI commands - validate form definitions."""

from pathlib import Path

import click

from sbe_earthing.config import Settings
from sbe_earthing.forms import FormConfigLoader
from sbe_earthing.metadata.validator import validate_form_file, validate_forms_dir


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Validate a single YAML file instead of the whole forms directory.",
)
def validate(strict: bool, target_path: Path | None):
    """Validate form YAML files against the JSON Schema."""
    forms_path = Settings.from_env().forms_path

    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    if target_path is not None:
        schema_issues = validate_form_file(target_path)
    else:
        if not forms_path.exists():
            click.echo(f"Error: Forms directory not found at {forms_path}", err=True)
            raise SystemExit(1)
        schema_issues = validate_forms_dir(forms_path, strict=strict)

    errors = [i for i in schema_issues if i.severity == "error"]
    warnings = [i for i in schema_issues if i.severity == "warning"]

    for issue in schema_issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Semantic (loader) validation ─────────────────────────────────────────
    if target_path is None:
        try:
            loader = FormConfigLoader(forms_path)
            loader.load_all()
        except (ValueError, KeyError) as e:
            click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
            raise SystemExit(1)

        definitions = loader.list_forms()
        click.echo(f"\nLoaded {len(definitions)} forms:")
        for definition in definitions:
            target = definition.collection or "validation only"
            click.echo(
                f"  ✓ {definition.slug} ({len(definition.fields)} fields, -> {target})"
            )

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))
