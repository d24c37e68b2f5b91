"""Export CLI command - offline export of a JSON dump."""

import json
from pathlib import Path

import click

from sbe_earthing.export import EXPORT_FORMATS, DataExporter, DateRange, ExportOptions, parse_datetime

RECORD_DATASETS = ("contacts", "enquiries", "products", "faqs")


def _parse_filters(values: tuple[str, ...]) -> dict[str, str]:
    filters = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--filter")
        filters[key] = value
    return filters


@click.command()
@click.argument("dataset", type=click.Choice(RECORD_DATASETS + ("analytics", "summary")))
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON array of records (an object for analytics and summary).",
)
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default="csv")
@click.option(
    "--output",
    "output_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file ('-' for stdout). Defaults to the generated filename.",
)
@click.option("--filter", "filters", multiple=True, help="Equality filter KEY=VALUE.")
@click.option("--start", default=None, help="Only records created on or after (ISO 8601).")
@click.option("--end", default=None, help="Only records created on or before (ISO 8601).")
@click.option("--kind", type=click.Choice(["overview", "detailed"]), default="overview")
def export(dataset, input_path, fmt, output_path, filters, start, end, kind):
    """Export DATASET from a JSON dump to CSV, TSV or JSON."""
    date_range = None
    if start or end:
        start_at, end_at = parse_datetime(start), parse_datetime(end)
        if start_at is None or end_at is None:
            click.echo(
                click.style("Error: --start and --end must both be ISO 8601 dates", fg="red"),
                err=True,
            )
            raise SystemExit(1)
        date_range = DateRange(start_at, end_at)

    try:
        payload = json.loads(input_path.read_text())
    except json.JSONDecodeError as e:
        click.echo(click.style(f"Error: {input_path} is not valid JSON: {e}", fg="red"), err=True)
        raise SystemExit(1)

    exporter = DataExporter()
    options = ExportOptions(date_range=date_range, filters=_parse_filters(filters), format=fmt)

    expected = list if dataset in RECORD_DATASETS else dict
    if not isinstance(payload, expected):
        shape = "array of records" if expected is list else "object"
        click.echo(click.style(f"Error: expected a JSON {shape}", fg="red"), err=True)
        raise SystemExit(1)

    if dataset in RECORD_DATASETS:
        result = getattr(exporter, f"export_{dataset}")(payload, options)
    elif dataset == "analytics":
        result = exporter.export_analytics(payload, kind)
    else:
        result = exporter.export_summary(
            payload.get("contacts", 0),
            payload.get("products", 0),
            payload.get("faqs", 0),
            date_range,
        )

    if output_path is not None and str(output_path) == "-":
        click.echo(result.content)
        return

    target = output_path or Path(result.filename)
    target.write_text(result.content, encoding="utf-8")
    click.echo(click.style(f"Wrote {target} ({result.media_type})", fg="green"))
