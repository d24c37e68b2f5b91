"""
metadata/validator.py - JSON Schema validation for form YAML files.

Usage:
    from sbe_earthing.metadata.validator import validate_forms_dir

    issues = validate_forms_dir(Path("metadata/forms"))
    for issue in issues:
        print(issue)

Beyond the schema, duplicate form slugs across files are errors and a
field name declared twice in one form is a warning.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
FORM_SCHEMA = "form.schema.json"


@dataclass
class ValidationIssue:
    """A single validation finding for a form YAML file."""

    file: Path
    message: str
    path: str = ""          # path within the document, e.g. "form/fields[0]/name"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    with (_SCHEMAS_DIR / name).open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a Registry so form.schema.json can $ref the shared definitions."""
    resources = []
    for name in ("_defs.schema.json", FORM_SCHEMA):
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_form_file(
    yaml_path: Path,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single form YAML file against the form schema.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    if registry is None:
        registry = _load_registry()

    validator = Draft202012Validator(
        _load_schema(FORM_SCHEMA),
        registry=registry,
        format_checker=Draft202012Validator.FORMAT_CHECKER,
    )

    return [
        ValidationIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=_json_path)
    ]


def _field_issues(yaml_path: Path, doc: dict[str, Any]) -> list[ValidationIssue]:
    """Warn about field names declared twice in one form."""
    seen: set[str] = set()
    issues = []
    for i, field in enumerate(doc.get("form", {}).get("fields", [])):
        name = field.get("name")
        if name in seen:
            issues.append(
                ValidationIssue(
                    file=yaml_path,
                    message=f"Duplicate field name '{name}'",
                    path=f"form/fields[{i}]/name",
                    severity="warning",
                )
            )
        seen.add(name)
    return issues


def validate_forms_dir(forms_dir: Path, *, strict: bool = False) -> list[ValidationIssue]:
    """
    Validate every ``*.yaml`` file in *forms_dir*.

    Args:
        forms_dir: Directory holding form definitions (``metadata/forms``).
        strict:    If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`ValidationIssue` objects across all files.
        Empty list means all files are valid.
    """
    if not forms_dir.is_dir():
        return [
            ValidationIssue(
                file=forms_dir,
                message=f"Forms directory does not exist: {forms_dir}",
            )
        ]

    try:
        registry = _load_registry()
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            ValidationIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema files: {exc}",
            )
        ]

    all_issues: list[ValidationIssue] = []
    slugs: dict[str, Path] = {}

    for yaml_file in sorted(forms_dir.glob("*.yaml")):
        file_issues = validate_form_file(yaml_file, registry=registry)

        if not file_issues:
            with yaml_file.open() as fh:
                doc = yaml.safe_load(fh)
            file_issues.extend(_field_issues(yaml_file, doc))

            slug = doc["form"]["slug"]
            if slug in slugs:
                file_issues.append(
                    ValidationIssue(
                        file=yaml_file,
                        message=f"Duplicate form slug '{slug}' (also in {slugs[slug].name})",
                        path="form/slug",
                    )
                )
            slugs.setdefault(slug, yaml_file)

        if strict:
            for issue in file_issues:
                if issue.severity == "warning":
                    issue.severity = "error"
        all_issues.extend(file_issues)

    logger.debug("Validated form files in %s: %d issue(s)", forms_dir, len(all_issues))
    return all_issues
