"""Load form definitions from YAML files."""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from sbe_earthing.forms.fields import coerce_field
from sbe_earthing.forms.presets import get_preset
from sbe_earthing.forms.types import (
    CustomCheck,
    FieldOption,
    FieldSpec,
    FieldType,
    FormOptions,
    ValidationRule,
)
from sbe_earthing.forms.validator import FormValidator, humanize_field_name, is_number

logger = logging.getLogger(__name__)


@dataclass
class FormDefinition:
    """A declarative form: its fields, rule set, and where submissions go.

    Attributes:
        slug: URL path segment (e.g., "contact")
        name: Display name
        collection: Store collection that receives valid submissions;
            None for validation-only forms
        fields: Field specs in display order
        access: "public" (storefront) or "admin" (back office, token required)
        submit_text: Label of the submit control
        success_message: Message returned after a stored submission
        options: Controller behaviour flags
        defaults: Values stamped onto every stored record
    """

    slug: str
    name: str
    collection: str | None
    fields: list[FieldSpec]
    access: str = "public"
    description: str | None = None
    submit_text: str = "Submit"
    success_message: str = "Submitted successfully"
    options: FormOptions = field(default_factory=FormOptions)
    defaults: dict[str, Any] = field(default_factory=dict)

    @property
    def rules(self) -> dict[str, ValidationRule]:
        return {f.name: f.rule for f in self.fields if f.rule is not None}

    @property
    def is_public(self) -> bool:
        return self.access == "public"

    def get_field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def coerce(self, data: dict[str, Any]) -> dict[str, Any]:
        """Coerce submitted values by field type, dropping undeclared keys."""
        values = {}
        for name, raw in data.items():
            spec = self.get_field(name)
            if spec is not None:
                values[name] = coerce_field(spec, raw)
        return values

    def initial_data(self) -> dict[str, Any]:
        """Blank values for every field; checkboxes start unchecked, lists empty."""
        data: dict[str, Any] = {}
        for spec in self.fields:
            if spec.type is FieldType.CHECKBOX:
                data[spec.name] = False
            elif spec.type is FieldType.LIST:
                data[spec.name] = []
            else:
                data[spec.name] = ""
        return data

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "collection": self.collection,
            "access": self.access,
            "submitText": self.submit_text,
            "successMessage": self.success_message,
            "options": self.options.to_dict(),
            "fields": [spec.to_dict() for spec in self.fields],
        }


def _choice_check(field_name: str, options: list[FieldOption]) -> CustomCheck:
    """Build a custom check restricting a value to the declared options."""
    allowed = [option.value for option in options]
    label = humanize_field_name(field_name)

    def check(value: Any) -> str | None:
        if value in allowed:
            return None
        return f"{label} must be one of: {', '.join(str(v) for v in allowed)}"

    return check


def _number_check(field_name: str) -> CustomCheck:
    """Reject text that did not parse as a finite number."""
    label = humanize_field_name(field_name)

    def check(value: Any) -> str | None:
        if is_number(value) and math.isfinite(value):
            return None
        return f"{label} must be a number"

    return check


def _boolean_check(field_name: str) -> CustomCheck:
    label = humanize_field_name(field_name)

    def check(value: Any) -> str | None:
        if isinstance(value, bool):
            return None
        return f"{label} must be true or false"

    return check


def _items_check(field_name: str, items: list[FieldSpec]) -> CustomCheck:
    """Validate every entry of a list field against the item rules.

    The first failing entry is reported with its 1-based position.
    """
    label = humanize_field_name(field_name)
    validator = FormValidator({item.name: item.rule for item in items if item.rule})

    def check(value: Any) -> str | None:
        if not isinstance(value, (list, tuple)):
            return f"{label} must be a list"
        for position, entry in enumerate(value, start=1):
            if not isinstance(entry, dict):
                return f"{label} entry {position} must be an object"
            result = validator.validate(entry)
            if not result.is_valid:
                return f"{label} entry {position}: {next(iter(result.errors.values()))}"
        return None

    return check


class FormConfigLoader:
    """Loads form definitions from metadata/forms/*.yaml files."""

    def __init__(self, forms_path: Path):
        self.forms_path = forms_path
        self.forms: dict[str, FormDefinition] = {}

    def load_all(self) -> None:
        """Load all form definitions from YAML files."""
        if not self.forms_path.exists():
            logger.warning("Forms directory not found: %s", self.forms_path)
            return

        for yaml_file in sorted(self.forms_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if not data or "form" not in data:
                continue

            definition = self._parse_form(data["form"])
            if definition.slug in self.forms:
                raise ValueError(
                    f"Duplicate form slug '{definition.slug}' in {yaml_file.name}"
                )
            self.forms[definition.slug] = definition

        logger.info("Loaded %d form definitions from %s", len(self.forms), self.forms_path)

    def _parse_form(self, data: dict) -> FormDefinition:
        """Parse a form YAML into a FormDefinition."""
        return FormDefinition(
            slug=data["slug"],
            name=data["name"],
            collection=data.get("collection"),
            fields=[self._parse_field(f) for f in data.get("fields", [])],
            access=data.get("access", "public"),
            description=data.get("description"),
            submit_text=data.get("submitText", "Submit"),
            success_message=data.get("successMessage", "Submitted successfully"),
            options=FormOptions.from_dict(data.get("options") or {}),
            defaults=dict(data.get("defaults") or {}),
        )

    def _parse_field(self, data: dict) -> FieldSpec:
        """Parse one field entry, resolving presets and option checks."""
        name = data["name"]
        field_type = FieldType(data.get("type", "text"))
        options = [FieldOption.from_value(o) for o in data.get("options", [])]

        validation = dict(data.get("validation") or {})
        preset = validation.pop("preset", None)

        rule: ValidationRule | None = None
        if validation or preset:
            rule = ValidationRule.from_dict(validation)
            if preset:
                rule = get_preset(preset).merge(rule)

        items = [self._parse_field(item) for item in data.get("items", [])]

        # Type checks run after the declared constraints
        custom: CustomCheck | None = None
        if options and field_type in (FieldType.SELECT, FieldType.RADIO):
            custom = _choice_check(name, options)
        elif field_type is FieldType.NUMBER:
            custom = _number_check(name)
        elif field_type is FieldType.CHECKBOX:
            custom = _boolean_check(name)
        elif field_type is FieldType.LIST:
            custom = _items_check(name, items)

        if custom is not None:
            if rule is None:
                rule = ValidationRule()
            if rule.custom is None:
                rule.custom = custom

        return FieldSpec(
            name=name,
            label=data.get("label", humanize_field_name(name)),
            type=field_type,
            placeholder=data.get("placeholder"),
            required=bool(rule and rule.required),
            help_text=data.get("helpText"),
            rows=data.get("rows", 3),
            options=options,
            min=rule.min if rule else None,
            max=rule.max if rule else None,
            step=data.get("step"),
            show_success=data.get("showSuccess", False),
            rule=rule,
            items=items,
        )

    def get_form(self, slug: str) -> FormDefinition | None:
        """Get a form by slug."""
        return self.forms.get(slug)

    def list_forms(self) -> list[FormDefinition]:
        """List all loaded forms."""
        return list(self.forms.values())
