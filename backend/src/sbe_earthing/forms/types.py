"""Core types for the form validation and state engine.

- ValidationRule: declarative constraints attached to one named field
- ValidationResult: outcome of validating a whole record
- FormOptions: controller behaviour flags
- FieldSpec / FieldOption / FieldType: how a field is presented
"""

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable

CustomCheck = Callable[[Any], "str | None"]

# camelCase metadata key -> dataclass attribute
_RULE_KEYS: dict[str, str] = {
    "required": "required",
    "minLength": "min_length",
    "maxLength": "max_length",
    "min": "min",
    "max": "max",
    "pattern": "pattern",
    "email": "email",
    "phone": "phone",
    "url": "url",
}


@dataclass
class ValidationRule:
    """Constraints for a single field.

    Checks run in a fixed order: required, length/bounds, semantic
    format (email, phone, url), pattern, custom. The first failing
    check produces the field's only error.

    Attributes:
        required: Value must not be None, "" or an empty list
        min_length: Minimum characters (strings) or items (lists)
        max_length: Maximum characters (strings) or items (lists)
        min: Inclusive lower bound for numbers
        max: Inclusive upper bound for numbers
        pattern: Regex searched within string values
        email: String must look like an email address
        phone: String must look like a phone number once separators are stripped
        url: String must parse as an absolute URL
        custom: Final check; receives the raw value and returns an error or None
        explicit: Attributes set by name in metadata; these win in merge()
            even when they equal the default
    """

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    min: float | None = None
    max: float | None = None
    pattern: "str | re.Pattern[str] | None" = None
    email: bool = False
    phone: bool = False
    url: bool = False
    custom: CustomCheck | None = None
    explicit: frozenset[str] = field(default=frozenset(), repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationRule":
        """Create a rule from camelCase metadata keys."""
        unknown = set(data) - set(_RULE_KEYS)
        if unknown:
            raise ValueError(f"Unknown validation rule keys: {', '.join(sorted(unknown))}")
        values = {_RULE_KEYS[key]: value for key, value in data.items()}
        return cls(**values, explicit=frozenset(values))

    def merge(self, other: "ValidationRule") -> "ValidationRule":
        """Return a copy of this rule with other's attributes laid over it.

        An attribute of other overrides when it was set explicitly or
        differs from the default, so `required: false` can relax a preset.
        """
        defaults = ValidationRule()
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for f in fields(other):
            if f.name == "explicit":
                continue
            value = getattr(other, f.name)
            if f.name in other.explicit or value != getattr(defaults, f.name):
                values[f.name] = value
        values["explicit"] = self.explicit | other.explicit
        return ValidationRule(**values)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, attr in _RULE_KEYS.items():
            value = getattr(self, attr)
            if value is None or value is False:
                continue
            if isinstance(value, re.Pattern):
                value = value.pattern
            result[key] = value
        return result


@dataclass
class ValidationResult:
    """Result of validating a record against a rule set.

    Attributes:
        is_valid: True iff errors is empty
        errors: Field name -> message for every failing field
    """

    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": dict(self.errors)}


@dataclass
class FormOptions:
    """Behaviour flags for a FormController.

    Attributes:
        validate_on_change: Re-validate an already touched field as it changes
        validate_on_blur: Validate a field when it loses focus
        reset_on_submit: Restore initial values after a successful valid submit
        disabled: Suppress all interaction and submission
    """

    validate_on_change: bool = True
    validate_on_blur: bool = True
    reset_on_submit: bool = False
    disabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormOptions":
        return cls(
            validate_on_change=data.get("validateOnChange", True),
            validate_on_blur=data.get("validateOnBlur", True),
            reset_on_submit=data.get("resetOnSubmit", False),
            disabled=data.get("disabled", False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "validateOnChange": self.validate_on_change,
            "validateOnBlur": self.validate_on_blur,
            "resetOnSubmit": self.reset_on_submit,
            "disabled": self.disabled,
        }


class FieldType(Enum):
    """Input affordances a field can be rendered as."""

    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    LIST = "list"


@dataclass(frozen=True)
class FieldOption:
    """One choice of a select or radio field."""

    label: str
    value: Any

    @classmethod
    def from_value(cls, data: Any) -> "FieldOption":
        """Accept either {label, value} mappings or bare values."""
        if isinstance(data, dict):
            return cls(label=str(data.get("label", data.get("value"))), value=data.get("value"))
        return cls(label=str(data), value=data)


@dataclass
class FieldSpec:
    """Presentation metadata for one form field."""

    name: str
    label: str
    type: FieldType = FieldType.TEXT
    placeholder: str | None = None
    required: bool = False
    help_text: str | None = None
    rows: int = 3
    options: list[FieldOption] = field(default_factory=list)
    min: float | None = None
    max: float | None = None
    step: float | None = None
    show_success: bool = False
    rule: ValidationRule | None = None
    # Per-entry fields of a list field (e.g. product variants)
    items: "list[FieldSpec]" = field(default_factory=list)

    def get_item(self, name: str) -> "FieldSpec | None":
        for item in self.items:
            if item.name == name:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "placeholder": self.placeholder,
            "required": self.required,
            "helpText": self.help_text,
            "rows": self.rows,
            "options": [{"label": o.label, "value": o.value} for o in self.options],
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "validation": self.rule.to_dict() if self.rule else {},
            "items": [item.to_dict() for item in self.items],
        }
