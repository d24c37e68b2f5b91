"""Rule-based field validation.

FormValidator evaluates one value against one ValidationRule, or a whole
record against a rule set. Every failure is a plain human-readable
string naming the field; the first failing check wins.
"""

import re
from typing import Any
from urllib.parse import urlsplit

from sbe_earthing.forms.types import ValidationResult, ValidationRule


# =============================================================================
# Format Checks
# =============================================================================

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Applied after spaces, hyphens and parentheses are stripped
PHONE_PATTERN = re.compile(r"^[+]?[1-9][0-9]{0,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")

URL_SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")

# Schemes that must carry a host to be absolute
HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: str) -> bool:
    return PHONE_PATTERN.fullmatch(PHONE_SEPARATORS.sub("", value)) is not None


def is_valid_url(value: str) -> bool:
    """Check that value parses as an absolute URL."""
    candidate = value.strip()
    scheme, sep, _ = candidate.partition(":")
    if not sep or not URL_SCHEME_PATTERN.fullmatch(scheme):
        return False

    try:
        parts = urlsplit(candidate)
        parts.port  # raises on a malformed port
    except ValueError:
        return False

    if scheme.lower() in HOST_SCHEMES:
        if not parts.hostname:
            return False
        if any(ch.isspace() for ch in parts.netloc):
            return False

    return True


def humanize_field_name(field: str) -> str:
    """Turn a camelCase field name into a sentence-case label.

    >>> humanize_field_name("enquiryType")
    'Enquiry type'
    """
    spaced = re.sub(r"([A-Z])", lambda m: " " + m.group(1).lower(), field).strip()
    return spaced[:1].upper() + spaced[1:]


def _is_empty(value: Any) -> bool:
    if value is None or (isinstance(value, str) and value == ""):
        return True
    return isinstance(value, (list, tuple)) and len(value) == 0


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# Validator
# =============================================================================


class FormValidator:
    """Validates records against a mapping of field name -> ValidationRule.

    Only fields declared in the rule set are ever validated. Errors from
    the most recent validate() pass are kept for the get_error/has_error
    accessors.
    """

    def __init__(self, rules: dict[str, ValidationRule] | None = None):
        self.rules: dict[str, ValidationRule] = dict(rules or {})
        self._errors: dict[str, str] = {}

    def add_rule(self, field: str, rule: ValidationRule) -> "FormValidator":
        self.rules[field] = rule
        return self

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate every field in the rule set against data."""
        self._errors = {}

        for field, rule in self.rules.items():
            error = self.validate_field(field, data.get(field), rule)
            if error is not None:
                self._errors[field] = error

        return ValidationResult(is_valid=not self._errors, errors=dict(self._errors))

    def validate_field(self, field: str, value: Any, rule: ValidationRule) -> str | None:
        """Return the first error for value under rule, or None if it passes.

        An empty value fails a required rule and passes anything else.
        A custom check that raises propagates to the caller.
        """
        label = humanize_field_name(field)

        if _is_empty(value):
            if rule.required:
                return f"{label} is required"
            return None

        if isinstance(value, str):
            if rule.min_length and len(value) < rule.min_length:
                return f"{label} must be at least {rule.min_length} characters"

            if rule.max_length and len(value) > rule.max_length:
                return f"{label} must not exceed {rule.max_length} characters"

            if rule.email and not is_valid_email(value):
                return f"{label} must be a valid email address"

            if rule.phone and not is_valid_phone(value):
                return f"{label} must be a valid phone number"

            if rule.url and not is_valid_url(value):
                return f"{label} must be a valid URL"

            if rule.pattern is not None and not re.search(rule.pattern, value):
                return f"{label} format is invalid"

        if is_number(value):
            if rule.min is not None and value < rule.min:
                return f"{label} must be at least {_format_number(rule.min)}"

            if rule.max is not None and value > rule.max:
                return f"{label} must not exceed {_format_number(rule.max)}"

        if isinstance(value, (list, tuple)):
            if rule.min_length and len(value) < rule.min_length:
                return f"{label} must have at least {rule.min_length} items"

            if rule.max_length and len(value) > rule.max_length:
                return f"{label} must not have more than {rule.max_length} items"

        if rule.custom is not None:
            return rule.custom(value)

        return None

    def get_error(self, field: str) -> str | None:
        return self._errors.get(field)

    def has_error(self, field: str) -> bool:
        return field in self._errors

    def get_errors(self) -> dict[str, str]:
        return dict(self._errors)

    def clear_errors(self) -> None:
        self._errors = {}

    def clear_field_error(self, field: str) -> None:
        self._errors.pop(field, None)


def validate_value(value: Any, rule: ValidationRule) -> str | None:
    """Validate a bare value under the synthetic field name "field"."""
    result = FormValidator({"field": rule}).validate({"field": value})
    return result.errors.get("field")


class RealTimeValidator:
    """Per-keystroke validation helper bound to a fixed rule set."""

    def __init__(self, rules: dict[str, ValidationRule]):
        self._rules = rules
        self._validator = FormValidator(rules)

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        return self._validator.validate(data)

    def validate_field(self, field: str, value: Any) -> str | None:
        rule = self._rules.get(field)
        if rule is None:
            return None
        return self._validator.validate_field(field, value, rule)

    def get_error(self, field: str) -> str | None:
        return self._validator.get_error(field)

    def has_error(self, field: str) -> bool:
        return self._validator.has_error(field)


def create_real_time_validator(rules: dict[str, ValidationRule]) -> RealTimeValidator:
    return RealTimeValidator(rules)
