"""Named rule presets shared by the storefront and admin forms."""

import re

from sbe_earthing.forms.types import ValidationRule


COMMON_VALIDATION_RULES: dict[str, ValidationRule] = {
    "email": ValidationRule(required=True, email=True, max_length=255),
    "password": ValidationRule(
        required=True,
        min_length=8,
        pattern=re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)"),
    ),
    "name": ValidationRule(
        required=True,
        min_length=2,
        max_length=50,
        pattern=re.compile(r"^[a-zA-Z\s]+$"),
    ),
    "phone": ValidationRule(phone=True, min_length=10, max_length=15),
    "productName": ValidationRule(required=True, min_length=3, max_length=100),
    "productDescription": ValidationRule(required=True, min_length=10, max_length=500),
    "price": ValidationRule(required=True, min=0),
    "stock": ValidationRule(required=True, min=0),
    "slug": ValidationRule(
        required=True,
        min_length=3,
        max_length=100,
        pattern=re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$"),
    ),
    "category": ValidationRule(required=True, min_length=2, max_length=50),
}


def get_preset(name: str) -> ValidationRule:
    """Look up a preset by name.

    Raises:
        ValueError: If no preset has that name
    """
    try:
        return COMMON_VALIDATION_RULES[name]
    except KeyError:
        raise ValueError(
            f"Unknown validation preset '{name}'. "
            f"Expected one of: {', '.join(sorted(COMMON_VALIDATION_RULES))}"
        ) from None
