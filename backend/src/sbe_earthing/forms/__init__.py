"""Form validation and state engine.

Usage:
    from sbe_earthing.forms import FormController, ValidationRule

    controller = FormController(
        on_submit=save_enquiry,
        validation_rules={"phone": ValidationRule(required=True, phone=True)},
    )
    controller.set_value("phone", "+91 98765-43210")
    await controller.handle_submit()
"""

from sbe_earthing.forms.controller import FormController, SubmitEvent, SubmitHandler
from sbe_earthing.forms.fields import (
    FieldRenderer,
    FieldView,
    coerce_field,
    coerce_input,
    render_form,
)
from sbe_earthing.forms.loader import FormConfigLoader, FormDefinition
from sbe_earthing.forms.presets import COMMON_VALIDATION_RULES, get_preset
from sbe_earthing.forms.types import (
    FieldOption,
    FieldSpec,
    FieldType,
    FormOptions,
    ValidationResult,
    ValidationRule,
)
from sbe_earthing.forms.validator import (
    FormValidator,
    RealTimeValidator,
    create_real_time_validator,
    humanize_field_name,
    is_valid_email,
    is_valid_phone,
    is_valid_url,
    validate_value,
)

__all__ = [
    # Types
    "FieldOption",
    "FieldSpec",
    "FieldType",
    "FormOptions",
    "ValidationResult",
    "ValidationRule",
    # Validation
    "FormValidator",
    "RealTimeValidator",
    "create_real_time_validator",
    "humanize_field_name",
    "is_valid_email",
    "is_valid_phone",
    "is_valid_url",
    "validate_value",
    "COMMON_VALIDATION_RULES",
    "get_preset",
    # State
    "FormController",
    "SubmitEvent",
    "SubmitHandler",
    # Rendering
    "FieldRenderer",
    "FieldView",
    "coerce_field",
    "coerce_input",
    "render_form",
    # Metadata
    "FormConfigLoader",
    "FormDefinition",
]
