"""Form state controller.

Owns the mutable lifecycle of one form instance: current values,
per-field touched/error state, and the submitting flag. It decides when
validation runs (change, blur, submit) and hands the record plus its
validity to the caller's submit handler. It never blocks submission on
invalid data; the handler decides what to do with it.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol

from sbe_earthing.forms.types import FormOptions, ValidationRule
from sbe_earthing.forms.validator import FormValidator

logger = logging.getLogger(__name__)

SubmitHandler = Callable[[dict[str, Any], bool], "Awaitable[None] | None"]


class SubmitEvent(Protocol):
    """Anything carrying a default action the controller should cancel."""

    def prevent_default(self) -> None: ...


class FormController:
    """State holder shared by every field of one form.

    Fields read ``data`` and ``errors`` and call the mutators directly;
    the controller instance is the form context.
    """

    def __init__(
        self,
        on_submit: SubmitHandler,
        validation_rules: dict[str, ValidationRule] | None = None,
        initial_data: dict[str, Any] | None = None,
        options: FormOptions | None = None,
    ):
        self.validation_rules: dict[str, ValidationRule] = dict(validation_rules or {})
        self.options = options or FormOptions()
        self._on_submit = on_submit
        self._validator = FormValidator(self.validation_rules)
        self._initial_data: dict[str, Any] = dict(initial_data or {})

        self.data: dict[str, Any] = dict(self._initial_data)
        self.errors: dict[str, str] = {}
        self.touched: dict[str, bool] = {}
        self.is_submitting = False

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        """True only once a rule set is declared and no errors are recorded."""
        return bool(self.validation_rules) and not self.errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_data(self) -> bool:
        return any(value not in ("", None) for value in self.data.values())

    @property
    def disabled(self) -> bool:
        return self.options.disabled or self.is_submitting

    # -------------------------------------------------------------------------
    # Field operations
    # -------------------------------------------------------------------------

    def set_value(self, field: str, value: Any) -> None:
        """Write a value and mark the field touched.

        With validate_on_change, the field is re-validated only if it was
        already touched before this call, so a first entry never shows an
        error while it is being typed.
        """
        if self.options.disabled:
            return

        was_touched = self.touched.get(field, False)
        self.data[field] = value
        self.touched[field] = True

        if self.options.validate_on_change and was_touched:
            self.validate_field(field)

    def set_error(self, field: str, error: str | None) -> None:
        if error is None:
            self.errors.pop(field, None)
        else:
            self.errors[field] = error

    def get_error(self, field: str) -> str | None:
        return self.errors.get(field)

    def has_error(self, field: str) -> bool:
        return field in self.errors

    def validate_field(self, field: str) -> bool:
        """Re-evaluate one field regardless of touched state."""
        rule = self.validation_rules.get(field)
        if rule is None:
            return True

        error = self._validator.validate_field(field, self.data.get(field), rule)
        self.set_error(field, error)
        return error is None

    def validate_form(self) -> bool:
        """Re-evaluate every field and replace the error map."""
        result = self._validator.validate(self.data)
        self.errors = dict(result.errors)
        return result.is_valid

    def handle_blur(self, field: str) -> None:
        if self.options.disabled:
            return

        self.touched[field] = True
        if self.options.validate_on_blur:
            self.validate_field(field)

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def handle_submit(self, event: SubmitEvent | None = None) -> None:
        """Validate the form and hand the record to the submit handler.

        A second call while a submission is in flight is dropped. Handler
        exceptions are logged and swallowed; the submitting flag is
        always released.
        """
        prevent_default = getattr(event, "prevent_default", None)
        if callable(prevent_default):
            prevent_default()

        if self.options.disabled or self.is_submitting:
            return

        self.is_submitting = True
        try:
            is_valid = self.validate_form()
            result = self._on_submit(dict(self.data), is_valid)
            if inspect.isawaitable(result):
                await result

            if self.options.reset_on_submit and is_valid:
                self.reset()
        except Exception:
            logger.exception("Form submission error")
        finally:
            self.is_submitting = False

    def reset(self) -> None:
        """Restore initial values and clear touched and error state."""
        self.data = dict(self._initial_data)
        self.errors = {}
        self.touched = {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": dict(self.data),
            "errors": dict(self.errors),
            "touched": dict(self.touched),
            "isSubmitting": self.is_submitting,
            "isValid": self.is_valid,
        }
