"""Field rendering.

Maps a field's declared type to an input affordance and reflects the
controller's value/error state on it. Each field reads the shared
FormController by its own name; focus and password visibility are
local to the renderer and never enter the form data.
"""

from dataclasses import dataclass, field
from typing import Any

from sbe_earthing.forms.controller import FormController
from sbe_earthing.forms.types import FieldSpec, FieldType

_COMPONENTS: dict[FieldType, str] = {
    FieldType.TEXTAREA: "textarea",
    FieldType.SELECT: "select",
    FieldType.CHECKBOX: "checkbox",
    FieldType.RADIO: "radio",
    FieldType.LIST: "list",
}

_CHECKED_STRINGS = {"true", "on", "1", "yes"}
_UNCHECKED_STRINGS = {"false", "off", "0", "no", ""}


def coerce_input(field_type: FieldType, raw: Any, checked: bool | None = None) -> Any:
    """Convert a raw input event value to the value stored in the form.

    Number fields parse their text; an empty string stays empty so that
    "not entered" is distinct from zero, and unparsable text is kept as
    typed. Checkbox fields use the checked flag instead of the value.
    """
    if field_type is FieldType.CHECKBOX:
        return bool(checked)

    if field_type is FieldType.NUMBER:
        if raw is None or raw == "":
            return ""
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return raw
        text = str(raw).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return raw

    return raw


def coerce_field(spec: FieldSpec, raw: Any) -> Any:
    """Coerce a submitted (JSON) value for spec.

    Checkboxes take real booleans as-is and map the usual form strings
    ("true"/"false", "on"/"off", ...); any other string is kept so that
    it fails validation instead of turning into True. List fields coerce
    each entry's declared keys by the item field types.
    """
    if spec.type is FieldType.CHECKBOX:
        if isinstance(raw, bool) or raw is None:
            return bool(raw)
        if isinstance(raw, str):
            text = raw.strip().lower()
            if text in _CHECKED_STRINGS:
                return True
            if text in _UNCHECKED_STRINGS:
                return False
            return raw
        return coerce_input(spec.type, raw, checked=bool(raw))

    if spec.type is FieldType.LIST:
        if not isinstance(raw, list):
            return raw
        entries = []
        for entry in raw:
            if not isinstance(entry, dict):
                entries.append(entry)
                continue
            coerced = {}
            for key, value in entry.items():
                item = spec.get_item(key)
                if item is not None:
                    coerced[key] = coerce_field(item, value)
            entries.append(coerced)
        return entries

    return coerce_input(spec.type, raw)


@dataclass
class FieldView:
    """Concrete, render-ready description of one field."""

    name: str
    label: str
    component: str
    input_type: str | None
    value: Any
    checked: bool | None
    state: str  # "error" | "success" | "focused" | "default"
    error: str | None = None
    placeholder: str | None = None
    required: bool = False
    disabled: bool = False
    help_text: str | None = None
    rows: int | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: list[dict[str, Any]] = field(default_factory=list)
    items: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "component": self.component,
            "inputType": self.input_type,
            "value": self.value,
            "checked": self.checked,
            "state": self.state,
            "error": self.error,
            "placeholder": self.placeholder,
            "required": self.required,
            "disabled": self.disabled,
            "helpText": self.help_text,
            "rows": self.rows,
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "options": self.options,
            "items": self.items,
        }


class FieldRenderer:
    """Renders one FieldSpec against a FormController."""

    def __init__(self, spec: FieldSpec):
        self.spec = spec
        self.focused = False
        self.show_password = False

    def handle_change(self, ctx: FormController, raw: Any, checked: bool | None = None) -> None:
        ctx.set_value(self.spec.name, coerce_input(self.spec.type, raw, checked))

    def handle_focus(self) -> None:
        self.focused = True

    def handle_blur(self, ctx: FormController) -> None:
        self.focused = False
        ctx.handle_blur(self.spec.name)

    def toggle_password(self) -> None:
        self.show_password = not self.show_password

    def render(self, ctx: FormController) -> FieldView:
        spec = self.spec
        value = ctx.data.get(spec.name)
        error = ctx.get_error(spec.name)

        if ctx.has_error(spec.name):
            state = "error"
        elif value and spec.show_success:
            state = "success"
        elif self.focused:
            state = "focused"
        else:
            state = "default"

        component = _COMPONENTS.get(spec.type, "input")
        input_type: str | None = None
        if component == "input":
            input_type = spec.type.value
            if spec.type is FieldType.PASSWORD and self.show_password:
                input_type = "text"
        elif component == "checkbox":
            input_type = "checkbox"

        options = [
            {"label": option.label, "value": option.value, "selected": option.value == value}
            for option in spec.options
        ]

        is_checkbox = spec.type is FieldType.CHECKBOX
        return FieldView(
            name=spec.name,
            label=spec.label,
            component=component,
            input_type=input_type,
            value=None if is_checkbox else ("" if value is None else value),
            checked=bool(value) if is_checkbox else None,
            state=state,
            error=error,
            placeholder=spec.placeholder,
            required=spec.required,
            disabled=ctx.disabled,
            help_text=spec.help_text,
            rows=spec.rows if spec.type is FieldType.TEXTAREA else None,
            min=spec.min,
            max=spec.max,
            step=spec.step,
            options=options,
            items=[item.to_dict() for item in spec.items],
        )


def render_form(ctx: FormController, specs: list[FieldSpec]) -> list[FieldView]:
    """Render every field of a form from the shared controller."""
    return [FieldRenderer(spec).render(ctx) for spec in specs]
