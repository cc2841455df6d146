"""
Form parsing with an explicit result type.
Submitted form fields are validated against a pydantic schema and come back
either as FormOk(value) or as FormErrors(errors, data) for re-rendering.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Generic, List, Mapping, Type, TypeVar, Union
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from realty.config import settings


class FormSchema(BaseModel):
    """Base class for HTML form schemas."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    # Field name -> message shown instead of the pydantic default
    error_messages: ClassVar[Dict[str, str]] = {}


FormT = TypeVar("FormT", bound=FormSchema)


@dataclass
class FormOk(Generic[FormT]):
    value: FormT


@dataclass
class FormErrors:
    """Field-level messages plus the submitted values to show again."""

    errors: List[Dict[str, str]]
    data: Dict[str, Any] = field(default_factory=dict)

    def for_field(self, name: str) -> List[str]:
        return [error["message"] for error in self.errors if error["field"] == name]


FormResult = Union[FormOk[FormT], FormErrors]


def _submitted_values(data: Mapping[str, Any]) -> Dict[str, str]:
    return {
        key: value
        for key, value in data.items()
        if isinstance(value, str) and key != settings.csrf_form_field
    }


def validate_form(schema: Type[FormT], data: Mapping[str, Any]) -> FormResult:
    """
    Validate submitted form data against a form schema.

    Args:
        schema: FormSchema subclass
        data: Submitted fields (a starlette FormData or a plain dict)

    Returns:
        FormOk holding the parsed schema, or FormErrors with one message per field
    """
    values = _submitted_values(data)

    try:
        return FormOk(schema.model_validate(values))
    except PydanticValidationError as exc:
        errors = []
        seen = set()
        for error in exc.errors():
            field_name = str(error["loc"][0]) if error["loc"] else "__all__"
            if field_name in seen:
                continue
            seen.add(field_name)
            errors.append({
                "field": field_name,
                "message": schema.error_messages.get(field_name, error["msg"]),
            })

        # Passwords are never echoed back into the form
        preserved = {k: v for k, v in values.items() if "password" not in k}
        return FormErrors(errors=errors, data=preserved)
