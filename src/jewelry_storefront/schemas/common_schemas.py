from typing import Any, Dict, List, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from jewelry_storefront.core.exceptions import ValidationError

M = TypeVar("M", bound=BaseModel)


def clean_form_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Strip whitespace and drop blank values so optional fields fall back to
    their defaults and required ones report as missing.
    """
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                continue
        cleaned[key] = value
    return cleaned


def field_errors_from(exc: PydanticValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        message = error.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": location, "message": message})
    return errors


def parse_request(model: Type[M], data: Mapping[str, Any]) -> M:
    """
    Build a request model from form or JSON data.

    Raises our ValidationError (not pydantic's) so routes handle every
    client-side failure the same way. The first field error becomes the
    headline message.
    """
    try:
        return model.model_validate(clean_form_data(data))
    except PydanticValidationError as exc:
        field_errors = field_errors_from(exc)
        headline = _headline(field_errors)
        raise ValidationError(headline, field_errors=field_errors)


def _headline(field_errors: List[Dict[str, str]]) -> str:
    if not field_errors:
        return "Validation failed"
    first = field_errors[0]
    if first["message"] == "Field required" and first["field"]:
        label = first["field"].replace("_", " ")
        return f"{label[0].upper()}{label[1:]} is required"
    return first["message"]
