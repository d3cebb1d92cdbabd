from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from storefront.errors import ValidationFailed

M = TypeVar("M", bound=BaseModel)


def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "__root__"
        errors.setdefault(field, []).append(err["msg"])
    return errors


def parse_form(model: Type[M], data: Dict[str, Any]) -> M:
    """Validate form data, turning pydantic errors into field-level messages."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed("Invalid form data", field_errors(exc)) from exc
