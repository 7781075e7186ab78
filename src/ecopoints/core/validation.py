"""Request validation helpers shared by the services."""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ecopoints.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_request(model: type[ModelT], **data: Any) -> ModelT:
    """Build a request model, mapping pydantic errors to ValidationError.

    @param model - Request schema
    @param data - Raw field values
    @returns Validated request
    @raises ValidationError on malformed input
    """
    try:
        return model(**data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ())) or "request"
        raise ValidationError(
            f"Invalid {field_name}: {first.get('msg', 'invalid value')}",
            errors=e.errors(),
        ) from e
