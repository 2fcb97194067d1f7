"""
Request validation helpers.

Each operation declares an explicit pydantic schema; the helpers here evaluate
it and turn pydantic's error list into the ``{field: [messages]}`` map that
422 responses carry.
"""

from typing import Any, Dict, List, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from storefront.core.exceptions import BadRequestError, ValidationFailedError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Largest value a 64-bit signed INTEGER column can hold
MAX_ID = 2 ** 63 - 1

# Location prefixes FastAPI puts in front of the field name
_LOCATION_PREFIXES = {"body", "query", "path", "form", "header", "cookie"}


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic errors by field name"""
    formatted: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc) if loc else "body"

        if err.get("type") == "missing":
            message = f"The {field} field is required."
        else:
            message = err.get("msg", "Invalid value.")
            # Errors raised from our own validators are prefixed by pydantic
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
        formatted.setdefault(field, []).append(message)
    return formatted


def validate_payload(schema: Type[SchemaT], data: Dict[str, Any]) -> SchemaT:
    """Validate raw input (e.g. multipart form fields) against a schema"""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValidationFailedError(format_validation_errors(e.errors()))


def parse_id(value: Any, resource: str) -> int:
    """
    Parse a path/query identifier.

    Only positive integers are accepted; anything else is rejected before any
    database lookup happens.
    """
    text = str(value).strip()
    # isdigit alone also accepts non-ASCII digits such as superscripts
    if not (text.isascii() and text.isdigit()) or not 0 < int(text) <= MAX_ID:
        raise BadRequestError(
            f"Invalid {resource} ID",
            f"The provided {resource} ID is invalid.",
        )
    return int(text)


def require_confirmation(fields: Dict[str, Any], field: str) -> None:
    """Check ``<field>_confirmation`` matches ``<field>`` and drop it from ``fields``"""
    confirmation = fields.pop(f"{field}_confirmation", None)
    if field in fields and fields[field] != confirmation:
        raise ValidationFailedError({field: [f"The {field} field confirmation does not match."]})
