"""
Submission validator.

Wraps pydantic validation of TicketSubmission and reduces the result to a
single ValidationError for the first failing field.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from civic_tickets.core.errors import ValidationError
from civic_tickets.models.ticket import TicketSubmission


def _field_path(loc) -> str:
    return ".".join(str(part) for part in loc) or "body"


def first_error(exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors()
    if not errors:
        return ValidationError("body", "Invalid input")
    first = errors[0]
    return ValidationError(_field_path(first.get("loc", ())), first.get("msg", "Invalid value"))


def validate_submission(payload: Any) -> TicketSubmission:
    """
    Validate a raw request body.

    Raises:
        ValidationError: for the first failing field only
    """
    if not isinstance(payload, dict):
        raise ValidationError("body", "Expected a JSON object")
    try:
        return TicketSubmission.model_validate(payload)
    except PydanticValidationError as e:
        raise first_error(e) from e
