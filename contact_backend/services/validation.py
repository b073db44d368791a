"""
Field validation for contact form submissions.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from contact_backend.models.contact import ContactRequest

REQUIRED_FIELDS = ("name", "email", "message")


def format_errors(error: ValidationError) -> List[Dict[str, str]]:
    """Turn a pydantic ValidationError into a list of {field, message} items."""
    errors = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        label = field.capitalize()
        if item["type"] == "missing":
            message = f"{label} is required"
        elif item["type"] == "string_type":
            message = f"{label} must be a string"
        else:
            message = item["msg"]
        errors.append({"field": field, "message": message})
    return errors


def validate_submission(raw: Any) -> Tuple[Optional[ContactRequest], List[Dict[str, str]]]:
    """
    Apply every field rule to the raw request body.

    Returns:
        tuple: (request, []) when all rules pass, (None, errors) otherwise,
        where errors lists every failed rule
    """
    if not isinstance(raw, dict):
        return None, [{"field": "body", "message": "Request body must be a JSON object"}]

    try:
        return ContactRequest.model_validate(raw), []
    except ValidationError as e:
        return None, format_errors(e)


def missing_required_fields(data: Dict[str, Any]) -> List[str]:
    """Names of required fields that are absent or blank."""
    return [
        field for field in REQUIRED_FIELDS
        if not isinstance(data.get(field), str) or not data[field].strip()
    ]


def revalidate_sanitized(data: Dict[str, Any]) -> Tuple[Optional[ContactRequest], List[str]]:
    """
    Check sanitized fields against the same rules as the raw input.

    Returns:
        tuple: (request, []) if the sanitized data is still valid, otherwise
        (None, names of the fields that no longer pass)
    """
    missing = missing_required_fields(data)
    if missing:
        return None, missing

    try:
        return ContactRequest.model_validate(data), []
    except ValidationError as e:
        return None, [str(item["loc"][0]) for item in e.errors() if item["loc"]]
