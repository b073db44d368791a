"""
Contact form submission endpoint.

A submission is validated, sanitized, validated again against the same rules
and then written to the contacts collection. Writes are not retried.
"""

from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse
from typing import Any
import logging

from contact_backend.db.mongo import get_db
from contact_backend.models.contact import CONTACT_COLLECTION, ContactSubmission
from contact_backend.services.sanitize import sanitize_submission
from contact_backend.services.validation import revalidate_sanitized, validate_submission

router = APIRouter()
logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Message sent successfully"
INVALID_INPUT_MESSAGE = "Invalid input detected"
SERVER_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def error_response(status_code: int, **content) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, **content})


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact(payload: Any = Body(None)):
    """
    Store a contact form submission.

    Returns:
        201 on success, 400 with the failed rules for invalid input,
        500 if the database write fails
    """
    contact_request, errors = validate_submission(payload)
    if errors:
        logger.info(f"Rejected contact submission with {len(errors)} validation errors")
        return error_response(status.HTTP_400_BAD_REQUEST, errors=errors)

    sanitized = sanitize_submission(contact_request.model_dump())
    cleaned, broken = revalidate_sanitized(sanitized)
    if cleaned is None:
        logger.warning(f"Contact submission invalid after sanitization: {', '.join(broken)}")
        return error_response(status.HTTP_400_BAD_REQUEST, message=INVALID_INPUT_MESSAGE)

    submission = ContactSubmission(
        name=cleaned.name,
        email=cleaned.email,
        phone=cleaned.phone,
        message=cleaned.message,
    )

    try:
        db = get_db()
        result = await db[CONTACT_COLLECTION].insert_one(submission.to_document())
    except Exception as e:
        logger.error(f"❌ Error saving contact submission: {str(e)}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message=SERVER_ERROR_MESSAGE)

    logger.info(f"✅ Stored contact submission {result.inserted_id}")
    return {"success": True, "message": SUCCESS_MESSAGE}
