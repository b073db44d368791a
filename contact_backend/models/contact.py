import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

CONTACT_COLLECTION = "contacts"
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")
MESSAGE_MIN_LENGTH = 10


class ContactRequest(BaseModel):
    """Incoming contact form fields, trimmed and checked."""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    email: StrictStr
    phone: Optional[StrictStr] = None
    message: StrictStr

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("name_empty", "Name is required")
        return value

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        value = value.strip()
        try:
            _, address = validate_email(value)
        except PydanticCustomError:
            raise PydanticCustomError("email_invalid", "Please provide a valid email address")
        return address.lower()

    @field_validator("phone")
    @classmethod
    def phone_format(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if not PHONE_PATTERN.match(value):
            raise PydanticCustomError("phone_invalid", "Please provide a valid phone number")
        return value

    @field_validator("message")
    @classmethod
    def message_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MESSAGE_MIN_LENGTH:
            raise PydanticCustomError(
                "message_too_short",
                "Message must be at least {min_length} characters long",
                {"min_length": MESSAGE_MIN_LENGTH},
            )
        return value


class ContactSubmission(BaseModel):
    """A stored contact form submission."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: Optional[str] = None
    message: str = Field(min_length=MESSAGE_MIN_LENGTH)
    submittedAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_document(self):
        return self.model_dump()
