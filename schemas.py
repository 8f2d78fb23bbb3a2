"""
Validation schema for contact form submissions

The same rules are enforced on both sides of the form: the page validates
before sending, and the API validates again before accepting anything.
`FIELD_RULES` exposes the constraints as plain data for the browser script.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

NAME_MIN_LENGTH = 2
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 500
# Shape check shared with the browser; email-validator is applied on top of it
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

REQUIRED_MESSAGE = "この項目は必須です。"
TYPE_MESSAGE = "文字列で入力してください。"
NAME_TOO_SHORT = "名前は2文字以上で入力してください。"
EMAIL_INVALID = "有効なメールアドレスを入力してください。"
MESSAGE_TOO_SHORT = "メッセージは10文字以上で入力してください。"
MESSAGE_TOO_LONG = "メッセージは500文字以内で入力してください。"


class ContactSubmission(BaseModel):
    """
    A contact form submission.
    Built from form input at submit time and discarded after the response.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="ignore")

    name: str = Field(..., description="Sender name", min_length=NAME_MIN_LENGTH)
    email: EmailStr = Field(..., description="Reply-to address")
    message: str = Field(
        ...,
        description="Message body",
        min_length=MESSAGE_MIN_LENGTH,
        max_length=MESSAGE_MAX_LENGTH,
    )

    @field_validator("email")
    @classmethod
    def email_shape(cls, value: str) -> str:
        if not re.fullmatch(EMAIL_PATTERN, value):
            raise ValueError("email does not match the form pattern")
        return value


FIELDS = tuple(ContactSubmission.model_fields)

# (field, pydantic error type) -> message; anything unlisted falls back per field
_ERROR_MESSAGES = {
    ("name", "string_too_short"): NAME_TOO_SHORT,
    ("message", "string_too_short"): MESSAGE_TOO_SHORT,
    ("message", "string_too_long"): MESSAGE_TOO_LONG,
}

_FALLBACK_MESSAGES = {
    "name": NAME_TOO_SHORT,
    "email": EMAIL_INVALID,
    "message": MESSAGE_TOO_SHORT,
}

FIELD_RULES: Dict[str, Dict[str, Any]] = {
    "name": {"minLength": NAME_MIN_LENGTH, "messages": {"tooShort": NAME_TOO_SHORT}},
    "email": {"pattern": EMAIL_PATTERN, "messages": {"invalid": EMAIL_INVALID}},
    "message": {
        "minLength": MESSAGE_MIN_LENGTH,
        "maxLength": MESSAGE_MAX_LENGTH,
        "messages": {"tooShort": MESSAGE_TOO_SHORT, "tooLong": MESSAGE_TOO_LONG},
    },
}


@dataclass(frozen=True)
class ValidationResult:
    submission: Optional[ContactSubmission] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.submission is not None


def _message_for(field_name: str, error_type: str) -> str:
    if error_type == "missing":
        return REQUIRED_MESSAGE
    if error_type == "string_type":
        return TYPE_MESSAGE
    return _ERROR_MESSAGES.get((field_name, error_type), _FALLBACK_MESSAGES[field_name])


def validate(data: Any) -> ValidationResult:
    """Validate raw input into a ContactSubmission or a field error mapping.

    Unknown keys are ignored. Anything that is not a mapping is treated as
    an empty form, so every field reports as required.
    """
    if not isinstance(data, Mapping):
        data = {}

    try:
        submission = ContactSubmission.model_validate(dict(data))
    except ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field_name = str(error["loc"][0])
            message = _message_for(field_name, error["type"])
            messages = errors.setdefault(field_name, [])
            if message not in messages:
                messages.append(message)
        return ValidationResult(errors=errors)

    return ValidationResult(submission=submission)
