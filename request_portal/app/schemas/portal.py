"""
Pydantic schemas for the portal's JSON actions.

The browser page posts a single JSON object per call whose ``action``
field selects the operation (``getPrograms``, ``verifyEmail``,
``getRequests`` or ``submitRequest``).  Field names on the wire are
camelCase; the models use snake_case with aliases.

Request models are deliberately lenient: missing text fields default
to the empty string and are stripped, so the service can report a
precise ``MissingField`` instead of a generic validation error.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Leading characters that make Sheets parse a USER_ENTERED cell as a formula.
FORMULA_PREFIXES = ("=", "+", "-", "@")


def _clean_text(v):
    if v is None:
        return ""
    return str(v).strip()


def _as_text_cell(value: str) -> str:
    if value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


class ProgramQuery(BaseModel):
    program: str = ""

    @field_validator("program", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _clean_text(v)


class VerifyEmailRequest(BaseModel):
    program: str = ""
    email: str = ""

    @field_validator("program", "email", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _clean_text(v)


class SubmitRequest(BaseModel):
    """Schema for a submission posted by the page."""

    program: str = ""
    email: str = ""
    requests: List[str] = Field(default_factory=list, description="Selected request labels")
    recaptcha_token: str = Field("", alias="recaptchaToken")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("program", "email", "recaptcha_token", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _clean_text(v)

    @field_validator("requests", mode="before")
    @classmethod
    def split_requests(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple)):
            raise ValueError("requests must be a list of strings")
        return [str(item).strip() for item in v if item is not None and str(item).strip()]


class ProgramsResponse(BaseModel):
    success: bool = True
    programs: List[str]


class RequestsResponse(BaseModel):
    success: bool = True
    requests: List[str]


class VerifyEmailResponse(BaseModel):
    """Result of an email check.

    ``registration_url`` is only meaningful when ``registered`` is
    false; ``None`` then means registration is currently closed.
    """

    success: bool = True
    registered: bool
    registration_url: Optional[str] = Field(None, alias="registrationUrl")

    model_config = {
        "populate_by_name": True,
    }

    def to_payload(self) -> dict:
        if self.registered:
            return self.model_dump(by_alias=True, exclude={"registration_url"})
        return self.model_dump(by_alias=True)


class MessageResponse(BaseModel):
    success: bool
    message: str


class Submission(BaseModel):
    """A validated submission ready to be appended to the output log."""

    timestamp: datetime
    program: str
    email: str
    requests: List[str]

    model_config = {
        "frozen": True,
    }

    def to_row(self) -> List[str]:
        """Output row; user text is quoted so Sheets stores it as a literal."""
        return [
            self.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            _as_text_cell(self.program),
            _as_text_cell(self.email),
            _as_text_cell(", ".join(self.requests)),
        ]
