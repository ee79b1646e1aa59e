"""
Error taxonomy for the portal.

Every failure the portal can report to a client is a subclass of
``PortalError``.  The exception text (``str(exc)``) carries the detail
for the server log; ``message`` is the text that may be shown to the
client.  ``PortalQueryService.dispatch`` converts these into the
uniform ``{"success": false, "message": ...}`` response.

Errors flagged with ``operator_error = True`` indicate a
misconfigured deployment (unreachable or malformed spreadsheets).  They
are logged with full detail, while the client only receives a generic
message.
"""

from typing import Optional

GENERIC_FAILURE = "Submission failed. Please try again."
SERVICE_UNAVAILABLE = "The portal is temporarily unavailable. Please try again later."


class PortalError(Exception):
    """Base class for errors reported to portal clients."""

    message = "Request failed."
    operator_error = False

    def __init__(self, detail: Optional[str] = None, *, message: Optional[str] = None) -> None:
        super().__init__(detail or message or self.message)
        if message is not None:
            self.message = message


class MissingField(PortalError):
    """A required request field is absent or blank."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}", message=f"Missing required field: {field}")
        self.field = field


class InvalidEmail(PortalError):
    message = "Please enter a valid email address."


class UnknownAction(PortalError):
    message = "Invalid action."


class StoreUnavailable(PortalError):
    """The backing spreadsheet could not be read or written."""

    message = SERVICE_UNAVAILABLE
    operator_error = True


class SchemaError(PortalError):
    """The master table header lacks a required column."""

    message = SERVICE_UNAVAILABLE
    operator_error = True

    def __init__(self, column: str) -> None:
        super().__init__(f"Master table is missing required column '{column}'")
        self.column = column


class DateParseError(PortalError):
    """A Valid_From / Valid_Till cell does not hold a recognisable date."""

    message = "Invalid date in master table."
    operator_error = True


class RegistrationSheetNotFound(PortalError):
    message = "Registration sheet not found for this program."


class RegistrationSheetInvalid(PortalError):
    message = "Registration sheet is invalid for this program."


class InvalidReference(PortalError):
    """A REGISTER pointer is not a recognisable spreadsheet URL."""

    message = "Registration sheet not found for this program."


class AntiSpamFailed(PortalError):
    message = GENERIC_FAILURE


class OutputStoreMissing(PortalError):
    """The output tab for submissions does not exist."""

    message = "Unable to record your request at this time. Please contact the program administrator."
    operator_error = True
