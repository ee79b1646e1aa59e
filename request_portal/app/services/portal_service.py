"""
Portal query service.

``PortalQueryService`` answers the four actions posted by the portal
page.  It combines the master table lookups, the registration list
check, the anti-spam verifier and the output recorder:

* ``get_programs``: programs active today.
* ``verify_email``: is the email on the program's registration list,
  and if not, where can the user register.
* ``get_requests``: request types offered for a program today.
* ``submit_request``: honeypot check, anti-spam check, validation and
  append, in that order.  Each step short-circuits the rest.

The typed methods raise ``PortalError`` subclasses.  ``dispatch`` is
the boundary used by the API: it selects the action from a raw JSON
payload and turns every failure into ``{"success": false, "message":
...}``.  No state is kept between calls.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from ..core.config import Settings
from ..core.errors import (
    GENERIC_FAILURE,
    SERVICE_UNAVAILABLE,
    AntiSpamFailed,
    InvalidEmail,
    InvalidReference,
    MissingField,
    PortalError,
    RegistrationSheetInvalid,
    RegistrationSheetNotFound,
    UnknownAction,
)
from ..schemas.portal import (
    EMAIL_PATTERN,
    MessageResponse,
    ProgramQuery,
    ProgramsResponse,
    RequestsResponse,
    Submission,
    SubmitRequest,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from .master_store import MasterRecordStore
from .recaptcha_service import RecaptchaVerifier
from .registration_service import RegistrationResolver
from .submission_service import SubmissionRecorder


logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "Your request has been submitted successfully!"


class PortalQueryService:
    """Orchestrates lookups and submissions for one request at a time."""

    def __init__(
        self,
        settings: Settings,
        store: MasterRecordStore,
        resolver: RegistrationResolver,
        verifier: RecaptchaVerifier,
        recorder: SubmissionRecorder,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.resolver = resolver
        self.verifier = verifier
        self.recorder = recorder
        self._tz = ZoneInfo(settings.timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().date()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_programs(self) -> ProgramsResponse:
        return ProgramsResponse(programs=self.store.list_programs(self.today()))

    def verify_email(self, program: str, email: str) -> VerifyEmailResponse:
        """Check ``email`` against the registration list of ``program``.

        When the email is not registered, ``registration_url`` carries
        the program's active registration form, or ``None`` if
        registration is closed.
        """
        program = (program or "").strip()
        email = (email or "").strip()
        if not program:
            raise MissingField("program")
        if not email:
            raise MissingField("email")
        if not EMAIL_PATTERN.match(email):
            raise InvalidEmail(f"Malformed email {email!r}")

        today = self.today()
        snapshot = self.store.load()
        register = snapshot.find_register(program, today)
        if register is None or not register.content:
            raise RegistrationSheetNotFound(f"No active registration sheet for program {program!r}")
        try:
            registered = self.resolver.is_registered(register.content, email)
        except InvalidReference as exc:
            raise RegistrationSheetInvalid(
                f"Registration sheet for {program!r} (row {register.row_number}) is invalid: {exc}"
            ) from exc

        if registered:
            return VerifyEmailResponse(registered=True)
        form = snapshot.find_reg_form(program, today)
        logger.info("Email not registered for program %r", program)
        return VerifyEmailResponse(registered=False, registration_url=form.content if form else None)

    def get_requests(self, program: str) -> RequestsResponse:
        program = (program or "").strip()
        if not program:
            raise MissingField("program")
        return RequestsResponse(requests=self.store.list_requests(program, self.today()))

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def prepare_submission(self, program: str, email: str, requests: Sequence[str]) -> Submission:
        """Validate the submission fields and stamp the current time."""
        program = (program or "").strip()
        email = (email or "").strip()
        selected: List[str] = [r.strip() for r in requests or [] if r and r.strip()]
        if not program:
            raise MissingField("program")
        if not email:
            raise MissingField("email")
        if not EMAIL_PATTERN.match(email):
            raise InvalidEmail(f"Malformed email {email!r}")
        if not selected:
            raise MissingField("requests")
        return Submission(timestamp=self.now(), program=program, email=email, requests=selected)

    def honeypot_triggered(self, payload: Dict[str, Any]) -> bool:
        value = payload.get(self.settings.honeypot_field)
        return value is not None and str(value).strip() != ""

    def submit_request(self, payload: Dict[str, Any]) -> MessageResponse:
        if self.honeypot_triggered(payload):
            logger.warning("Honeypot field filled; dropping submission")
            raise AntiSpamFailed("Honeypot field filled")
        data = SubmitRequest.model_validate(payload)
        check = self.verifier.verify(data.recaptcha_token)
        if not check.passed:
            raise AntiSpamFailed(f"Anti-spam check failed (score={check.score})")
        submission = self.prepare_submission(data.program, data.email, data.requests)
        self.recorder.record(submission)
        return MessageResponse(success=True, message=SUBMITTED_MESSAGE)

    # ------------------------------------------------------------------
    # Action boundary
    # ------------------------------------------------------------------
    def _run(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if action == "getPrograms":
            return self.get_programs().model_dump()
        if action == "verifyEmail":
            data = VerifyEmailRequest.model_validate(payload)
            return self.verify_email(data.program, data.email).to_payload()
        if action == "getRequests":
            data = ProgramQuery.model_validate(payload)
            return self.get_requests(data.program).model_dump()
        if action == "submitRequest":
            return self.submit_request(payload).model_dump()
        raise UnknownAction(f"Unknown action {action!r}")

    def dispatch(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run the action named in ``payload`` and return the JSON response.

        Never raises: every failure becomes ``{"success": false, "message": ...}``.
        """
        if not isinstance(payload, dict):
            payload = {}
        action = str(payload.get("action") or "")
        try:
            return self._run(action, payload)
        except PortalError as exc:
            if exc.operator_error:
                logger.error("Action %s failed: %s: %s", action, type(exc).__name__, exc)
            else:
                logger.info("Action %s rejected: %s", action, exc)
            return MessageResponse(success=False, message=exc.message).model_dump()
        except ValidationError as exc:
            logger.info("Action %s rejected: invalid payload: %s", action, exc)
            return MessageResponse(success=False, message="Invalid request.").model_dump()
        except Exception:
            logger.exception("Unexpected error while handling action %s", action)
            message = GENERIC_FAILURE if action == "submitRequest" else SERVICE_UNAVAILABLE
            return MessageResponse(success=False, message=message).model_dump()
