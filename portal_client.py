"""Request portal API client.

This module defines a small client wrapper around the portal's JSON
action endpoint.  It performs the same calls as the browser page and
is handy for scripted checks, kiosks or bulk submissions:

* :meth:`get_programs`: return the programs that are open today.
* :meth:`verify_email`: check an email against a program's list.
* :meth:`get_requests`: return the request types for a program.
* :meth:`submit_request`: submit selected request types.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``.  On failure ``data`` is empty and ``error`` is a
dictionary with ``status_code`` and ``message`` keys; portal-level
failures (``success: false``) are reported the same way with a
``status_code`` of ``None``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

Error = Optional[Dict[str, Any]]


def is_valid_email(email: str) -> bool:
    """Return ``True`` if ``email`` looks like an address (client-side check)."""
    return bool(EMAIL_PATTERN.match((email or "").strip()))


class PortalClient:
    """Client for the portal action endpoint."""

    def __init__(
        self,
        *,
        base_url: str,
        path: str = "/api/v1/portal",
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Base URL of the deployment, e.g. ``https://portal.example.org``.
            path: Path of the action endpoint.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Request timeout in seconds.
        """
        self.url = f"{base_url.rstrip('/')}{path}"
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _call(self, action: str, **fields: Any) -> Tuple[Optional[Dict[str, Any]], Error]:
        """Post one action and unwrap the portal envelope.

        Returns:
            A tuple ``(data, error)``.  ``data`` is the decoded response
            body when ``success`` is true.
        """
        body = {"action": action, **fields}
        try:
            logger.debug("Posting action %s to %s", action, self.url)
            response = self.session.post(self.url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            logger.error("Portal request failed (%s): %s", status, exc)
            return None, {"status_code": status, "message": str(exc)}
        except (requests.RequestException, ValueError) as exc:
            logger.error("Portal request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}
        if not isinstance(data, dict):
            return None, {"status_code": None, "message": "Unexpected response from portal"}
        if not data.get("success"):
            return None, {"status_code": None, "message": data.get("message") or "Request failed"}
        return data, None

    # ------------------------------------------------------------------
    # Portal actions
    # ------------------------------------------------------------------
    def get_programs(self) -> Tuple[List[str], Error]:
        data, error = self._call("getPrograms")
        if error:
            return [], error
        return list(data.get("programs") or []), None

    def verify_email(self, program: str, email: str) -> Tuple[Optional[Dict[str, Any]], Error]:
        """Check an email.

        Returns:
            A tuple ``(result, error)``; ``result`` has ``registered`` and,
            for unregistered emails, ``registrationUrl`` (``None`` when
            registration is closed).
        """
        if not is_valid_email(email):
            return None, {"status_code": None, "message": "Please enter a valid email address."}
        data, error = self._call("verifyEmail", program=program, email=email.strip())
        if error:
            return None, error
        result = {"registered": bool(data.get("registered"))}
        if not result["registered"]:
            result["registrationUrl"] = data.get("registrationUrl")
        return result, None

    def get_requests(self, program: str) -> Tuple[List[str], Error]:
        data, error = self._call("getRequests", program=program)
        if error:
            return [], error
        return list(data.get("requests") or []), None

    def submit_request(
        self, program: str, email: str, requests_: Sequence[str], recaptcha_token: str
    ) -> Tuple[bool, Error]:
        """Submit the selected request types.

        Returns:
            A tuple ``(success, error)``.
        """
        if not program or not email.strip() or not requests_:
            return False, {"status_code": None, "message": "Please complete all required fields."}
        data, error = self._call(
            "submitRequest",
            program=program,
            email=email.strip(),
            requests=list(requests_),
            recaptchaToken=recaptcha_token,
        )
        if error:
            return False, error
        return True, None
