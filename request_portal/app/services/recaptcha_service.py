"""
Anti-spam verification for submissions.

Submissions carry a reCAPTCHA v3 token produced by the page.  The
token is checked against Google's ``siteverify`` endpoint, which
answers with ``success`` and a confidence ``score`` between 0.0 (bot)
and 1.0 (human).  A submission passes when the check succeeds and the
score reaches ``settings.recaptcha_min_score``.

The verifier fails closed: a missing token, a missing secret or a
network error all count as a failed check.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..core.config import Settings


logger = logging.getLogger(__name__)


@dataclass
class SpamCheck:
    passed: bool
    score: Optional[float] = None


class RecaptchaVerifier:
    """Verifies reCAPTCHA v3 tokens via HTTP."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self.secret_key = settings.recaptcha_secret_key
        self.verify_url = settings.recaptcha_verify_url
        self.min_score = settings.recaptcha_min_score
        self.timeout = settings.request_timeout
        self.client = client

    def _post(self, data: dict) -> httpx.Response:
        if self.client is not None:
            return self.client.post(self.verify_url, data=data, timeout=self.timeout)
        return httpx.post(self.verify_url, data=data, timeout=self.timeout)

    def verify(self, token: str) -> SpamCheck:
        if not token:
            logger.info("Submission without reCAPTCHA token")
            return SpamCheck(passed=False)
        if not self.secret_key:
            logger.error("RECAPTCHA_SECRET_KEY is not configured; rejecting submission")
            return SpamCheck(passed=False)
        try:
            response = self._post({"secret": self.secret_key, "response": token})
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("reCAPTCHA verification request failed: %s", exc)
            return SpamCheck(passed=False)

        score = result.get("score")
        try:
            score = float(score) if score is not None else None
        except (TypeError, ValueError):
            score = None
        if not result.get("success"):
            logger.info("reCAPTCHA rejected token: %s", result.get("error-codes"))
            return SpamCheck(passed=False, score=score)
        if score is None or score < self.min_score:
            logger.info("reCAPTCHA score %s below threshold %s", score, self.min_score)
            return SpamCheck(passed=False, score=score)
        return SpamCheck(passed=True, score=score)
