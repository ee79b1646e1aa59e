"""
Portal action endpoint for API v1.

The portal page talks to a single URL and selects the operation with
the ``action`` field of the JSON body, e.g.::

    {"action": "verifyEmail", "program": "Spring Cohort", "email": "me@example.com"}

The endpoint always answers HTTP 200 with ``success`` set accordingly;
the page shows ``message`` when ``success`` is false.  The handler is
a plain function so FastAPI runs it in its thread pool while it waits
on the spreadsheet and reCAPTCHA calls.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from request_portal.app.services.portal_service import PortalQueryService

router = APIRouter()


def get_portal_service(request: Request) -> PortalQueryService:
    """Return the service instance attached to the application."""
    return request.app.state.portal_service


@router.post("", response_model=Dict[str, Any])
def handle_action(
    payload: Dict[str, Any] = Body(..., description="Action name plus its fields"),
    service: PortalQueryService = Depends(get_portal_service),
) -> Dict[str, Any]:
    """Run one portal action."""
    return service.dispatch(payload)


@router.get("/health", response_model=Dict[str, str])
def health() -> Dict[str, str]:
    """Liveness probe; does not touch the spreadsheets."""
    return {"status": "ok"}
