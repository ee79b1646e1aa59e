"""
Main entrypoint for the Request Portal API.

This module assembles the FastAPI application, sets up logging, wires
the portal services together and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn request_portal.app.main:app --reload

All services receive the ``Settings`` object explicitly.  Tests pass
their own settings and a pre-built ``PortalQueryService`` backed by
fakes.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, settings as default_settings
from .core.logging_config import setup_logging
from .core.sheets import GoogleSheetsRepository, SheetsRepository
from .api.v1.router import router as v1_router
from .services.master_store import MasterRecordStore
from .services.portal_service import PortalQueryService
from .services.recaptcha_service import RecaptchaVerifier
from .services.registration_service import RegistrationResolver
from .services.submission_service import SubmissionRecorder


def build_portal_service(settings: Settings, repository: Optional[SheetsRepository] = None) -> PortalQueryService:
    """Construct the portal service and its collaborators.

    ``repository`` defaults to the Google Sheets backend.
    """
    repository = repository or GoogleSheetsRepository(settings)
    return PortalQueryService(
        settings=settings,
        store=MasterRecordStore(repository, settings),
        resolver=RegistrationResolver(repository),
        verifier=RecaptchaVerifier(settings),
        recorder=SubmissionRecorder(repository, settings),
    )


def create_app(settings: Optional[Settings] = None, service: Optional[PortalQueryService] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings to use; defaults to the environment-derived instance.
    service : Optional[PortalQueryService]
        Pre-built service; when omitted one is built from ``settings``.

    Returns
    -------
    FastAPI
        A configured FastAPI instance ready to be served.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that service
    # construction below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # The portal page is a static site served from another origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.state.settings = settings
    app.state.portal_service = service or build_portal_service(settings)

    app.include_router(v1_router, prefix="/api/v1")
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
