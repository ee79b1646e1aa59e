"""Entry point for the Request Portal API.

This script starts the FastAPI application under Uvicorn.  It is
intended to be executed from the project root, for example in Docker
or on a small VM, where you only specify a single Python file to run.

Configuration such as SPREADSHEET_ID, RECAPTCHA_SECRET_KEY and the
Google credentials path is read from environment variables; see
``request_portal/app/core/config.py`` for the full list.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from request_portal.app.core.config import settings
from request_portal.app.main import app


async def run_api() -> None:
    """Serve the portal API on ``PORTAL_HOST``:``PORTAL_PORT``."""
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.info("Portal API stopped")
