"""
Top‑level router for version 1 of the API.

This router aggregates endpoint routers under a unified prefix.  When
new endpoints are added, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import portal

router = APIRouter()

router.include_router(portal.router, prefix="/portal", tags=["portal"])
