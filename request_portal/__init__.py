"""
Top‑level package for the Request Portal API.

This file makes ``request_portal`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``request_portal.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
