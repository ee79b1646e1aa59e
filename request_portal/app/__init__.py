"""
Application package initializer.

The portal backend is organised in layers: ``core`` holds settings,
logging, the error taxonomy and the spreadsheet backend; ``schemas``
holds the typed records and request/response models; ``services``
holds the lookup engine and its collaborators; ``api`` exposes the
JSON action endpoint under ``api/<version>/``.
"""

from .main import app  # noqa: F401
