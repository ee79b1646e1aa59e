"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
application can be imported without any environment; a real
deployment must at least set ``SPREADSHEET_ID`` and
``RECAPTCHA_SECRET_KEY``.

Components never read the module level ``settings`` instance
themselves.  ``create_app`` and the command-line scripts pass a
``Settings`` object into every service they construct, which lets
tests build isolated instances with explicit values.
"""

import os
from dataclasses import dataclass
from typing import Tuple


def _split(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Request Portal API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Spreadsheet holding the master table and the output log.  The two
    # tab names may be overridden when a deployment uses a localised
    # workbook.
    spreadsheet_id: str = os.getenv("SPREADSHEET_ID", "")
    master_sheet_name: str = os.getenv("MASTER_SHEET_NAME", "Master")
    output_sheet_name: str = os.getenv("OUTPUT_SHEET_NAME", "Output")

    # Path to a service account key file.  When empty, application
    # default credentials are used.
    google_credentials_file: str = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    sheets_api_url: str = os.getenv("SHEETS_API_URL", "https://sheets.googleapis.com/v4/spreadsheets")

    recaptcha_secret_key: str = os.getenv("RECAPTCHA_SECRET_KEY", "")
    recaptcha_verify_url: str = os.getenv("RECAPTCHA_VERIFY_URL", "https://www.google.com/recaptcha/api/siteverify")
    # Minimum reCAPTCHA v3 score (0.0 - 1.0) for a submission to be accepted.
    recaptcha_min_score: float = float(os.getenv("RECAPTCHA_MIN_SCORE", "0.5"))

    # Name of the hidden decoy form field.  Humans never fill it in.
    honeypot_field: str = os.getenv("HONEYPOT_FIELD", "website")

    # Timezone used to decide what "today" is for the validity windows.
    timezone: str = os.getenv("PORTAL_TIMEZONE", "UTC")
    # strptime formats accepted for Valid_From / Valid_Till cells, tried
    # after ISO 8601.
    date_formats: Tuple[str, ...] = _split(os.getenv("DATE_FORMATS", "%Y-%m-%d,%m/%d/%Y,%d.%m.%Y"))

    # Timeout in seconds for Sheets and reCAPTCHA HTTP calls.
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "15"))

    # Comma-separated origins allowed to call the API from a browser.
    cors_origins: Tuple[str, ...] = _split(os.getenv("CORS_ORIGINS", "*"))

    host: str = os.getenv("PORTAL_HOST", "0.0.0.0")
    port: int = int(os.getenv("PORTAL_PORT", "8000"))


# Instantiate settings once so entry points can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class creation time, environment variables should
# be set before importing this module.
settings = Settings()
