"""
Registration list lookups.

Each program's REGISTER record points at a separate spreadsheet whose
first tab lists registered participants, one email per row in column
A below a header row.  ``RegistrationResolver`` answers whether an
email appears on such a list.

The list is read fresh on every call.  Only a malformed pointer is an
error (``InvalidReference``); any problem reading the list itself is
logged and reported as "not registered" so that an unreachable sheet
never breaks the page.
"""

import logging
import re
from typing import Any

from ..core.errors import InvalidReference
from ..core.sheets import SheetsRepository


logger = logging.getLogger(__name__)

SHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)")


def extract_sheet_id(sheet_url: str) -> str:
    """Return the spreadsheet id embedded in a Google Sheets URL."""
    match = SHEET_ID_PATTERN.search(sheet_url or "")
    if not match:
        raise InvalidReference(f"Not a spreadsheet URL: {sheet_url!r}")
    return match.group(1)


def normalize_email(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


class RegistrationResolver:
    """Checks emails against the registration list of a program."""

    def __init__(self, repository: SheetsRepository) -> None:
        self.repository = repository

    def is_registered(self, sheet_url: str, email: str) -> bool:
        sheet_id = extract_sheet_id(sheet_url)
        wanted = normalize_email(email)
        if not wanted:
            return False
        try:
            rows = self.repository.read_first_sheet(sheet_id)
            # Row 0 is the header.
            for row in rows[1:]:
                if row and normalize_email(row[0]) == wanted:
                    return True
        except Exception:
            logger.exception("Unable to read registration sheet %s; treating email as not registered", sheet_id)
            return False
        return False
