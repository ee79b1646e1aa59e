"""
Spreadsheet backend for the portal.

The portal keeps all of its state in spreadsheets: the master table,
the per-program registration lists and the output log.  Services never
talk to Google directly; they receive a ``SheetsRepository`` whose
three methods cover every access pattern the portal needs:

* ``read_table(name)``: all rows of a tab in the portal's own workbook.
* ``read_first_sheet(spreadsheet_id)``: all rows of the first tab of
  some other workbook (a registration list).
* ``append_row(name, values)``: append one row to a tab of the portal's
  own workbook.

Rows are returned as lists of cell values, header row included.
``GoogleSheetsRepository`` implements the interface on top of the
Sheets v4 REST API.  Tests substitute an in-memory implementation.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

import google.auth
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
import requests

from .config import Settings
from .errors import OutputStoreMissing, StoreUnavailable


logger = logging.getLogger(__name__)

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

Row = List[Any]


class SheetsRepository:
    """Interface for the tabular stores used by the portal."""

    def read_table(self, name: str) -> List[Row]:
        raise NotImplementedError

    def read_first_sheet(self, spreadsheet_id: str) -> List[Row]:
        raise NotImplementedError

    def append_row(self, name: str, values: Sequence[Any]) -> None:
        raise NotImplementedError


def _a1_range(sheet_name: str) -> str:
    """Return an A1 range covering a whole tab, quoted for the URL path."""
    escaped = sheet_name.replace("'", "''")
    return quote(f"'{escaped}'", safe="")


class GoogleSheetsRepository(SheetsRepository):
    """``SheetsRepository`` backed by the Google Sheets v4 REST API.

    Credentials come from the service account key file named in
    ``settings.google_credentials_file`` or, when that is empty, from
    application default credentials.  The authorised session is built
    lazily on first use so that importing and constructing the
    application never touches the network or the key file.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self.base_url = settings.sheets_api_url.rstrip("/")
        self.timeout = settings.request_timeout
        self._session = session
        self._session_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------
    def _build_credentials(self):
        key_path = self.settings.google_credentials_file
        if key_path:
            return service_account.Credentials.from_service_account_file(key_path, scopes=[SHEETS_SCOPE])
        creds, _ = google.auth.default(scopes=[SHEETS_SCOPE])
        return creds

    @property
    def session(self) -> requests.Session:
        with self._session_lock:
            if self._session is None:
                try:
                    self._session = AuthorizedSession(self._build_credentials())
                except (GoogleAuthError, OSError, ValueError) as exc:
                    raise StoreUnavailable(f"Unable to load Google credentials: {exc}") from exc
            return self._session

    def _get(self, url: str, params: Optional[dict] = None) -> dict:
        try:
            logger.debug("GET %s", url)
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, GoogleAuthError, ValueError) as exc:
            raise StoreUnavailable(f"Sheets request to {url} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # SheetsRepository
    # ------------------------------------------------------------------
    def _workbook_id(self) -> str:
        if not self.settings.spreadsheet_id:
            raise StoreUnavailable("SPREADSHEET_ID is not configured")
        return self.settings.spreadsheet_id

    def _values(self, spreadsheet_id: str, sheet_name: str) -> List[Row]:
        url = f"{self.base_url}/{spreadsheet_id}/values/{_a1_range(sheet_name)}"
        data = self._get(
            url,
            params={
                "valueRenderOption": "UNFORMATTED_VALUE",
                "dateTimeRenderOption": "FORMATTED_STRING",
            },
        )
        return data.get("values", [])

    def sheet_titles(self, spreadsheet_id: str) -> List[str]:
        """Return the tab titles of a workbook in display order."""
        data = self._get(
            f"{self.base_url}/{spreadsheet_id}",
            params={"fields": "sheets.properties(title,index)"},
        )
        sheets = sorted(
            (s.get("properties", {}) for s in data.get("sheets", [])),
            key=lambda props: props.get("index", 0),
        )
        return [props.get("title", "") for props in sheets]

    def read_table(self, name: str) -> List[Row]:
        return self._values(self._workbook_id(), name)

    def read_first_sheet(self, spreadsheet_id: str) -> List[Row]:
        titles = self.sheet_titles(spreadsheet_id)
        if not titles:
            return []
        return self._values(spreadsheet_id, titles[0])

    def append_row(self, name: str, values: Sequence[Any]) -> None:
        workbook_id = self._workbook_id()
        if name not in self.sheet_titles(workbook_id):
            raise OutputStoreMissing(f"Sheet '{name}' not found in workbook {workbook_id}")
        url = f"{self.base_url}/{workbook_id}/values/{_a1_range(name)}:append"
        try:
            response = self.session.post(
                url,
                params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
                json={"values": [list(values)]},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (requests.RequestException, GoogleAuthError) as exc:
            raise StoreUnavailable(f"Appending to sheet '{name}' failed: {exc}") from exc
        logger.info("Appended row to sheet '%s'", name)
