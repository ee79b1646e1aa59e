from datetime import datetime
from typing import Any, Dict, List, Sequence

import pytest
from fastapi.testclient import TestClient

from request_portal.app.core.config import Settings
from request_portal.app.core.errors import OutputStoreMissing, StoreUnavailable
from request_portal.app.core.sheets import SheetsRepository
from request_portal.app.main import create_app
from request_portal.app.services.master_store import MasterRecordStore
from request_portal.app.services.portal_service import PortalQueryService
from request_portal.app.services.recaptcha_service import SpamCheck
from request_portal.app.services.registration_service import RegistrationResolver
from request_portal.app.services.submission_service import SubmissionRecorder

HEADER = ["Group", "Record_Type", "Record_Name", "Valid_From", "Valid_Till", "Content"]
REGISTER_ID = "1AbCdEfGhIjK_lmn-OP"
REGISTER_URL = f"https://docs.google.com/spreadsheets/d/{REGISTER_ID}/edit#gid=0"
REGFORM_URL = "https://forms.gle/p1-signup"
TODAY = datetime(2024, 6, 1, 9, 30)


class FakeSheetsRepository(SheetsRepository):
    """In-memory stand-in for the Google Sheets backend."""

    def __init__(self, tables: Dict[str, List[List[Any]]], external: Dict[str, List[List[Any]]]) -> None:
        self.tables = tables
        self.external = external
        self.reads: List[str] = []
        self.fail_tables = False

    def read_table(self, name: str) -> List[List[Any]]:
        self.reads.append(name)
        if self.fail_tables:
            raise StoreUnavailable("backend offline")
        if name not in self.tables:
            raise StoreUnavailable(f"no sheet {name}")
        return [list(row) for row in self.tables[name]]

    def read_first_sheet(self, spreadsheet_id: str) -> List[List[Any]]:
        if spreadsheet_id not in self.external:
            raise StoreUnavailable(f"no spreadsheet {spreadsheet_id}")
        return [list(row) for row in self.external[spreadsheet_id]]

    def append_row(self, name: str, values: Sequence[Any]) -> None:
        if name not in self.tables:
            raise OutputStoreMissing(f"no sheet {name}")
        self.tables[name].append(list(values))


class StubVerifier:
    def __init__(self, passed: bool = True, score: float = 0.9) -> None:
        self.passed = passed
        self.score = score
        self.tokens: List[str] = []

    def verify(self, token: str) -> SpamCheck:
        self.tokens.append(token)
        return SpamCheck(passed=self.passed and bool(token), score=self.score)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        spreadsheet_id="portal-workbook",
        master_sheet_name="Master",
        output_sheet_name="Output",
        recaptcha_secret_key="secret",
        recaptcha_min_score=0.5,
        honeypot_field="website",
        timezone="UTC",
    )


@pytest.fixture
def master_rows() -> List[List[Any]]:
    return [
        HEADER,
        ["", "PROGRAM", "P1", "2024-01-01", "2024-12-31", ""],
        ["", "PROGRAM", "Expired", "2023-01-01", "2023-12-31", ""],
        ["P1", "REGISTER", "P1 list", "2024-01-01", "2024-12-31", REGISTER_URL],
        ["P1", "REGFORM", "P1 form", "2024-01-01", "", REGFORM_URL],
        ["P1", "REQUEST", "A", "", "", ""],
        ["P1", "REQUEST", "B", "2024-01-01", "", ""],
        ["P1", "REQUEST", "Old", "", "2024-01-31", ""],
        ["Expired", "REQUEST", "Never", "", "", ""],
    ]


@pytest.fixture
def repository(master_rows) -> FakeSheetsRepository:
    return FakeSheetsRepository(
        tables={
            "Master": master_rows,
            "Output": [["Timestamp", "Program", "Email", "Requests"]],
        },
        external={
            REGISTER_ID: [["Email"], ["x@y.com"], ["  Other@Example.org "], []],
        },
    )


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def service(settings, repository, verifier) -> PortalQueryService:
    return PortalQueryService(
        settings=settings,
        store=MasterRecordStore(repository, settings),
        resolver=RegistrationResolver(repository),
        verifier=verifier,
        recorder=SubmissionRecorder(repository, settings),
        clock=lambda: TODAY,
    )


@pytest.fixture
def client(settings, service) -> TestClient:
    return TestClient(create_app(settings, service))
