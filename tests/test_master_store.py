from datetime import date

import pytest

from request_portal.app.core.errors import DateParseError, SchemaError, StoreUnavailable
from request_portal.app.schemas.master import RecordType
from request_portal.app.services.master_store import MasterRecordStore

from conftest import HEADER, REGISTER_URL

DAY = date(2024, 6, 1)


def test_load_parses_typed_records(repository, settings):
    snapshot = MasterRecordStore(repository, settings).load()
    assert len(snapshot) == 8
    program = snapshot.records[0]
    assert program.record_type is RecordType.PROGRAM
    assert program.group is None
    assert program.record_name == "P1"
    assert program.valid_from == date(2024, 1, 1)
    assert program.valid_till == date(2024, 12, 31)
    assert program.content is None
    assert program.row_number == 2


def test_list_programs_excludes_inactive(repository, settings):
    store = MasterRecordStore(repository, settings)
    assert store.list_programs(DAY) == ["P1"]
    assert store.list_programs(date(2023, 6, 1)) == ["Expired"]
    assert store.list_programs(date(2025, 1, 1)) == []


def test_list_programs_keeps_duplicates(repository, settings, master_rows):
    master_rows.append(["", "PROGRAM", "P1", "", "", ""])
    assert MasterRecordStore(repository, settings).list_programs(DAY) == ["P1", "P1"]


def test_list_requests_in_table_order(repository, settings):
    store = MasterRecordStore(repository, settings)
    assert store.list_requests("P1", DAY) == ["A", "B"]
    assert store.list_requests("P1", date(2024, 1, 15)) == ["A", "B", "Old"]
    assert store.list_requests("Unknown", DAY) == []


def test_list_requests_requires_active_program(repository, settings):
    # "Never" is valid on its own but its program expired.
    assert MasterRecordStore(repository, settings).list_requests("Expired", DAY) == []


def test_find_register_and_reg_form(repository, settings):
    store = MasterRecordStore(repository, settings)
    register = store.find_register("P1", DAY)
    assert register.content == REGISTER_URL
    assert store.find_reg_form("P1", DAY).content == "https://forms.gle/p1-signup"
    assert store.find_register("P1", date(2025, 2, 1)) is None
    assert store.find_register("Other", DAY) is None


def test_last_active_register_wins(repository, settings, master_rows):
    master_rows.append(["P1", "REGISTER", "newer", "2024-05-01", "", "https://docs.google.com/spreadsheets/d/NEW/edit"])
    master_rows.append(["P1", "REGISTER", "future", "2024-07-01", "", "https://docs.google.com/spreadsheets/d/FUTURE/edit"])
    snapshot = MasterRecordStore(repository, settings).load()
    assert snapshot.find_register("P1", DAY).record_name == "newer"
    duplicates = snapshot.duplicate_pointers(DAY)
    assert list(duplicates) == [("P1", RecordType.REGISTER)]
    assert [r.record_name for r in duplicates[("P1", RecordType.REGISTER)]] == ["P1 list", "newer"]


def test_short_blank_and_unknown_rows(repository, settings):
    repository.tables["Master"] = [
        [" Group ", "Record_Type", "Record_Name", "Valid_From", "Valid_Till", "Content", "Notes"],
        ["", " program ", "Short"],
        [],
        ["", "", "", "", "", ""],
        ["P1", "COMMENT", "ignored", "", "", ""],
    ]
    snapshot = MasterRecordStore(repository, settings).load()
    assert len(snapshot) == 1
    record = snapshot.records[0]
    assert record.record_type is RecordType.PROGRAM
    assert record.valid_from is None and record.valid_till is None
    assert snapshot.list_programs(DAY) == ["Short"]


def test_missing_column_raises_schema_error(repository, settings):
    repository.tables["Master"] = [[c for c in HEADER if c != "Valid_Till"]]
    with pytest.raises(SchemaError) as exc_info:
        MasterRecordStore(repository, settings).load()
    assert exc_info.value.column == "Valid_Till"
    assert "Valid_Till" in str(exc_info.value)


def test_empty_sheet_raises_schema_error(repository, settings):
    repository.tables["Master"] = []
    with pytest.raises(SchemaError):
        MasterRecordStore(repository, settings).load()


def test_bad_date_reports_row(repository, settings, master_rows):
    master_rows.append(["", "PROGRAM", "Broken", "sometime", "", ""])
    with pytest.raises(DateParseError) as exc_info:
        MasterRecordStore(repository, settings).load()
    assert "row 10" in str(exc_info.value)


def test_unreachable_store(repository, settings):
    repository.fail_tables = True
    with pytest.raises(StoreUnavailable):
        MasterRecordStore(repository, settings).load()


def test_unexpected_backend_error_becomes_store_unavailable(settings):
    class Broken:
        def read_table(self, name):
            raise ConnectionError("reset by peer")

    with pytest.raises(StoreUnavailable):
        MasterRecordStore(Broken(), settings).load()


def test_each_query_reads_the_table(repository, settings):
    store = MasterRecordStore(repository, settings)
    store.list_programs(DAY)
    store.list_requests("P1", DAY)
    assert repository.reads == ["Master", "Master"]
