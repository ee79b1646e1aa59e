"""
Read-only view of the master table.

``MasterRecordStore.load`` reads the whole master tab through the
injected ``SheetsRepository`` and converts its header-keyed rows into
typed ``MasterRecord`` objects.  The result is an immutable
``MasterSnapshot`` which answers the lookup queries used by the
portal.  Nothing is cached between calls: every entry point of the
portal service takes a fresh snapshot, so edits to the sheet are
visible on the next request.

Precedence rule: when several REGISTER (or REGFORM) records for the
same program are active on the same day, the one that appears last in
the sheet wins.  ``duplicate_pointers`` reports such clashes for the
operator script.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.config import Settings
from ..core.errors import DateParseError, SchemaError, StoreUnavailable
from ..core.sheets import SheetsRepository
from ..schemas.master import MASTER_COLUMNS, MasterRecord, RecordType
from .validity import is_valid, to_date


logger = logging.getLogger(__name__)


def _cell_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class MasterSnapshot:
    """Immutable set of master records read in one pass."""

    def __init__(self, records: Iterable[MasterRecord]) -> None:
        self.records: Tuple[MasterRecord, ...] = tuple(records)

    def __len__(self) -> int:
        return len(self.records)

    def active(self, record_type: RecordType, today: date, group: Optional[str] = None) -> List[MasterRecord]:
        """Records of ``record_type`` valid on ``today``, in table order.

        When ``group`` is given only records of that program are returned.
        """
        return [
            r for r in self.records
            if r.record_type == record_type
            and (group is None or r.group == group)
            and is_valid(r.valid_from, r.valid_till, today)
        ]

    def list_programs(self, today: date) -> List[str]:
        # Duplicates are kept: two PROGRAM rows with the same name show up
        # twice in the dropdown, exactly as they appear in the sheet.
        return [r.record_name for r in self.active(RecordType.PROGRAM, today) if r.record_name]

    def is_program_active(self, program: str, today: date) -> bool:
        return program in self.list_programs(today)

    def list_requests(self, group: str, today: date) -> List[str]:
        """Request labels offered for ``group`` on ``today``.

        A REQUEST row only counts while a PROGRAM of the same name is
        active, so expired programs never offer requests.
        """
        if not self.is_program_active(group, today):
            return []
        return [r.record_name for r in self.active(RecordType.REQUEST, today, group) if r.record_name]

    def _last_active(self, record_type: RecordType, group: str, today: date) -> Optional[MasterRecord]:
        matches = self.active(record_type, today, group)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "%d active %s records for program %r (rows %s); using the last one",
                len(matches),
                record_type.value,
                group,
                ", ".join(str(r.row_number) for r in matches),
            )
        return matches[-1]

    def find_register(self, group: str, today: date) -> Optional[MasterRecord]:
        return self._last_active(RecordType.REGISTER, group, today)

    def find_reg_form(self, group: str, today: date) -> Optional[MasterRecord]:
        return self._last_active(RecordType.REGFORM, group, today)

    def duplicate_pointers(self, today: date) -> Dict[Tuple[str, RecordType], List[MasterRecord]]:
        """Programs with more than one active REGISTER or REGFORM record."""
        seen: Dict[Tuple[str, RecordType], List[MasterRecord]] = {}
        for record_type in (RecordType.REGISTER, RecordType.REGFORM):
            for r in self.active(record_type, today):
                seen.setdefault((r.group or "", record_type), []).append(r)
        return {key: rows for key, rows in seen.items() if len(rows) > 1}


class MasterRecordStore:
    """Loads the master table from the spreadsheet backend."""

    def __init__(self, repository: SheetsRepository, settings: Settings) -> None:
        self.repository = repository
        self.sheet_name = settings.master_sheet_name
        self.date_formats = settings.date_formats

    def load(self) -> MasterSnapshot:
        """Read and parse the full master table.

        Raises ``StoreUnavailable`` if the sheet cannot be read,
        ``SchemaError`` if a required column is missing and
        ``DateParseError`` if a validity cell is not a date.
        """
        try:
            rows = self.repository.read_table(self.sheet_name)
        except StoreUnavailable:
            raise
        except Exception as exc:
            raise StoreUnavailable(f"Unable to read master sheet '{self.sheet_name}': {exc}") from exc
        if not rows:
            raise SchemaError(MASTER_COLUMNS["group"])
        records = self.parse_rows(rows[0], rows[1:])
        logger.debug("Loaded %d master records from '%s'", len(records), self.sheet_name)
        return MasterSnapshot(records)

    def parse_rows(self, header: Sequence[Any], rows: Iterable[Sequence[Any]]) -> List[MasterRecord]:
        positions = {str(name).strip(): idx for idx, name in enumerate(header) if name is not None}
        index: Dict[str, int] = {}
        for field, column in MASTER_COLUMNS.items():
            if column not in positions:
                raise SchemaError(column)
            index[field] = positions[column]

        records: List[MasterRecord] = []
        # Row 1 is the header, so data starts at sheet row 2.
        for row_number, row in enumerate(rows, start=2):
            cells = list(row) + [None] * (len(header) - len(row))
            if all(_cell_text(c) is None for c in cells):
                continue
            raw_type = (_cell_text(cells[index["record_type"]]) or "").upper()
            try:
                record_type = RecordType(raw_type)
            except ValueError:
                logger.warning("Skipping master row %d with unknown Record_Type %r", row_number, raw_type)
                continue
            try:
                valid_from = to_date(cells[index["valid_from"]], self.date_formats)
                valid_till = to_date(cells[index["valid_till"]], self.date_formats)
            except DateParseError as exc:
                raise DateParseError(f"Master row {row_number}: {exc}") from exc
            records.append(
                MasterRecord(
                    group=_cell_text(cells[index["group"]]),
                    record_type=record_type,
                    record_name=_cell_text(cells[index["record_name"]]),
                    valid_from=valid_from,
                    valid_till=valid_till,
                    content=_cell_text(cells[index["content"]]),
                    row_number=row_number,
                )
            )
        return records

    # Convenience wrappers that take a fresh snapshot per call.
    def list_programs(self, today: date) -> List[str]:
        return self.load().list_programs(today)

    def list_requests(self, group: str, today: date) -> List[str]:
        return self.load().list_requests(group, today)

    def find_register(self, group: str, today: date) -> Optional[MasterRecord]:
        return self.load().find_register(group, today)

    def find_reg_form(self, group: str, today: date) -> Optional[MasterRecord]:
        return self.load().find_reg_form(group, today)
