#!/usr/bin/env python3
"""
Report what the portal will show for a given day.

This script reads the master table with the same parser the portal
uses and prints, for every program active on the chosen date, its
request types and its registration sheet/form links.  It also warns
about data the portal tolerates but which is probably a mistake:

* several active REGISTER (or REGFORM) rows for one program, of which
  the portal silently uses the last;
* REQUEST rows whose program is not active that day.

Usage:
    python check_master_table.py
    python check_master_table.py --date 2025-03-01 --strict

Exit codes: 0 OK, 1 the table could not be read or parsed, 2 warnings
were found and ``--strict`` was given.
"""

import argparse
import sys
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from request_portal.app.core.config import Settings
from request_portal.app.core.errors import PortalError
from request_portal.app.core.logging_config import setup_logging
from request_portal.app.core.sheets import GoogleSheetsRepository, SheetsRepository
from request_portal.app.schemas.master import RecordType
from request_portal.app.services.master_store import MasterRecordStore
from request_portal.app.services.validity import to_date


def main(argv: Optional[List[str]] = None, repository: Optional[SheetsRepository] = None) -> int:
    ap = argparse.ArgumentParser(description="Check the portal master table.")
    ap.add_argument("--date", help="Day to evaluate (YYYY-MM-DD). Defaults to today.")
    ap.add_argument("--sheet", help="Master tab name. Defaults to MASTER_SHEET_NAME.")
    ap.add_argument("--strict", action="store_true", help="Exit with code 2 when warnings are found.")
    args = ap.parse_args(argv)

    settings = Settings()
    if args.sheet:
        settings.master_sheet_name = args.sheet
    setup_logging(settings.log_level, settings.log_file or None)

    try:
        day = to_date(args.date) if args.date else datetime.now(ZoneInfo(settings.timezone)).date()
        store = MasterRecordStore(repository or GoogleSheetsRepository(settings), settings)
        snapshot = store.load()
    except PortalError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1

    print(f"[+] {len(snapshot)} records in '{settings.master_sheet_name}', evaluated for {day.isoformat()}")
    programs = snapshot.list_programs(day)
    if not programs:
        print("[+] No active programs")
    for program in programs:
        register = snapshot.find_register(program, day)
        form = snapshot.find_reg_form(program, day)
        print(f"\n{program}")
        print(f"  register: {register.content if register and register.content else '(none)'}")
        print(f"  regform:  {form.content if form and form.content else '(closed)'}")
        requests_ = snapshot.list_requests(program, day)
        print(f"  requests: {', '.join(requests_) if requests_ else '(none)'}")

    warnings = 0
    for (group, record_type), rows in snapshot.duplicate_pointers(day).items():
        warnings += 1
        row_list = ", ".join(str(r.row_number) for r in rows)
        print(
            f"[!] {len(rows)} active {record_type.value} rows for '{group}' (rows {row_list}); "
            f"row {rows[-1].row_number} is used",
            file=sys.stderr,
        )
    active = set(programs)
    for record in snapshot.active(RecordType.REQUEST, day):
        if record.group not in active:
            warnings += 1
            print(
                f"[!] Row {record.row_number}: request '{record.record_name}' belongs to "
                f"inactive or unknown program '{record.group}'",
                file=sys.stderr,
            )

    if warnings and args.strict:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
