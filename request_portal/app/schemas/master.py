"""
Pydantic models for the master table.

The master table is a single flat sheet that mixes four kinds of
records, told apart by ``Record_Type``:

* ``PROGRAM``: a program users can pick; ``Record_Name`` is its name.
* ``REGISTER``: ``Content`` links to the registration list of the
  program named in ``Group``.
* ``REGFORM``: ``Content`` links to the registration form shown to
  users who are not on the list yet.
* ``REQUEST``: a request type offered for the program named in
  ``Group``.

Every record carries an optional ``Valid_From``/``Valid_Till`` window.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RecordType(str, Enum):
    PROGRAM = "PROGRAM"
    REGISTER = "REGISTER"
    REGFORM = "REGFORM"
    REQUEST = "REQUEST"


# Header names of the master table, keyed by model field.
MASTER_COLUMNS = {
    "group": "Group",
    "record_type": "Record_Type",
    "record_name": "Record_Name",
    "valid_from": "Valid_From",
    "valid_till": "Valid_Till",
    "content": "Content",
}


class MasterRecord(BaseModel):
    """One typed row of the master table."""

    group: Optional[str] = Field(None, description="Program the record belongs to; empty for global records")
    record_type: RecordType
    record_name: Optional[str] = Field(None, description="Program name or request label")
    valid_from: Optional[date] = Field(None, description="First day the record is active (inclusive)")
    valid_till: Optional[date] = Field(None, description="Last day the record is active (inclusive)")
    content: Optional[str] = Field(None, description="Sheet or form URL for REGISTER / REGFORM records")
    row_number: Optional[int] = Field(None, description="1-based row in the sheet, header included")

    model_config = {
        "frozen": True,
    }
