"""
Output log for accepted submissions.

Each accepted submission becomes one row ``(timestamp, program, email,
requests)`` in the output tab of the portal workbook.  Appends are
serialised with a lock so rows from concurrent requests can never
interleave.
"""

import logging
import threading

from ..core.config import Settings
from ..core.sheets import SheetsRepository
from ..schemas.portal import Submission

logger = logging.getLogger(__name__)


class SubmissionRecorder:
    """Appends validated submissions to the output sheet."""

    def __init__(self, repository: SheetsRepository, settings: Settings) -> None:
        self.repository = repository
        self.sheet_name = settings.output_sheet_name
        self._lock = threading.Lock()

    def record(self, submission: Submission) -> None:
        with self._lock:
            self.repository.append_row(self.sheet_name, submission.to_row())
        logger.info(
            "Recorded submission for program %r (%d request(s))",
            submission.program,
            len(submission.requests),
        )
