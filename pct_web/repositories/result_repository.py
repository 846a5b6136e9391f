from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from pct_web.domain.models import ComparisonRecord, ComparisonResult


class ResultRepository:
    """
    Repository pattern: keeps the comparison records a user can still download.
    In memory only and bounded; the oldest record goes first when full.
    """

    def __init__(self, max_records: int = 200):
        if max_records <= 0:
            raise ValueError("max_records must be positive")
        self.max_records = max_records
        self._records: "OrderedDict[str, ComparisonRecord]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, record: ComparisonRecord) -> None:
        with self._lock:
            self._records[record.run_id] = record
            self._records.move_to_end(record.run_id)
            while len(self._records) > self.max_records:
                self._records.popitem(last=False)

    def get(self, run_id: str, owner: str) -> Optional[ComparisonRecord]:
        with self._lock:
            record = self._records.get(run_id)
        if record is None or record.owner != owner:
            return None
        return record

    def attach_result(self, run_id: str, result: ComparisonResult) -> None:
        with self._lock:
            record = self._records.get(run_id)
            if record is not None:
                record.result = result
