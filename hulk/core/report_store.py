"""Bounded history of finalized reports."""

import threading
from collections import deque
from typing import List, Optional

from ..settings import DEFAULTS
from .models import Report


class ReportStore:
    """Keeps the most recent reports, newest first."""

    def __init__(self, capacity: int = DEFAULTS["report_capacity"]):
        self._lock = threading.Lock()
        self._reports: deque = deque(maxlen=capacity)

    def append(self, report: Report) -> None:
        """Insert a report at the front, dropping the oldest beyond capacity."""
        with self._lock:
            # appendleft on a full deque discards from the right end
            self._reports.appendleft(report)

    def list(self) -> List[Report]:
        with self._lock:
            return list(self._reports)

    def latest(self) -> Optional[Report]:
        with self._lock:
            return self._reports[0] if self._reports else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)
