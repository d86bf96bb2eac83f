"""Thread-safe counters and throughput history for one run."""

import threading
from collections import deque
from datetime import datetime
from typing import Optional

from ..settings import DEFAULTS
from .models import RunState, ThroughputSample


class StatsAggregator:
    """
    Owns the live counters of a single run.

    Every read and write goes through one lock, so a snapshot never sees a
    total without its matching success/failure increment.
    """

    def __init__(
        self,
        start_time: Optional[datetime] = None,
        history_capacity: int = DEFAULTS["history_capacity"],
    ):
        self._lock = threading.Lock()
        self._start_time = start_time or datetime.now()
        self._end_time: Optional[datetime] = None
        self._total = 0
        self._success = 0
        self._failure = 0
        self._tick_count = 0
        self._history: deque = deque(maxlen=history_capacity)

    @property
    def last_elapsed(self) -> int:
        """Elapsed second of the most recent sample, 0 if none."""
        with self._lock:
            return self._history[-1].elapsed_seconds if self._history else 0

    def record_outcome(self, success: bool) -> None:
        """Count one resolved call."""
        with self._lock:
            self._total += 1
            if success:
                self._success += 1
            else:
                self._failure += 1
            self._tick_count += 1

    def roll_tick(self, elapsed_seconds: int) -> ThroughputSample:
        """
        Close the current second and append its throughput sample.

        Args:
            elapsed_seconds: Whole seconds since the run started

        Returns:
            The recorded sample
        """
        with self._lock:
            if self._history and elapsed_seconds < self._history[-1].elapsed_seconds:
                elapsed_seconds = self._history[-1].elapsed_seconds
            sample = ThroughputSample(
                elapsed_seconds=elapsed_seconds,
                requests_per_second=self._tick_count,
            )
            self._tick_count = 0
            self._history.append(sample)
            return sample

    def mark_finished(self, end_time: Optional[datetime] = None) -> None:
        with self._lock:
            self._end_time = end_time or datetime.now()

    def snapshot(self) -> RunState:
        """Return a consistent copy of the run state."""
        with self._lock:
            return RunState(
                start_time=self._start_time,
                end_time=self._end_time,
                total_requests=self._total,
                success_count=self._success,
                failure_count=self._failure,
                current_tick_count=self._tick_count,
                history=tuple(self._history),
            )
