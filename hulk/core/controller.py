"""Load test lifecycle: start, auto-stop, finalize."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Set, Union

from ..settings import DEFAULTS
from .dispatcher import DispatchLoop
from .errors import AlreadyRunningError, NotRunningError
from .models import Report, Status, TestConfig
from .report_store import ReportStore
from .stats import StatsAggregator

logger = logging.getLogger(__name__)

# Tolerance when converting monotonic time to whole elapsed ticks
_TICK_EPSILON = 1e-3


@dataclass
class _ActiveRun:
    config: TestConfig
    aggregator: StatsAggregator
    dispatcher: DispatchLoop
    started: float  # time.monotonic() at start
    roll_task: Optional[asyncio.Task] = None
    deadline_task: Optional[asyncio.Task] = None
    finalized: bool = False
    report: Optional[Report] = None
    done: asyncio.Event = field(default_factory=asyncio.Event)


class TestController:
    """
    Owns at most one running load test.

    A run is driven by three tasks: the dispatch ticker, a roll-up ticker
    that closes each second's throughput sample, and a one-shot deadline.
    Whichever of ``stop()`` or the deadline gets the lock first finalizes
    the run; the other finds it already finalized and does nothing.

    A manual stop reports immediately. The deadline stops issuing batches,
    waits for in-flight calls to resolve, then reports, so calls that time
    out are counted as failures. The run stays active during that drain.
    """

    __test__ = False

    def __init__(
        self,
        store: Optional[ReportStore] = None,
        tick_interval: float = DEFAULTS["tick_interval_seconds"],
        request_timeout: float = DEFAULTS["request_timeout_seconds"],
        history_capacity: int = DEFAULTS["history_capacity"],
    ):
        self.store = store if store is not None else ReportStore()
        self.tick_interval = tick_interval
        self.request_timeout = request_timeout
        self.history_capacity = history_capacity

        self._lock = asyncio.Lock()
        self._run: Optional[_ActiveRun] = None
        self._last_report: Optional[Report] = None
        self._drain_tasks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._run is not None

    async def start(self, config: Union[TestConfig, Dict[str, Any]]) -> TestConfig:
        """
        Start a new run.

        Args:
            config: Validated TestConfig, or a raw payload to validate

        Returns:
            The config the run was started with

        Raises:
            AlreadyRunningError: If a run is already active
            ConfigError: If the payload is invalid
        """
        async with self._lock:
            if self._run is not None:
                raise AlreadyRunningError()
            if not isinstance(config, TestConfig):
                config = TestConfig.from_dict(config)

            aggregator = StatsAggregator(
                start_time=datetime.now(), history_capacity=self.history_capacity
            )
            dispatcher = DispatchLoop(
                config,
                aggregator,
                tick_interval=self.tick_interval,
                request_timeout=self.request_timeout,
            )
            run = _ActiveRun(
                config=config,
                aggregator=aggregator,
                dispatcher=dispatcher,
                started=time.monotonic(),
            )

            dispatcher.start()
            run.roll_task = asyncio.create_task(self._roll_loop(run))
            run.deadline_task = asyncio.create_task(self._deadline(run))
            self._run = run

        logger.info(
            f"Starting test on {config.url} ({config.method.value}) with "
            f"{config.concurrency} concurrent users for {config.duration}s"
        )
        return config

    async def stop(self) -> Optional[Report]:
        """
        Stop the active run and finalize its report.

        Returns:
            The finalized Report, or None if the run sent no requests

        Raises:
            NotRunningError: If no run is active
        """
        async with self._lock:
            run = self._run
            if run is None:
                raise NotRunningError()
            if not run.finalized:
                return self._finalize(run, "manual")
        # The deadline already claimed this run and is draining it
        await run.done.wait()
        return run.report

    def poll_status(self) -> Status:
        """Live stats while running, otherwise the last stored report."""
        run = self._run
        if run is not None:
            return Status(
                is_running=True,
                stats=run.aggregator.snapshot(),
                elapsed_seconds=time.monotonic() - run.started,
            )
        report = self._last_report
        return Status(
            is_running=False,
            stats=report,
            elapsed_seconds=report.test_duration_seconds if report else 0.0,
        )

    async def wait_finished(self) -> Optional[Report]:
        """Wait for the active run to finalize and return its report.

        With no active run, returns the last stored report.
        """
        run = self._run
        if run is None:
            return self._last_report
        await run.done.wait()
        return run.report

    async def shutdown(self) -> None:
        """Stop any active run and wait for in-flight calls to drain."""
        if self._run is not None:
            try:
                await self.stop()
            except NotRunningError:
                pass
        while self._drain_tasks:
            await asyncio.gather(*list(self._drain_tasks), return_exceptions=True)

    async def _roll_loop(self, run: _ActiveRun) -> None:
        elapsed = 1
        while True:
            delay = run.started + elapsed * self.tick_interval - time.monotonic()
            await asyncio.sleep(max(0.0, delay))
            sample = run.aggregator.roll_tick(elapsed)
            logger.info(
                f"[{elapsed}s] {sample.requests_per_second} req/s "
                f"(in flight: {run.dispatcher.in_flight})"
            )
            elapsed += 1

    async def _deadline(self, run: _ActiveRun) -> None:
        await asyncio.sleep(run.config.duration * self.tick_interval)
        async with self._lock:
            if self._run is not run or run.finalized:
                return
            self._halt(run)
            end_time = datetime.now()

        # Each call's own timeout bounds this wait
        try:
            await run.dispatcher.wait_drained()
            logger.debug(f"In-flight calls drained {time.monotonic() - run.started:.2f}s after start")
        finally:
            async with self._lock:
                self._complete(run, "deadline", end_time)

    def _halt(self, run: _ActiveRun) -> None:
        """Claim ``run`` for finalization and stop its tasks. Caller must hold ``self._lock``."""
        run.finalized = True
        current = asyncio.current_task()
        for task in (run.roll_task, run.deadline_task):
            if task is not None and task is not current:
                task.cancel()
        run.dispatcher.stop()

    def _finalize(self, run: _ActiveRun, reason: str) -> Optional[Report]:
        """Finalize ``run`` immediately. Caller must hold ``self._lock``."""
        self._halt(run)
        return self._complete(run, reason, datetime.now())

    def _complete(self, run: _ActiveRun, reason: str, end_time: datetime) -> Optional[Report]:
        """Build, store and hand off the report. Caller must hold ``self._lock``."""
        # Record a whole second the roll-up task had not reached yet
        if reason == "deadline":
            whole_ticks = run.config.duration
        else:
            whole_ticks = int((time.monotonic() - run.started) / self.tick_interval + _TICK_EPSILON)
        if whole_ticks > run.aggregator.last_elapsed:
            run.aggregator.roll_tick(whole_ticks)

        run.aggregator.mark_finished(end_time)
        report = Report.from_state(run.config, run.aggregator.snapshot(), stop_reason=reason)
        self._run = None

        drain = asyncio.create_task(run.dispatcher.wait_drained())
        self._drain_tasks.add(drain)
        drain.add_done_callback(self._drain_tasks.discard)

        if report.total_requests > 0:
            self.store.append(report)
            self._last_report = report
            logger.info(
                f"Test stopped ({reason}): {report.total_requests} requests, "
                f"{report.success_rate:.2f}% success, {report.average_rps:.2f} avg req/s"
            )
        else:
            report = None
            logger.info(f"Test stopped ({reason}) before any request completed; report discarded")

        run.report = report
        run.done.set()
        return report
