"""Fixed-cadence request dispatch."""

import asyncio
import logging
import time
from typing import Optional, Set

import aiohttp

from ..settings import DEFAULTS
from .models import TestConfig
from .stats import StatsAggregator


class DispatchLoop:
    """
    Fires one batch of ``concurrency`` requests per tick.

    The first batch goes out immediately and a run of ``duration`` seconds
    issues at most ``duration`` batches. Calls are independent tasks bound
    only by their own timeout, so a slow target never delays the next tick.
    In-flight calls are not capped: if the target is slower than the
    cadence, outstanding requests keep accumulating.
    """

    def __init__(
        self,
        config: TestConfig,
        aggregator: StatsAggregator,
        tick_interval: float = DEFAULTS["tick_interval_seconds"],
        request_timeout: float = DEFAULTS["request_timeout_seconds"],
    ):
        self.config = config
        self.aggregator = aggregator
        self.tick_interval = tick_interval
        self.request_timeout = request_timeout
        self.batches_sent = 0

        self._running = False
        self._ticker: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()
        self._session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(__name__)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> int:
        """Number of calls launched but not yet resolved."""
        return len(self._in_flight)

    def start(self) -> None:
        """Open the HTTP session and begin ticking. Must run inside the event loop."""
        if self._running:
            raise RuntimeError("Dispatch loop is already running")

        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        # limit=0: no connection cap, batches must not queue behind each other
        connector = aiohttp.TCPConnector(limit=0)
        self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)

        self._running = True
        self._ticker = asyncio.create_task(self._tick_loop())

    def stop(self) -> None:
        """Stop issuing batches. Calls already in flight are left to finish."""
        if not self._running:
            return
        self._running = False
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def wait_drained(self) -> None:
        """Wait for every in-flight call to resolve, then close the session."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
        if self._session is not None and not self._running:
            await self._session.close()
            self._session = None

    async def _tick_loop(self) -> None:
        started = time.monotonic()
        for tick in range(self.config.duration):
            if tick:
                delay = started + tick * self.tick_interval - time.monotonic()
                await asyncio.sleep(max(0.0, delay))
            if not self._running:
                break
            self._fire_batch()
            self.logger.debug(
                f"Tick {tick}: launched {self.config.concurrency} requests "
                f"({self.in_flight} in flight)"
            )

    def _fire_batch(self) -> None:
        for _ in range(self.config.concurrency):
            task = asyncio.create_task(self._send_request())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
        self.batches_sent += 1

    async def _send_request(self) -> None:
        """Send a single request and record whether it completed."""
        kwargs = {}
        if self.config.has_body:
            kwargs["json"] = self.config.json_body

        try:
            async with self._session.request(
                self.config.method.value, self.config.url, **kwargs
            ) as response:
                # Any response that completes counts, whatever its status
                await response.read()
            success = True
        except Exception as e:
            self.logger.debug(f"Request failed: {type(e).__name__}: {e}")
            success = False

        self.aggregator.record_outcome(success)
