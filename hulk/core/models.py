"""Data models for the load test engine."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigError


class HttpMethod(str, Enum):
    """HTTP methods a load test may issue."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def allows_body(self) -> bool:
        """Check if requests with this method may carry a body."""
        return self in (HttpMethod.POST, HttpMethod.PUT)


def _parse_positive_int(payload: Dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None or value == "":
        raise ConfigError(f"{key} is required.")
    # bool is an int subclass; "true" is not a valid concurrency
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a positive integer.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigError(f"{key} must be a positive integer.")
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ConfigError(f"{key} must be a positive integer.")
    if not isinstance(value, int) or value < 1:
        raise ConfigError(f"{key} must be a positive integer.")
    return value


@dataclass(frozen=True)
class TestConfig:
    """Configuration for a single load test run.

    ``body`` is the raw payload as supplied; ``json_body`` holds its parsed
    form and is only set for methods that allow a body.
    """

    __test__ = False  # not a pytest test class

    url: str
    method: HttpMethod = HttpMethod.GET
    concurrency: int = 1
    duration: int = 1
    body: Optional[str] = None
    json_body: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not self.url or not isinstance(self.url, str):
            raise ConfigError("URL is required.")
        if not self.url.startswith(("http://", "https://")):
            raise ConfigError(f"URL must start with http:// or https://, got {self.url!r}")
        if not isinstance(self.method, HttpMethod):
            raise ConfigError(f"Unsupported HTTP method: {self.method!r}")
        for name in ("concurrency", "duration"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer.")

        if self.body is not None and self.body != "":
            if not self.method.allows_body:
                raise ConfigError(f"A request body is not allowed for {self.method.value} requests.")
            try:
                parsed = json.loads(self.body)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Request body is not valid JSON: {e}")
            object.__setattr__(self, "json_body", parsed)
        else:
            object.__setattr__(self, "body", None)

    @property
    def has_body(self) -> bool:
        return self.body is not None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TestConfig":
        """
        Build a config from an API or CLI payload.

        Args:
            payload: Mapping with ``url``, ``concurrency``, ``duration`` and
                optional ``method`` and ``body``

        Returns:
            Validated TestConfig

        Raises:
            ConfigError: If a field is missing or invalid
        """
        if not isinstance(payload, dict):
            raise ConfigError("Test configuration must be an object.")

        url = payload.get("url")
        if not url or not isinstance(url, str):
            raise ConfigError("URL and concurrency are required.")

        raw_method = payload.get("method") or HttpMethod.GET.value
        try:
            method = HttpMethod(str(raw_method).upper())
        except ValueError:
            raise ConfigError(f"Unsupported HTTP method: {raw_method}")

        concurrency = _parse_positive_int(payload, "concurrency")
        duration = _parse_positive_int(payload, "duration")

        body = payload.get("body")
        if isinstance(body, bytes):
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError:
                raise ConfigError("Request body must be UTF-8 encoded JSON.")
        elif isinstance(body, (dict, list)):
            body = json.dumps(body)
        elif body is not None and not isinstance(body, str):
            raise ConfigError("Request body must be a JSON string or object.")

        return cls(
            url=url.strip(),
            method=method,
            concurrency=concurrency,
            duration=duration,
            body=body,
        )


@dataclass(frozen=True)
class ThroughputSample:
    """Requests completed during one second of a run."""

    elapsed_seconds: int
    requests_per_second: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "elapsedSeconds": self.elapsed_seconds,
            "requestsPerSecond": self.requests_per_second,
        }


@dataclass(frozen=True)
class RunState:
    """Point-in-time view of an in-progress run."""

    start_time: datetime
    end_time: Optional[datetime]
    total_requests: int
    success_count: int
    failure_count: int
    current_tick_count: int
    history: Tuple[ThroughputSample, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "totalRequests": self.total_requests,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "currentTickCount": self.current_tick_count,
            "history": [s.to_dict() for s in self.history],
        }


@dataclass(frozen=True)
class Report:
    """Finalized summary of a completed run."""

    config: TestConfig
    start_time: datetime
    end_time: datetime
    total_requests: int
    success_count: int
    failure_count: int
    history: Tuple[ThroughputSample, ...]

    # Derived metrics
    success_rate: float  # percentage, 0-100
    average_rps: float
    test_duration_seconds: float

    stop_reason: str = "manual"  # "manual" or "deadline"

    @classmethod
    def from_state(cls, config: TestConfig, state: RunState, stop_reason: str = "manual") -> "Report":
        """Compute derived metrics from a finished run's final state."""
        end_time = state.end_time or datetime.now()
        duration = max((end_time - state.start_time).total_seconds(), 0.0)
        total = state.total_requests

        success_rate = (state.success_count / total * 100) if total > 0 else 0.0
        average_rps = total / duration if duration > 0 else 0.0

        return cls(
            config=config,
            start_time=state.start_time,
            end_time=end_time,
            total_requests=total,
            success_count=state.success_count,
            failure_count=state.failure_count,
            history=tuple(state.history),
            success_rate=success_rate,
            average_rps=average_rps,
            test_duration_seconds=duration,
            stop_reason=stop_reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.config.url,
            "method": self.config.method.value,
            "concurrency": self.config.concurrency,
            "duration": self.config.duration,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "totalRequests": self.total_requests,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "successRate": round(self.success_rate, 2),
            "averageRPS": round(self.average_rps, 2),
            "testDurationSeconds": round(self.test_duration_seconds, 2),
            "stopReason": self.stop_reason,
            "history": [s.to_dict() for s in self.history],
        }


@dataclass(frozen=True)
class Status:
    """Result of polling the controller."""

    is_running: bool
    stats: Optional[Any]  # RunState while running, last Report when idle
    elapsed_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isRunning": self.is_running,
            "stats": self.stats.to_dict() if self.stats is not None else None,
            "elapsedSeconds": round(self.elapsed_seconds, 2),
        }


@dataclass(frozen=True)
class ResourceSnapshot:
    """Host resource reading with a suggested concurrency."""

    cpu_usage_percent: float
    free_memory_percent: float
    total_memory_gb: float
    logical_core_count: int
    suggested_concurrency: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpuUsage": round(self.cpu_usage_percent, 2),
            "freeMemPercentage": round(self.free_memory_percent, 2),
            "totalMemGB": round(self.total_memory_gb, 2),
            "cpuCount": self.logical_core_count,
            "suggestedConcurrency": self.suggested_concurrency,
        }
