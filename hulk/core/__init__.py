"""Core load test engine components."""

from .controller import TestController
from .dispatcher import DispatchLoop
from .errors import (
    AlreadyRunningError,
    AnalysisError,
    ConfigError,
    HulkError,
    LifecycleError,
    NotRunningError,
    ResourceReadError,
)
from .models import HttpMethod, Report, ResourceSnapshot, RunState, Status, TestConfig, ThroughputSample
from .report_store import ReportStore
from .resources import sample_resources, suggest_concurrency
from .stats import StatsAggregator

__all__ = [
    "TestController",
    "DispatchLoop",
    "StatsAggregator",
    "ReportStore",
    "sample_resources",
    "suggest_concurrency",
    "HttpMethod",
    "TestConfig",
    "RunState",
    "ThroughputSample",
    "Report",
    "Status",
    "ResourceSnapshot",
    "HulkError",
    "ConfigError",
    "LifecycleError",
    "AlreadyRunningError",
    "NotRunningError",
    "ResourceReadError",
    "AnalysisError",
]
