"""Exceptions raised by the load test engine."""


class HulkError(Exception):
    """Base class for all engine errors."""


class ConfigError(HulkError, ValueError):
    """A test configuration is missing fields or has invalid values."""


class LifecycleError(HulkError, RuntimeError):
    """A start/stop request does not match the controller state."""


class AlreadyRunningError(LifecycleError):
    def __init__(self, message: str = "A test is already in progress."):
        super().__init__(message)


class NotRunningError(LifecycleError):
    def __init__(self, message: str = "No test is currently running."):
        super().__init__(message)


class ResourceReadError(HulkError):
    """Host CPU or memory metrics could not be read."""


class AnalysisError(HulkError):
    """The report analyzer failed or returned an unusable response."""
