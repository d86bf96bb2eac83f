"""Fixed-cadence HTTP load testing engine."""

__version__ = "1.0.0"
