"""Engine defaults and environment-driven settings."""

import os
from dataclasses import dataclass
from typing import Optional

# Engine constants
DEFAULTS = {
    "tick_interval_seconds": 1.0,
    "request_timeout_seconds": 5.0,
    "history_capacity": 120,
    "report_capacity": 3,
    "cpu_sample_interval_seconds": 0.1,
    "virtual_users_per_core": 50,
    "core_utilization_target": 0.8,
}

# HTTP API defaults (same port the original dashboard backend listened on)
SERVER_DEFAULTS = {
    "host": "0.0.0.0",
    "port": 3001,
}

# Report analyzer defaults
ANALYZER_DEFAULTS = {
    "base_url": "https://api.openai.com/v1",
    "model": "gpt-4o-mini",
    "timeout_seconds": 60,
    "temperature": 0.2,
}


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}")


@dataclass
class Settings:
    """Runtime settings for the server and CLI."""

    host: str = SERVER_DEFAULTS["host"]
    port: int = SERVER_DEFAULTS["port"]
    log_level: str = "INFO"

    # Analyzer (optional collaborator)
    analyzer_api_key: Optional[str] = None
    analyzer_base_url: str = ANALYZER_DEFAULTS["base_url"]
    analyzer_model: str = ANALYZER_DEFAULTS["model"]
    analyzer_timeout_seconds: int = ANALYZER_DEFAULTS["timeout_seconds"]

    @property
    def analyzer_enabled(self) -> bool:
        """Check if an analyzer credential was supplied."""
        return bool(self.analyzer_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from HULK_* environment variables."""
        return cls(
            host=os.environ.get("HULK_HOST", SERVER_DEFAULTS["host"]),
            port=_env_int("HULK_PORT", SERVER_DEFAULTS["port"]),
            log_level=os.environ.get("HULK_LOG_LEVEL", "INFO"),
            analyzer_api_key=os.environ.get("HULK_ANALYZER_API_KEY") or None,
            analyzer_base_url=os.environ.get(
                "HULK_ANALYZER_BASE_URL", ANALYZER_DEFAULTS["base_url"]
            ),
            analyzer_model=os.environ.get("HULK_ANALYZER_MODEL", ANALYZER_DEFAULTS["model"]),
            analyzer_timeout_seconds=_env_int(
                "HULK_ANALYZER_TIMEOUT", ANALYZER_DEFAULTS["timeout_seconds"]
            ),
        )
