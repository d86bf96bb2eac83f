"""Host resource sampling and concurrency suggestion."""

import logging
import math

import psutil

from ..settings import DEFAULTS
from .errors import ResourceReadError
from .models import ResourceSnapshot

logger = logging.getLogger(__name__)


def suggest_concurrency(logical_cores: int) -> int:
    """Suggest a batch size: 50 virtual users per core at 80% capacity."""
    return math.floor(
        logical_cores * DEFAULTS["virtual_users_per_core"] * DEFAULTS["core_utilization_target"]
    )


def sample_resources(cpu_interval: float = DEFAULTS["cpu_sample_interval_seconds"]) -> ResourceSnapshot:
    """
    Read current host CPU and memory usage.

    Args:
        cpu_interval: Seconds to block while measuring CPU usage

    Returns:
        ResourceSnapshot with the suggested concurrency for this host

    Raises:
        ResourceReadError: If host metrics cannot be read
    """
    try:
        cpu_usage = psutil.cpu_percent(interval=cpu_interval)
        memory = psutil.virtual_memory()
        cores = psutil.cpu_count(logical=True)
    except (OSError, RuntimeError, psutil.Error) as e:
        logger.error(f"Failed to read host metrics: {e}")
        raise ResourceReadError(f"Failed to read host metrics: {e}") from e

    if not cores:
        raise ResourceReadError("Could not determine the logical CPU count")

    free_percent = memory.available / memory.total * 100 if memory.total else 0.0

    return ResourceSnapshot(
        cpu_usage_percent=float(cpu_usage),
        free_memory_percent=free_percent,
        total_memory_gb=memory.total / (1024 ** 3),
        logical_core_count=cores,
        suggested_concurrency=suggest_concurrency(cores),
    )
