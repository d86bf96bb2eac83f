from collections import namedtuple

import psutil
import pytest

from hulk.core import resources
from hulk.core.errors import ResourceReadError
from hulk.core.resources import sample_resources, suggest_concurrency

_VirtualMemory = namedtuple("_VirtualMemory", ["total", "available"])


def test_suggest_concurrency_uses_fixed_heuristic():
    assert suggest_concurrency(1) == 40
    assert suggest_concurrency(8) == 320
    assert suggest_concurrency(3) == 120


def test_sample_resources(monkeypatch):
    monkeypatch.setattr(resources.psutil, "cpu_percent", lambda interval: 12.5)
    monkeypatch.setattr(
        resources.psutil, "virtual_memory", lambda: _VirtualMemory(total=16 * 1024 ** 3, available=4 * 1024 ** 3)
    )
    monkeypatch.setattr(resources.psutil, "cpu_count", lambda logical: 4)

    snapshot = sample_resources(cpu_interval=0)
    assert snapshot.cpu_usage_percent == 12.5
    assert snapshot.free_memory_percent == pytest.approx(25.0)
    assert snapshot.total_memory_gb == pytest.approx(16.0)
    assert snapshot.logical_core_count == 4
    assert snapshot.suggested_concurrency == 160
    assert snapshot.to_dict() == {
        "cpuUsage": 12.5,
        "freeMemPercentage": 25.0,
        "totalMemGB": 16.0,
        "cpuCount": 4,
        "suggestedConcurrency": 160,
    }


def test_read_failure_is_surfaced(monkeypatch):
    def broken(interval):
        raise psutil.AccessDenied()

    monkeypatch.setattr(resources.psutil, "cpu_percent", broken)
    with pytest.raises(ResourceReadError):
        sample_resources(cpu_interval=0)


def test_unknown_core_count_is_an_error(monkeypatch):
    monkeypatch.setattr(resources.psutil, "cpu_percent", lambda interval: 1.0)
    monkeypatch.setattr(resources.psutil, "virtual_memory", lambda: _VirtualMemory(total=1, available=1))
    monkeypatch.setattr(resources.psutil, "cpu_count", lambda logical: None)
    with pytest.raises(ResourceReadError):
        sample_resources(cpu_interval=0)
