from datetime import datetime, timedelta

import pytest

from hulk.core.errors import ConfigError
from hulk.core.models import HttpMethod, Report, RunState, TestConfig, ThroughputSample


def _payload(**overrides):
    payload = {"url": "https://example.test/ok", "method": "GET", "concurrency": 5, "duration": 2}
    payload.update(overrides)
    return payload


class TestConfigFromDict:
    def test_valid_payload(self):
        config = TestConfig.from_dict(_payload())
        assert config.url == "https://example.test/ok"
        assert config.method is HttpMethod.GET
        assert config.concurrency == 5
        assert config.duration == 2
        assert config.body is None
        assert not config.has_body

    def test_method_defaults_to_get_and_is_case_insensitive(self):
        payload = _payload()
        del payload["method"]
        assert TestConfig.from_dict(payload).method is HttpMethod.GET
        assert TestConfig.from_dict(_payload(method="delete")).method is HttpMethod.DELETE

    def test_numeric_strings_are_coerced(self):
        config = TestConfig.from_dict(_payload(concurrency="10", duration="3"))
        assert config.concurrency == 10
        assert config.duration == 3

    @pytest.mark.parametrize("field", ["concurrency", "duration"])
    @pytest.mark.parametrize("value", [0, -1, "abc", 1.5, True, None, ""])
    def test_rejects_non_positive_or_non_integer(self, field, value):
        with pytest.raises(ConfigError):
            TestConfig.from_dict(_payload(**{field: value}))

    def test_rejects_missing_url(self):
        payload = _payload()
        del payload["url"]
        with pytest.raises(ConfigError):
            TestConfig.from_dict(payload)

    def test_rejects_non_http_url(self):
        with pytest.raises(ConfigError):
            TestConfig.from_dict(_payload(url="ftp://example.test/file"))

    def test_rejects_unknown_method(self):
        with pytest.raises(ConfigError, match="Unsupported HTTP method"):
            TestConfig.from_dict(_payload(method="PATCH"))

    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    def test_rejects_body_for_methods_without_body(self, method):
        with pytest.raises(ConfigError, match="not allowed"):
            TestConfig.from_dict(_payload(method=method, body='{"a": 1}'))

    @pytest.mark.parametrize("method", ["POST", "PUT"])
    def test_parses_json_body(self, method):
        config = TestConfig.from_dict(_payload(method=method, body='{"a": [1, 2]}'))
        assert config.has_body
        assert config.json_body == {"a": [1, 2]}

    def test_accepts_structured_and_bytes_body(self):
        assert TestConfig.from_dict(_payload(method="POST", body={"a": 1})).json_body == {"a": 1}
        assert TestConfig.from_dict(_payload(method="PUT", body=b"[1]")).json_body == [1]

    def test_rejects_malformed_body(self):
        with pytest.raises(ConfigError, match="not valid JSON"):
            TestConfig.from_dict(_payload(method="POST", body="{not json"))

    def test_empty_body_is_treated_as_absent(self):
        config = TestConfig.from_dict(_payload(method="GET", body=""))
        assert config.body is None

    def test_rejects_non_object_payload(self):
        with pytest.raises(ConfigError):
            TestConfig.from_dict(["https://example.test"])

    def test_config_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            TestConfig(url="https://example.test", concurrency=0)


class TestReport:
    def _state(self, total, success, seconds=2.0):
        start = datetime(2026, 1, 1, 12, 0, 0)
        return RunState(
            start_time=start,
            end_time=start + timedelta(seconds=seconds),
            total_requests=total,
            success_count=success,
            failure_count=total - success,
            current_tick_count=0,
            history=(ThroughputSample(1, total // 2), ThroughputSample(2, total - total // 2)),
        )

    def test_derived_metrics(self):
        config = TestConfig(url="https://example.test/ok", concurrency=5, duration=2)
        report = Report.from_state(config, self._state(10, 8), stop_reason="deadline")
        assert report.success_rate == pytest.approx(80.0)
        assert report.average_rps == pytest.approx(5.0)
        assert report.test_duration_seconds == pytest.approx(2.0)
        assert report.stop_reason == "deadline"

    def test_zero_requests_yields_zero_rates(self):
        config = TestConfig(url="https://example.test/ok")
        report = Report.from_state(config, self._state(0, 0, seconds=0.0))
        assert report.success_rate == 0.0
        assert report.average_rps == 0.0

    def test_to_dict_uses_api_keys(self):
        config = TestConfig(url="https://example.test/ok", concurrency=5, duration=2)
        data = Report.from_state(config, self._state(10, 10)).to_dict()
        assert data["totalRequests"] == 10
        assert data["successRate"] == 100.0
        assert data["averageRPS"] == 5.0
        assert data["history"][0] == {"elapsedSeconds": 1, "requestsPerSecond": 5}
        assert data["method"] == "GET"
