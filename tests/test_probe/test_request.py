"""Tests for probe request normalization."""

import pytest

from iperf3_exporter.probe.request import ProbeDefaults, normalize_probe_request, resolve_timeout
from iperf3_exporter.validation.errors import MultiError, ResolutionError


class TestNormalizeProbeRequest:
    """Test suite for normalize_probe_request."""

    def test_defaults(self):
        config = normalize_probe_request({"target": "h"}, default_timeout=30.0)

        assert config.target == "h"
        assert config.port == 5201
        assert config.period == 5.0
        assert config.timeout == 30.0
        assert config.reverse_mode is False
        assert config.udp_mode is False
        assert config.bitrate == ""

    def test_period_below_timeout_unchanged(self):
        config = normalize_probe_request({"target": "h", "period": "5s"}, default_timeout=30.0)

        assert config.period == 5.0
        assert config.timeout == 30.0

    def test_all_parameters(self):
        config = normalize_probe_request({
            "target": "iperf.example.net",
            "port": "5202",
            "period": "10s",
            "reverse_mode": "true",
            "udp_mode": "1",
            "bitrate": "100M/10",
        }, default_timeout=30.0)

        assert config.port == 5202
        assert config.period == 10.0
        assert config.reverse_mode is True
        assert config.udp_mode is True
        assert config.bitrate == "100M/10"

    @pytest.mark.parametrize("period,timeout_hint", [
        ("30s", None),
        ("45s", None),
        ("10s", "10"),
        ("1m", "15.5"),
    ])
    def test_period_rescaled_to_ninety_percent_of_timeout(self, period, timeout_hint):
        config = normalize_probe_request(
            {"target": "h", "period": period},
            timeout_hint=timeout_hint,
            default_timeout=30.0
        )

        assert config.period == pytest.approx(config.timeout * 0.9)
        assert config.period < config.timeout

    def test_missing_target(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({})

        assert exc_info.value.fields == ["target"]
        assert "target" in str(exc_info.value)

    def test_empty_target(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": ""})

        assert exc_info.value.fields == ["target"]

    def test_non_integer_port(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", "port": "abc"})

        assert str(exc_info.value) == "port: must be an integer, got 'abc'"

    @pytest.mark.parametrize("port", [" 5201", "5201 ", "5_201", "52.01", "\u00b2"])
    def test_port_must_be_plain_digits(self, port):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", "port": port})

        assert exc_info.value.fields == ["port"]

    def test_signed_port(self):
        assert normalize_probe_request({"target": "h", "port": "+5202"}).port == 5202

    def test_port_out_of_range(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", "port": "70000"})

        assert exc_info.value.fields == ["port"]

    def test_invalid_period(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", "period": "five"})

        assert exc_info.value.fields == ["period"]
        assert "invalid duration format" in str(exc_info.value)

    def test_period_below_minimum(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", "period": "50ms"})

        assert exc_info.value.fields == ["period"]

    @pytest.mark.parametrize("field", ["reverse_mode", "udp_mode"])
    def test_invalid_boolean(self, field):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", field: "maybe"})

        assert str(exc_info.value) == f"{field}: must be true or false"

    def test_invalid_bitrate(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({"target": "h", "bitrate": "10X"})

        assert exc_info.value.fields == ["bitrate"]

    def test_errors_are_aggregated(self):
        with pytest.raises(MultiError) as exc_info:
            normalize_probe_request({
                "port": "abc",
                "period": "bad",
                "reverse_mode": "maybe",
                "udp_mode": "perhaps",
                "bitrate": "fast",
            })

        assert exc_info.value.fields == ["target", "port", "period", "reverse_mode", "udp_mode", "bitrate"]
        assert str(exc_info.value).startswith("multiple validation errors:")

    def test_field_errors_reported_before_timeout_hint(self):
        with pytest.raises(MultiError):
            normalize_probe_request({}, timeout_hint="not-a-number")

    def test_malformed_timeout_hint(self):
        with pytest.raises(ResolutionError):
            normalize_probe_request({"target": "h"}, timeout_hint="not-a-number")

    def test_timeout_hint_clamped_to_maximum(self):
        config = normalize_probe_request({"target": "h"}, timeout_hint="500", default_timeout=30.0)

        assert config.timeout == 300.0
        assert config.period == 5.0

    def test_custom_timeout_bounds(self):
        config = normalize_probe_request(
            {"target": "h"},
            timeout_hint="90",
            default_timeout=30.0,
            min_timeout=2.0,
            max_timeout=60.0
        )

        assert config.timeout == 60.0


class TestResolveTimeout:
    def test_hint_wins(self):
        assert resolve_timeout("12.5", default_timeout=30.0) == 12.5

    def test_configured_default(self):
        assert resolve_timeout(None, default_timeout=45.0) == 45.0

    def test_fallback(self):
        assert resolve_timeout(None) == ProbeDefaults.TIMEOUT

    def test_zero_hint_counts_as_absent(self):
        assert resolve_timeout("0", default_timeout=20.0) == 20.0

    def test_negative_hint_counts_as_absent(self):
        assert resolve_timeout("-5", default_timeout=20.0) == 20.0

    def test_clamps_to_minimum(self):
        assert resolve_timeout("0.2") == ProbeDefaults.MIN_TIMEOUT

    def test_clamps_to_maximum(self):
        assert resolve_timeout("500", default_timeout=30.0) == ProbeDefaults.MAX_TIMEOUT

    @pytest.mark.parametrize("hint", ["abc", "1s", "nan", "inf", "1_0", " 10", "10 "])
    def test_malformed(self, hint):
        with pytest.raises(ResolutionError):
            resolve_timeout(hint)
