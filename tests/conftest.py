"""Shared pytest configuration and fixtures."""

import json
import os
import stat
import threading
import time

import pytest
from prometheus_client import REGISTRY

from iperf3_exporter.config.models import ExporterConfig
from iperf3_exporter.probe.models import ProbeConfig
from iperf3_exporter.probe.runner import Runner
from iperf3_exporter.utils.logger import setup_logger


TCP_REPORT = {
    "start": {"test_start": {"protocol": "TCP", "duration": 5}},
    "end": {
        "sum_sent": {
            "seconds": 5,
            "bytes": 52428800,
            "bits_per_second": 83886080,
            "retransmits": 10
        },
        "sum_received": {
            "seconds": 5,
            "bytes": 47185920,
            "bits_per_second": 75497472
        }
    }
}

UDP_REPORT = {
    "start": {"test_start": {"protocol": "UDP", "duration": 5}},
    "end": {
        "streams": [{
            "udp": {
                "seconds": 5.0,
                "bytes": 655360,
                "bits_per_second": 1048576,
                "packets": 480,
                "jitter_ms": 0.021,
                "lost_packets": 2,
                "lost_percent": 0.41
            }
        }],
        "sum": {
            "seconds": 5.01,
            "bytes": 652632,
            "bits_per_second": 1042116,
            "packets": 478,
            "jitter_ms": 0.034,
            "lost_packets": 4,
            "lost_percent": 0.83
        }
    }
}


class StubRunner(Runner):
    """
    Deterministic runner for tests.

    Returns the configured result (or raises the configured exception),
    records every config it was called with, and flags overlapping calls.
    """

    def __init__(self, result=None, delay: float = 0.0, exc: Exception = None):
        self.result = result
        self.delay = delay
        self.exc = exc
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def run(self, config, timeout=None):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.calls.append((config, timeout))
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.exc is not None:
                raise self.exc
            return self.result
        finally:
            with self._guard:
                self.active -= 1


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def tcp_report():
    return json.dumps(TCP_REPORT)


@pytest.fixture
def udp_report():
    return json.dumps(UDP_REPORT)


@pytest.fixture
def probe_config():
    """TCP probe configuration with a 10s deadline."""
    return ProbeConfig(target="example.com", port=5201, period=5.0, timeout=10.0)


@pytest.fixture
def udp_probe_config():
    return ProbeConfig(target="example.com", port=5201, period=5.0, timeout=10.0, udp_mode=True)


@pytest.fixture
def exporter_config():
    return ExporterConfig(timeout=30.0)


@pytest.fixture
def errors_total():
    """Read the process-wide error counter."""
    def read() -> float:
        return REGISTRY.get_sample_value("iperf3_exporter_errors_total") or 0.0
    return read


@pytest.fixture
def fake_iperf3(tmp_path):
    """
    Write a stand-in iperf3 executable.

    Returns a factory taking the stdout text, stderr text and exit code; the
    factory returns (path to executable, path to the file the script writes
    its arguments to, one per line).
    """
    if os.name == "nt":
        pytest.skip("shell script stand-in requires a POSIX shell")

    def make(stdout: str = "", stderr: str = "", exit_code: int = 0, sleep: float = 0):
        script = tmp_path / "iperf3"
        args_file = tmp_path / "args.txt"
        (tmp_path / "stdout.txt").write_text(stdout)
        (tmp_path / "stderr.txt").write_text(stderr)
        lines = [
            "#!/bin/sh",
            f'printf "%s\\n" "$@" > "{args_file}"',
        ]
        if sleep:
            lines.append(f"sleep {sleep}")
        lines += [
            f'cat "{tmp_path / "stdout.txt"}"',
            f'cat "{tmp_path / "stderr.txt"}" >&2',
            f"exit {exit_code}",
        ]
        script.write_text("\n".join(lines) + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script), args_file

    return make


@pytest.fixture
def stub_runner():
    """Factory for StubRunner instances."""
    return StubRunner
