"""Prometheus collector running one iperf3 probe per scrape."""

import threading
import logging
from typing import List, Optional

from prometheus_client.core import Metric

from ..probe.models import ProbeConfig, ProbeResult
from ..probe.runner import IperfRunner, Runner
from ..utils.metrics import (
    IPERF_DURATION,
    IPERF_ERRORS,
    PROBE_METRIC_NAMES,
    TCP_METRIC_NAMES,
    UDP_METRIC_NAMES,
)
from .base import BaseCollector, safe_probe


class Iperf3Collector(BaseCollector):
    """
    Collector for one iperf3 target.

    Each collect() runs a fresh probe and maps the result onto gauges
    labelled with the target and port. Calls are serialized on a per-instance
    lock, so at most one iperf3 process is running for this collector and
    concurrent scrapes wait their turn.
    """

    def __init__(
        self,
        config: ProbeConfig,
        logger: logging.Logger,
        runner: Optional[Runner] = None
    ):
        """
        Initialize iperf3 collector.

        Args:
            config: Probe configuration for the target
            logger: Logger instance
            runner: Probe runner; defaults to an IperfRunner
        """
        super().__init__(config, logger)
        self.runner = runner or IperfRunner(logger)
        self._lock = threading.Lock()

    def describe(self) -> List[Metric]:
        suffixes = PROBE_METRIC_NAMES + TCP_METRIC_NAMES + UDP_METRIC_NAMES
        return [self._describe_family(suffix) for suffix in suffixes]

    def collect(self) -> List[Metric]:
        """
        Run one probe and build the snapshot.

        Returns:
            List[Metric]: up, sent/received seconds and bytes, plus the
            TCP-only or UDP-only families for the probe's protocol
        """
        with self._lock:
            with IPERF_DURATION.time():
                result = self._probe()

        if not result.success:
            kind = result.failure_kind.value if result.failure_kind else None
            self.logger.debug(
                f"Probe of {self.config.target}:{self.config.port} failed: {result.error}",
                extra={"failure_kind": kind}
            )
            IPERF_ERRORS.inc()

        return self._snapshot(result)

    @safe_probe
    def _probe(self) -> ProbeResult:
        return self.runner.run(self.config, timeout=self.config.timeout)

    def _snapshot(self, result: ProbeResult) -> List[Metric]:
        """
        Map a result onto gauge families.

        Failed probes keep the same family set with every value zero.
        """
        label_values = [self.config.target, self.config.port_label]
        values = result.observations()

        suffixes = PROBE_METRIC_NAMES + (UDP_METRIC_NAMES if result.udp_mode else TCP_METRIC_NAMES)

        families = []
        for suffix in suffixes:
            if suffix == "up":
                value = 1.0 if result.success else 0.0
            else:
                value = values.get(suffix, 0.0)
            families.append(self._gauge(suffix, value, label_values))

        return families
