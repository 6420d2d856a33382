"""Metric names and the exporter's own process-wide metrics."""

from prometheus_client import Counter, Info, Summary

from ..version import __version__


NAMESPACE = "iperf3"

# Families emitted for every probe, whatever the protocol
PROBE_METRIC_NAMES = (
    "up",
    "sent_seconds",
    "sent_bytes",
    "received_seconds",
    "received_bytes",
)

TCP_METRIC_NAMES = (
    "retransmits",
)

UDP_METRIC_NAMES = (
    "sent_packets",
    "sent_jitter_ms",
    "sent_lost_packets",
    "sent_lost_percent",
    "received_packets",
    "received_jitter_ms",
    "received_lost_packets",
    "received_lost_percent",
)

METRIC_HELP = {
    "up": "Was the last iperf3 probe successful (1 for success, 0 for failure).",
    "sent_seconds": "Total seconds spent sending packets.",
    "sent_bytes": "Total sent bytes for the last test run.",
    "received_seconds": "Total seconds spent receiving packets.",
    "received_bytes": "Total received bytes for the last test run.",
    "retransmits": "Total retransmits for the last test run.",
    "sent_packets": "Total sent packets for the last UDP test run.",
    "sent_jitter_ms": "Jitter in milliseconds reported by the sender for the last UDP test run.",
    "sent_lost_packets": "Lost packets reported by the sender for the last UDP test run.",
    "sent_lost_percent": "Percentage of packets lost reported by the sender for the last UDP test run.",
    "received_packets": "Total received packets for the last UDP test run.",
    "received_jitter_ms": "Jitter in milliseconds reported by the receiver for the last UDP test run.",
    "received_lost_packets": "Lost packets reported by the receiver for the last UDP test run.",
    "received_lost_percent": "Percentage of packets lost reported by the receiver for the last UDP test run.",
}

LABEL_NAMES = ["target", "port"]


def metric_name(suffix: str) -> str:
    """Build the fully-qualified metric name for a probe observation."""
    return f"{NAMESPACE}_{suffix}"


# Metrics about the exporter itself. Created once per process and shared by
# every collector instance; both only need increment/observe safety.
IPERF_DURATION = Summary(
    "iperf3_exporter_duration_seconds",
    "Duration of collections by the iperf3 exporter."
)

IPERF_ERRORS = Counter(
    "iperf3_exporter_errors",
    "Errors raised by the iperf3 exporter."
)

BUILD_INFO = Info(
    "iperf3_exporter_build",
    "Version information about the iperf3 exporter."
)
BUILD_INFO.info({"version": __version__})
