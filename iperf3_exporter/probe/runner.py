"""iperf3 execution and result parsing."""

from abc import ABC, abstractmethod
import logging
import os
import shutil
import subprocess
from typing import List, Optional, Union

from ..utils.status import FailureKind, Protocol
from ..validation.errors import ValidationError
from ..validation.validators import validate_bitrate, validate_port, format_duration
from .models import (
    ProbeConfig,
    ProbeResult,
    TCPMeasurements,
    TransferStats,
    UDPMeasurements,
    UDPTransferStats,
)
from .report import IperfReport, ReportParseError, UDPSum, extract_report_error, parse_report


# iperf3's own default for UDP; TCP is unlimited unless a bitrate is given
UDP_DEFAULT_BITRATE = "1M"


def get_iperf_cmd() -> str:
    """Name of the iperf3 executable on this platform."""
    if os.name == "nt":
        return "iperf3.exe"
    return "iperf3"


def check_iperf3_exists(iperf3_cmd: Optional[str] = None) -> bool:
    """
    Check that the iperf3 binary can be found on PATH (or at the given path).

    Args:
        iperf3_cmd: Executable name or path; defaults to get_iperf_cmd()

    Returns:
        bool: True if the binary exists and is executable
    """
    return shutil.which(iperf3_cmd or get_iperf_cmd()) is not None


class Runner(ABC):
    """Runs one iperf3 probe and returns its parsed result."""

    @abstractmethod
    def run(self, config: ProbeConfig, timeout: Optional[float] = None) -> ProbeResult:
        """
        Execute exactly one probe for config.

        Args:
            config: Probe configuration
            timeout: Deadline in seconds; None means no deadline

        Returns:
            ProbeResult: Never raises, failures are reported in the result
        """
        raise NotImplementedError


class IperfRunner(Runner):
    """
    Runner that shells out to the iperf3 binary in client mode with JSON output.

    The process is bound to the deadline: when it expires the child is killed
    and a failed result is returned. There are no retries; Prometheus
    re-scraping is the retry policy.
    """

    def __init__(self, logger: logging.Logger, iperf3_cmd: Optional[str] = None):
        """
        Initialize runner.

        Args:
            logger: Logger instance
            iperf3_cmd: Executable name or path; defaults to get_iperf_cmd()
        """
        self.logger = logger.getChild(self.__class__.__name__)
        self.iperf3_cmd = iperf3_cmd or get_iperf_cmd()

    def build_args(self, config: ProbeConfig) -> List[str]:
        """
        Build the iperf3 argument list for config.

        Returns:
            List[str]: Arguments, not including the executable
        """
        # iperf3 treats -t 0 as "run forever", so sub-second periods round up to 1
        seconds = max(1, int(round(config.period)))

        args = [
            "-J",
            "-t", str(seconds),
            "-c", config.target,
            "-p", str(config.port),
        ]

        if config.reverse_mode:
            args.append("-R")

        if config.udp_mode:
            args.append("-u")
            bitrate = config.bitrate
            if not bitrate:
                bitrate = UDP_DEFAULT_BITRATE
                self.logger.debug(f"No bitrate given for UDP probe, using default {UDP_DEFAULT_BITRATE}")
            args.extend(["-b", bitrate])
        elif config.bitrate:
            args.extend(["-b", config.bitrate])

        return args

    def run(self, config: ProbeConfig, timeout: Optional[float] = None) -> ProbeResult:
        protocol = config.protocol

        # The runner may be used without going through request normalization
        try:
            validate_bitrate(config.bitrate)
            validate_port(config.port)
        except ValidationError as e:
            self.logger.error(f"Invalid probe configuration: {e}")
            return ProbeResult.failure(protocol, f"invalid probe configuration: {e}", FailureKind.INVALID_CONFIG)

        cmd = [self.iperf3_cmd] + self.build_args(config)

        self.logger.debug(
            "Running iperf3 command",
            extra={
                "target": config.target,
                "port": config.port,
                "period": config.period,
                "reverse_mode": config.reverse_mode,
                "udp_mode": config.udp_mode,
                "bitrate": config.bitrate,
            }
        )

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False
            )
        except subprocess.TimeoutExpired as e:
            return self._execution_failure(
                protocol,
                f"timed out after {format_duration(timeout)}",
                _as_text(e.stderr),
                FailureKind.TIMEOUT
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            return self._execution_failure(protocol, str(e), "")

        if proc.returncode != 0:
            # iperf3 -J reports most failures inside the JSON document, not on stderr
            detail = (proc.stderr or "").strip() or extract_report_error(proc.stdout or "") or ""
            return self._execution_failure(protocol, f"exit status {proc.returncode}", detail)

        try:
            report = parse_report(proc.stdout)
        except ReportParseError as e:
            self.logger.error(f"Failed to parse iperf3 result: {e}")
            return ProbeResult.failure(protocol, f"failed to parse iperf3 result: {e}", FailureKind.PARSE)

        if protocol is Protocol.UDP:
            measurements = self._udp_measurements(report, config)
        else:
            measurements = self._tcp_measurements(report)

        result = ProbeResult.ok(measurements)

        self.logger.debug(
            "iperf3 test completed successfully",
            extra={
                "target": config.target,
                "sent_bps": measurements.sent.bits_per_second,
                "received_bps": measurements.received.bits_per_second,
            }
        )

        return result

    def _execution_failure(
        self,
        protocol: Protocol,
        cause: str,
        stderr: str,
        kind: FailureKind = FailureKind.EXECUTION
    ) -> ProbeResult:
        """Log and build the failed result for a process that did not complete cleanly."""
        stderr = stderr.strip()
        if stderr:
            self.logger.error(f"Failed to run iperf3: {cause}", extra={"stderr": stderr})
            return ProbeResult.failure(protocol, f"iperf3 execution failed: {cause}: {stderr}", kind)

        self.logger.error(f"Failed to run iperf3: {cause}")
        return ProbeResult.failure(protocol, f"iperf3 execution failed: {cause}", kind)

    def _tcp_measurements(self, report: IperfReport) -> TCPMeasurements:
        sent = report.end.sum_sent
        received = report.end.sum_received

        return TCPMeasurements(
            sent=TransferStats(
                seconds=sent.seconds,
                bytes=sent.bytes,
                bits_per_second=sent.bits_per_second,
            ),
            received=TransferStats(
                seconds=received.seconds,
                bytes=received.bytes,
                bits_per_second=received.bits_per_second,
            ),
            retransmits=sent.retransmits,
        )

    def _udp_measurements(self, report: IperfReport, config: ProbeConfig) -> UDPMeasurements:
        # Sender figures come from the first stream, receiver figures from the aggregate sum
        if report.end.streams:
            sent = _udp_stats(report.end.streams[0].udp)
        else:
            self.logger.warning(
                "iperf3 UDP report has no streams, sender metrics will be zero",
                extra={"target": config.target}
            )
            sent = UDPTransferStats()

        received = _udp_stats(report.end.sum)
        if received.bits_per_second <= 0 and received.bytes <= 0:
            # Known iperf3 quirk: receiver data can be missing from UDP reports
            self.logger.warning(
                "iperf3 UDP report has no receiver data, receiver metrics may be incomplete",
                extra={"target": config.target}
            )

        return UDPMeasurements(sent=sent, received=received)


def _udp_stats(block: UDPSum) -> UDPTransferStats:
    return UDPTransferStats(
        seconds=block.seconds,
        bytes=block.bytes,
        bits_per_second=block.bits_per_second,
        packets=block.packets,
        jitter_ms=block.jitter_ms,
        lost_packets=block.lost_packets,
        lost_percent=block.lost_percent,
    )


def _as_text(data: Union[str, bytes, None]) -> str:
    # TimeoutExpired carries partial output as bytes even when text=True
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
