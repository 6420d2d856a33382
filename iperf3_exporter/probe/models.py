"""Probe configuration and result data structures."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union
import time

from ..utils.status import FailureKind, Protocol


DEFAULT_PORT = 5201
DEFAULT_PERIOD = 5.0
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ProbeConfig:
    """Immutable per-request probe configuration. Durations are in seconds."""

    target: str
    port: int = DEFAULT_PORT
    period: float = DEFAULT_PERIOD
    timeout: float = DEFAULT_TIMEOUT
    reverse_mode: bool = False
    udp_mode: bool = False
    bitrate: str = ""

    @property
    def protocol(self) -> Protocol:
        return Protocol.from_udp_mode(self.udp_mode)

    @property
    def port_label(self) -> str:
        return str(self.port)


@dataclass(frozen=True)
class TransferStats:
    """One side (sender or receiver) of a throughput report."""

    seconds: float = 0.0
    bytes: float = 0.0
    bits_per_second: float = 0.0


@dataclass(frozen=True)
class UDPTransferStats(TransferStats):
    """Transfer stats plus the datagram accounting iperf3 reports for UDP."""

    packets: float = 0.0
    jitter_ms: float = 0.0
    lost_packets: float = 0.0
    lost_percent: float = 0.0


@dataclass(frozen=True)
class TCPMeasurements:
    sent: TransferStats = field(default_factory=TransferStats)
    received: TransferStats = field(default_factory=TransferStats)
    retransmits: float = 0.0

    protocol = Protocol.TCP

    def observations(self) -> Dict[str, float]:
        return {
            "sent_seconds": self.sent.seconds,
            "sent_bytes": self.sent.bytes,
            "received_seconds": self.received.seconds,
            "received_bytes": self.received.bytes,
            "retransmits": self.retransmits,
        }


@dataclass(frozen=True)
class UDPMeasurements:
    sent: UDPTransferStats = field(default_factory=UDPTransferStats)
    received: UDPTransferStats = field(default_factory=UDPTransferStats)

    protocol = Protocol.UDP

    def observations(self) -> Dict[str, float]:
        values = {}
        for side, stats in (("sent", self.sent), ("received", self.received)):
            values[f"{side}_seconds"] = stats.seconds
            values[f"{side}_bytes"] = stats.bytes
            values[f"{side}_packets"] = stats.packets
            values[f"{side}_jitter_ms"] = stats.jitter_ms
            values[f"{side}_lost_packets"] = stats.lost_packets
            values[f"{side}_lost_percent"] = stats.lost_percent
        return values


Measurements = Union[TCPMeasurements, UDPMeasurements]


@dataclass
class ProbeResult:
    """
    Outcome of one iperf3 invocation.

    A successful result carries measurements of the variant matching its
    protocol. A failed one has no measurements, only a failure kind and
    an error message.
    """

    success: bool
    protocol: Protocol
    measurements: Optional[Measurements] = None
    error: Optional[str] = None
    failure_kind: Optional[FailureKind] = None
    timestamp: Optional[float] = None

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = time.time()

    @classmethod
    def ok(cls, measurements: Measurements) -> "ProbeResult":
        return cls(success=True, protocol=measurements.protocol, measurements=measurements)

    @classmethod
    def failure(
        cls,
        protocol: Protocol,
        error: str,
        kind: FailureKind = FailureKind.EXECUTION
    ) -> "ProbeResult":
        return cls(success=False, protocol=protocol, error=error, failure_kind=kind)

    @property
    def udp_mode(self) -> bool:
        return self.protocol.is_udp

    def observations(self) -> Dict[str, float]:
        """
        Flat name -> value map of the measurements.

        Returns:
            Dict[str, float]: Values keyed by metric suffix, empty on failure
        """
        if not self.success or self.measurements is None:
            return {}
        return self.measurements.observations()
