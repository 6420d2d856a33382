"""Probe protocol enumeration."""

from enum import Enum


class Protocol(Enum):
    """Transport protocol an iperf3 probe runs over."""

    TCP = "tcp"
    UDP = "udp"

    @classmethod
    def from_udp_mode(cls, udp_mode: bool) -> "Protocol":
        """
        Map the udp_mode request flag onto a protocol.

        Args:
            udp_mode: True when the probe runs in UDP mode

        Returns:
            Protocol: UDP or TCP
        """
        return cls.UDP if udp_mode else cls.TCP

    @property
    def is_udp(self) -> bool:
        return self is Protocol.UDP


class FailureKind(Enum):
    """Why a probe produced no measurements."""

    INVALID_CONFIG = "invalid_config"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    PARSE = "parse"
