"""Pydantic models for the iperf3 JSON (-J) report."""

import json
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class ReportParseError(Exception):
    """iperf3 produced output that is not a usable JSON report."""


class _ReportModel(BaseModel):
    """Base for report sections: unknown keys are ignored, missing or null numbers are zero."""
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # iperf3 writes NaN (e.g. lost_percent with no packets received) as null
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class TCPSum(_ReportModel):
    """end.sum_sent / end.sum_received block of a TCP report."""
    seconds: float = 0.0
    bytes: float = 0.0
    bits_per_second: float = 0.0
    retransmits: float = 0.0


class UDPSum(_ReportModel):
    """end.streams[].udp and end.sum blocks of a UDP report."""
    seconds: float = 0.0
    bytes: float = 0.0
    bits_per_second: float = 0.0
    packets: float = 0.0
    jitter_ms: float = 0.0
    lost_packets: float = 0.0
    lost_percent: float = 0.0


class StreamReport(_ReportModel):
    udp: UDPSum = Field(default_factory=UDPSum)


class EndReport(_ReportModel):
    sum_sent: TCPSum = Field(default_factory=TCPSum)
    sum_received: TCPSum = Field(default_factory=TCPSum)
    streams: List[StreamReport] = Field(default_factory=list)
    sum: UDPSum = Field(default_factory=UDPSum)

    @field_validator("streams", mode="before")
    @classmethod
    def null_streams_are_empty(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{} if stream is None else stream for stream in v]
        return v


class IperfReport(_ReportModel):
    """
    The parts of an iperf3 report the exporter reads.

    TCP results live in end.sum_sent/end.sum_received. UDP sender figures
    come from the first stream (end.streams[0].udp) while receiver figures
    come from the aggregate end.sum block.
    """
    end: EndReport = Field(default_factory=EndReport)
    error: Optional[str] = None


def parse_report(output: str) -> IperfReport:
    """
    Parse iperf3 JSON output.

    Args:
        output: stdout of an `iperf3 -J` run

    Returns:
        IperfReport: Parsed report

    Raises:
        ReportParseError: If output is not JSON or has the wrong shape
    """
    try:
        return IperfReport.model_validate_json(output)
    except ValidationError as e:
        raise ReportParseError(str(e)) from e


def extract_report_error(output: str) -> Optional[str]:
    """
    Read the top-level "error" field iperf3 writes on a failed test.

    Returns:
        Optional[str]: The error text, or None if output has none
    """
    try:
        data = json.loads(output)
    except ValueError:
        return None

    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return None
