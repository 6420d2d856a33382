"""Pydantic configuration models for the exporter."""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Tuple


class ExporterConfig(BaseModel):
    """Root configuration model for the iperf3 exporter."""
    listen_address: str = "0.0.0.0:9579"
    metrics_path: str = "/metrics"
    probe_path: str = "/probe"
    timeout: float = Field(default=30.0, gt=0)  # Used when Prometheus sends no scrape timeout
    min_timeout: float = Field(default=1.0, gt=0)
    max_timeout: float = Field(default=300.0, gt=0)
    iperf3_path: Optional[str] = None  # Look up iperf3 on PATH if None
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator('metrics_path', 'probe_path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate HTTP path format."""
        if not v:
            raise ValueError('path cannot be empty')
        if not v.startswith('/'):
            raise ValueError('path must start with /')
        return v

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Validate host:port format."""
        host, sep, port = v.rpartition(':')
        if not sep or not port.isdigit():
            raise ValueError('listen address must be in host:port format')
        if not 0 < int(port) <= 65535:
            raise ValueError('listen port must be between 1 and 65535')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
            raise ValueError('log level must be one of: DEBUG, INFO, WARNING, ERROR')
        return level

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ('json', 'text'):
            raise ValueError('log format must be one of: json, text')
        return v

    @model_validator(mode='after')
    def timeout_bounds_ordered(self) -> 'ExporterConfig':
        """Ensure min_timeout does not exceed max_timeout."""
        if self.min_timeout > self.max_timeout:
            raise ValueError('min_timeout must not exceed max_timeout')
        return self

    @property
    def host_port(self) -> Tuple[str, int]:
        """Split listen_address into (host, port); an empty host means all interfaces."""
        host, _, port = self.listen_address.rpartition(':')
        return (host.strip('[]') or "0.0.0.0", int(port))
