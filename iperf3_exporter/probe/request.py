"""Turn raw probe request parameters into a validated ProbeConfig."""

import math
import re
from typing import Mapping, Optional

from ..validation.errors import MultiError, ResolutionError, ValidationError
from ..validation.validators import (
    parse_bool,
    parse_duration,
    validate_bitrate,
    validate_duration,
    validate_port,
)
from .models import ProbeConfig


class ProbeDefaults:
    """Default values and bounds for probe request parameters."""

    PORT = 5201
    PERIOD = 5.0
    MIN_PERIOD = 0.1
    TIMEOUT = 30.0
    MIN_TIMEOUT = 1.0
    MAX_TIMEOUT = 300.0

    # Fraction of the timeout a too-long period is cut back to
    PERIOD_TIMEOUT_RATIO = 0.9


SCRAPE_TIMEOUT_HEADER = "X-Prometheus-Scrape-Timeout-Seconds"

# Plain decimal integers only: no whitespace or digit separators
_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')


def resolve_timeout(
    hint: Optional[str],
    default_timeout: Optional[float] = None,
    min_timeout: float = ProbeDefaults.MIN_TIMEOUT,
    max_timeout: float = ProbeDefaults.MAX_TIMEOUT
) -> float:
    """
    Work out the probe deadline.

    Resolution order is the scrape timeout hint, then the configured default,
    then ProbeDefaults.TIMEOUT. A missing or non-positive hint counts as
    absent. The result is clamped to [min_timeout, max_timeout].

    Args:
        hint: Raw scrape timeout header value in seconds
        default_timeout: Exporter-wide configured timeout
        min_timeout: Lower clamp bound
        max_timeout: Upper clamp bound

    Returns:
        float: Timeout in seconds

    Raises:
        ResolutionError: If the hint is present but not a finite number
    """
    timeout = 0.0
    if hint:
        # float() also takes surrounding whitespace and digit separators
        if "_" in hint or hint != hint.strip():
            raise ResolutionError(f"failed to parse timeout from scrape timeout header: invalid number '{hint}'")
        try:
            timeout = float(hint)
        except ValueError as e:
            raise ResolutionError(f"failed to parse timeout from scrape timeout header: {e}") from e
        if not math.isfinite(timeout):
            raise ResolutionError(f"failed to parse timeout from scrape timeout header: '{hint}' is not finite")

    if timeout <= 0:
        if default_timeout is not None and default_timeout > 0:
            timeout = default_timeout
        else:
            timeout = ProbeDefaults.TIMEOUT

    return min(max(timeout, min_timeout), max_timeout)


def normalize_probe_request(
    params: Mapping[str, str],
    timeout_hint: Optional[str] = None,
    default_timeout: Optional[float] = None,
    min_timeout: float = ProbeDefaults.MIN_TIMEOUT,
    max_timeout: float = ProbeDefaults.MAX_TIMEOUT
) -> ProbeConfig:
    """
    Validate and default raw probe request parameters.

    Every field is checked before failing so that all problems are reported
    together. When the requested period is not shorter than the timeout it is
    silently cut to 90% of the timeout rather than rejected.

    Args:
        params: Query parameters (target, port, period, reverse_mode, udp_mode, bitrate)
        timeout_hint: Value of the scrape timeout header, if any
        default_timeout: Exporter-wide configured timeout
        min_timeout: Lower timeout bound
        max_timeout: Upper timeout bound

    Returns:
        ProbeConfig: Normalized probe configuration

    Raises:
        MultiError: If any request parameter is missing or malformed
        ResolutionError: If the timeout hint is malformed
    """
    errors = MultiError()

    target = params.get("target") or ""
    if not target:
        errors.add_error("target", "must be specified")

    port = ProbeDefaults.PORT
    raw_port = params.get("port")
    if raw_port:
        if _INTEGER_PATTERN.fullmatch(raw_port):
            port = int(raw_port)
            _check(errors, validate_port, port)
        else:
            errors.add_error("port", f"must be an integer, got '{raw_port}'")

    period = ProbeDefaults.PERIOD
    raw_period = params.get("period")
    if raw_period:
        try:
            period = parse_duration(raw_period)
        except ValueError as e:
            errors.add_error("period", f"invalid duration format: {e}")
        else:
            _check(errors, validate_duration, "period", period, ProbeDefaults.MIN_PERIOD)

    reverse_mode = _parse_flag(errors, params, "reverse_mode")
    udp_mode = _parse_flag(errors, params, "udp_mode")

    bitrate = params.get("bitrate") or ""
    _check(errors, validate_bitrate, bitrate)

    if errors.has_errors():
        raise errors

    timeout = resolve_timeout(timeout_hint, default_timeout, min_timeout, max_timeout)

    if period >= timeout:
        period = timeout * ProbeDefaults.PERIOD_TIMEOUT_RATIO

    return ProbeConfig(
        target=target,
        port=port,
        period=period,
        timeout=timeout,
        reverse_mode=reverse_mode,
        udp_mode=udp_mode,
        bitrate=bitrate,
    )


def _parse_flag(errors: MultiError, params: Mapping[str, str], name: str) -> bool:
    raw = params.get(name)
    if not raw:
        return False
    try:
        return parse_bool(raw)
    except ValueError:
        errors.add_error(name, "must be true or false")
        return False


def _check(errors: MultiError, validator, *args) -> None:
    try:
        validator(*args)
    except ValidationError as e:
        errors.append(e)
