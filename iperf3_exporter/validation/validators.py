"""Field validators and parsers for probe parameters."""

import re

from .errors import ValidationError


# Format: #[KMG][/#], e.g. "1M", "10.5M", "100K/10"
BITRATE_PATTERN = re.compile(r'^\d+(\.\d+)?[KMG]?(/\d+)?$', re.ASCII)

BITRATE_FORMAT_HELP = (
    "must be in format #[KMG][/#], target bitrate in bits/sec "
    "(0 for unlimited) with an optional slash and packet count for burst mode "
    "(e.g. '1M', '10.5M', '100K/10')"
)

MIN_PORT = 1
MAX_PORT = 65535

_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)', re.ASCII)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def validate_bitrate(bitrate: str) -> None:
    """
    Validate an iperf3 bitrate string.

    An empty string is valid and means the protocol default applies.

    Raises:
        ValidationError: If the string does not follow #[KMG][/#]
    """
    if not bitrate:
        return

    if not BITRATE_PATTERN.fullmatch(bitrate):
        raise ValidationError("bitrate", BITRATE_FORMAT_HELP)


def validate_port(port: int) -> None:
    """
    Validate a TCP/UDP port number.

    Raises:
        ValidationError: If port is outside [1, 65535]
    """
    if port < MIN_PORT or port > MAX_PORT:
        raise ValidationError("port", f"must be between {MIN_PORT} and {MAX_PORT}")


def validate_duration(field: str, seconds: float, minimum: float, maximum: float = 0) -> None:
    """
    Validate that a duration lies within bounds.

    Args:
        field: Field name reported in the error
        seconds: Duration to check
        minimum: Lower bound (inclusive)
        maximum: Upper bound (inclusive); ignored when not positive

    Raises:
        ValidationError: Naming the bound that was violated
    """
    if seconds < minimum:
        raise ValidationError(field, f"must be at least {format_duration(minimum)}")
    if maximum > 0 and seconds > maximum:
        raise ValidationError(field, f"must not exceed {format_duration(maximum)}")


def parse_duration(value: str) -> float:
    """
    Parse a duration string such as "300ms", "5s" or "1m30s".

    Accepts a sequence of decimal numbers each followed by a unit
    (ns, us, ms, s, m, h) with an optional leading sign. A bare "0"
    needs no unit.

    Args:
        value: Duration string

    Returns:
        float: Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    s = value
    sign = 1.0
    if s and s[0] in "+-":
        if s[0] == "-":
            sign = -1.0
        s = s[1:]

    if s == "0":
        return 0.0
    if not s:
        raise ValueError(f'invalid duration "{value}"')

    total = 0.0
    pos = 0
    while pos < len(s):
        match = _DURATION_PART.match(s, pos)
        if not match:
            raise ValueError(f'invalid duration "{value}"')
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    return sign * total


def format_duration(seconds: float) -> str:
    """Render seconds as a short duration string ("100ms", "5s", "300s")."""
    if seconds == 0:
        return "0s"
    if abs(seconds) < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


def parse_bool(value: str) -> bool:
    """
    Parse a boolean query value.

    Raises:
        ValueError: If value is not a recognised boolean spelling
    """
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean '{value}'")
