"""Scan interval parsing.

Intervals are written either as compact unit strings ("6h", "1d12h",
"90m") or as ISO-8601 durations ("PT6H", "P1D", "P1DT12H"). Both forms
resolve to a whole number of seconds.
"""

import re

SECONDS_PER_UNIT = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}

MIN_SCAN_INTERVAL = 3600
MAX_SCAN_INTERVAL = 7 * 86400

_ISO_PATTERN = re.compile(
    r"^P(?:(?P<w>\d+)W)?(?:(?P<d>\d+)D)?"
    r"(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?(?:(?P<s>\d+(?:\.\d+)?)S)?)?$"
)
_COMPACT_TOKEN = re.compile(r"(\d+)([smhdw])")


class DurationParseError(ValueError):
    """Raised when an interval string cannot be read."""


def parse_duration(value: str) -> int:
    """Convert an interval string to seconds.

    Examples:
        >>> parse_duration("24h")
        86400
        >>> parse_duration("P1D")
        86400
        >>> parse_duration("1d12h")
        129600

    Raises:
        DurationParseError: If the string is empty, malformed, or zero
    """
    text = re.sub(r"\s+", "", value or "").lower()
    if not text:
        raise DurationParseError("Duration string cannot be empty")

    if text.startswith("p"):
        seconds = _from_iso8601(text.upper())
    else:
        seconds = _from_compact(text)

    if seconds <= 0:
        raise DurationParseError(f"Duration cannot be zero: '{value}'")
    return seconds


def _from_iso8601(text: str) -> int:
    match = _ISO_PATTERN.match(text)
    if not match or text in ("P", "PT") or text.endswith("T"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration: '{text}'. Expected a form like 'PT6H', 'P1D' or 'P1DT12H'"
        )
    total = 0.0
    for unit, amount in match.groupdict().items():
        if amount:
            total += float(amount) * SECONDS_PER_UNIT[unit]
    return int(total)


def _from_compact(text: str) -> int:
    tokens = _COMPACT_TOKEN.findall(text)
    # Every character must belong to a number+unit token
    if not tokens or "".join(n + u for n, u in tokens) != text:
        raise DurationParseError(
            f"Invalid duration: '{text}'. Use digits followed by s, m, h, d or w, e.g. '6h' or '1d12h'"
        )
    return sum(int(amount) * SECONDS_PER_UNIT[unit] for amount, unit in tokens)


def validate_duration_range(
    duration_seconds: int,
    min_seconds: int = MIN_SCAN_INTERVAL,
    max_seconds: int = MAX_SCAN_INTERVAL,
) -> None:
    """Reject scan intervals outside [min_seconds, max_seconds]."""
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"Scan interval too short: {format_duration(duration_seconds)}. "
            f"Minimum is {format_duration(min_seconds)}."
        )
    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"Scan interval too long: {format_duration(duration_seconds)}. "
            f"Maximum is {format_duration(max_seconds)}."
        )


def format_duration(seconds: int) -> str:
    """Render seconds in the largest whole unit, e.g. "6 hours" or "2 days"."""
    for unit, label in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit:
            count = seconds // unit
            return f"{count} {label}{'s' if count != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
