import math
import re
from datetime import timedelta

DEFAULT_KEEP_ALIVE = timedelta(minutes=5)

# A negative keep-alive keeps the model loaded indefinitely.
FOREVER = timedelta(days=36500)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class KeepAliveError(ValueError):
    pass


def _parse_go_duration(value: str) -> float:
    """Parse a Go-style duration string such as ``1h30m`` into seconds."""
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0

    pos = 0
    total = 0.0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if not match:
            raise KeepAliveError(f'time: invalid duration "{value}"')
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise KeepAliveError(f'time: invalid duration "{value}"')
    return sign * total


def parse_keep_alive(value: float | int | str | None) -> timedelta:
    """
    Turn a request's ``keep_alive`` into a duration.

    Numbers (and numeric strings) are seconds, other strings are Go
    durations. None means the default; negative values mean forever.
    """
    if value is None:
        return DEFAULT_KEEP_ALIVE

    if isinstance(value, str):
        try:
            seconds = float(value)
        except ValueError:
            if not value.strip():
                raise KeepAliveError(f'time: invalid duration "{value}"') from None
            seconds = _parse_go_duration(value)
    else:
        seconds = float(value)

    if math.isnan(seconds):
        raise KeepAliveError(f'time: invalid duration "{value}"')
    if seconds < 0 or seconds >= FOREVER.total_seconds():
        return FOREVER
    return timedelta(seconds=seconds)
