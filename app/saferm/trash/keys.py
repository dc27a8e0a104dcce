"""Timestamp keys naming TrashEntries.

Keys have the form YYYYMMDD_HHMMSS_NNNNNNNNN (local time with nanoseconds),
so they sort chronologically and carry their creation instant. Within a
process, successive keys are strictly increasing even if the clock repeats
or steps back. Across processes, uniqueness is enforced by the exclusive
creation of the entry directory.
"""

import re
import time
from collections.abc import Callable
from datetime import datetime

KEY_PATTERN = re.compile(r"^(\d{8})_(\d{6})_(\d{9})$")

# Names starting with a calendar date (YYYYMMDD or YYYY-MM-DD) are treated as
# trash entries by the sweeper, including entries from older trash layouts.
DATE_PREFIX_PATTERN = re.compile(
    r"^(19|20)\d{2}-?(0[1-9]|1[0-2])-?(0[1-9]|[12]\d|3[01])"
)

_NS_PER_SECOND = 1_000_000_000


def format_key(timestamp_ns: int) -> str:
    """Format a nanosecond timestamp as a trash key.

    Args:
        timestamp_ns: Nanoseconds since the epoch.

    Returns:
        Key string such as 20240115_103000_123456789.
    """
    seconds, fraction = divmod(timestamp_ns, _NS_PER_SECOND)
    stamp = datetime.fromtimestamp(seconds).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{fraction:09d}"


def parse_key(key: str) -> datetime | None:
    """Parse the creation time out of a trash key.

    Returns:
        Naive local datetime (microsecond precision), or None if the name
        is not a trash key.
    """
    match = KEY_PATTERN.match(key)
    if match is None:
        return None
    date_part, time_part, fraction = match.groups()
    try:
        parsed = datetime.strptime(f"{date_part}{time_part}", "%Y%m%d%H%M%S")
    except ValueError:
        return None
    return parsed.replace(microsecond=int(fraction) // 1000)


def is_date_prefixed(name: str) -> bool:
    """Check whether a directory entry name starts with a calendar date."""
    return DATE_PREFIX_PATTERN.match(name) is not None


class KeyGenerator:
    """Generates strictly increasing trash keys.

    Args:
        clock: Nanosecond clock, time.time_ns by default.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._last_ns = 0

    def next_key(self) -> str:
        """Return a key later than every key previously returned."""
        now_ns = self._clock()
        if now_ns <= self._last_ns:
            now_ns = self._last_ns + 1
        self._last_ns = now_ns
        return format_key(now_ns)
