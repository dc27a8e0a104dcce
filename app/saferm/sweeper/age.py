"""Age thresholds for the retention sweep.

Thresholds are written as <count><unit> with unit m (minutes), h (hours)
or d (days), e.g. 30m, 2h, 7d.
"""

import re
from dataclasses import dataclass

from saferm.core.errors import InvalidAgeError

AGE_PATTERN = re.compile(r"^([0-9]+)([mhd])$")

_UNIT_SECONDS: dict[str, int] = {"m": 60, "h": 3600, "d": 86400}
_UNIT_NAMES: dict[str, str] = {"m": "minutes", "h": "hours", "d": "days"}


@dataclass(frozen=True, slots=True)
class AgeThreshold:
    """Minimum age of a trash entry before it may be purged.

    Attributes:
        value: Count of units.
        unit: One of "m", "h" or "d".
    """

    value: int
    unit: str

    def __post_init__(self) -> None:
        """Validate threshold data after initialization."""
        if self.unit not in _UNIT_SECONDS:
            msg = f"Unknown age unit '{self.unit}', expected m, h or d"
            raise InvalidAgeError(msg)
        if self.value < 0:
            msg = f"Age cannot be negative, got {self.value}"
            raise InvalidAgeError(msg)

    @classmethod
    def parse(cls, text: str) -> "AgeThreshold":
        """Parse a threshold such as "7d".

        Raises:
            InvalidAgeError: If the text does not match <number><m|h|d>.
        """
        match = AGE_PATTERN.match(text.strip())
        if match is None:
            msg = f"Invalid age format '{text}'. Use format like: 30m, 2h, 7d"
            raise InvalidAgeError(msg)
        return cls(value=int(match.group(1)), unit=match.group(2))

    @property
    def seconds(self) -> int:
        """Threshold length in seconds."""
        return self.value * _UNIT_SECONDS[self.unit]

    @property
    def display(self) -> str:
        """Human-readable form, e.g. "7 days"."""
        return f"{self.value} {_UNIT_NAMES[self.unit]}"

    def is_exceeded(self, mtime: float, now: float) -> bool:
        """Check whether an item is strictly older than the threshold.

        Both times are truncated to whole seconds so that an item exactly at
        the boundary is never eligible, whatever its sub-second part.
        """
        return int(now) - int(mtime) > self.seconds

    def __str__(self) -> str:
        return f"{self.value}{self.unit}"
