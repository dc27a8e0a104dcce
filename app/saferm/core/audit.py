"""Append-only cleanup log.

Each line records one cleanup outcome in a stable, parseable grammar::

    <ISO-8601 timestamp> | <OUTCOME> | <subject> | <detail> | <detail> ...
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from saferm.core.paths import ensure_dir

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = " | "


class Outcome(str, Enum):
    """Outcome tag of a log line.

    Attributes:
        CLEANED: Aged entries were deleted from a trash directory.
        REMOVED: An empty legacy trash directory was removed.
        SUMMARY: End-of-run totals.
    """

    CLEANED = "CLEANED"
    REMOVED = "REMOVED"
    SUMMARY = "SUMMARY"


@dataclass(frozen=True, slots=True)
class LogRecord:
    """A single cleanup log line.

    Attributes:
        timestamp: ISO 8601 timestamp with UTC offset.
        outcome: Outcome tag.
        subject: User or container the line is about.
        details: Free-form detail fields.
    """

    timestamp: str
    outcome: Outcome
    subject: str
    details: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.subject:
            msg = "Log record subject cannot be empty"
            raise ValueError(msg)

    def to_line(self) -> str:
        """Serialize to a single log line (no trailing newline)."""
        fields = [self.timestamp, self.outcome.value, self.subject, *self.details]
        return FIELD_SEPARATOR.join(f.replace("\n", " ") for f in fields)

    @classmethod
    def from_line(cls, line: str) -> "LogRecord":
        """Parse a log line.

        Args:
            line: Single log line (with or without trailing whitespace).

        Returns:
            LogRecord instance.

        Raises:
            ValueError: If the line has too few fields or an unknown outcome.
        """
        fields = line.rstrip("\n").split(FIELD_SEPARATOR)
        if len(fields) < 3:
            msg = f"Malformed log line: {line!r}"
            raise ValueError(msg)
        return cls(
            timestamp=fields[0],
            outcome=Outcome(fields[1]),
            subject=fields[2],
            details=tuple(fields[3:]),
        )


def create_log_record(outcome: Outcome, subject: str, *details: str) -> LogRecord:
    """Create a LogRecord stamped with the current local time."""
    return LogRecord(
        timestamp=datetime.now().astimezone().isoformat(timespec="seconds"),
        outcome=outcome,
        subject=subject,
        details=details,
    )


class CleanupLog:
    """Append-only text log of sweeper actions.

    Attributes:
        path: Log file location.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Path to the log file."""
        return self._path

    def append(self, record: LogRecord) -> None:
        """Append a record to the log file.

        Creates the file and its parent directory if needed.

        Raises:
            RuntimeError: If the log directory cannot be created.
            OSError: If the file cannot be written.
        """
        ensure_dir(self._path.parent, "log")
        with self._path.open(mode="a", encoding="utf-8") as f:
            f.write(record.to_line() + "\n")
            f.flush()

    def read(self) -> list[LogRecord]:
        """Read all well-formed records, oldest first.

        Returns:
            List of LogRecord. Empty if the file doesn't exist.
        """
        if not self._path.exists():
            return []

        records: list[LogRecord] = []
        with self._path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(LogRecord.from_line(line))
                except ValueError as e:
                    logger.warning("Skipping malformed log line %d: %s", line_num, e)
        return records
