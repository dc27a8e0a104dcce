"""Unit tests for the append-only cleanup log."""

from datetime import datetime
from pathlib import Path

import pytest
from saferm.core.audit import CleanupLog, LogRecord, Outcome, create_log_record


class TestLogRecord:
    """Tests for LogRecord serialization."""

    def test_to_line_grammar(self) -> None:
        """Fields are joined with ' | ' in a fixed order."""
        record = LogRecord(
            timestamp="2024-01-15T02:00:00+01:00",
            outcome=Outcome.CLEANED,
            subject="alice",
            details=("age: 7 days", "3 directories removed"),
        )

        assert record.to_line() == (
            "2024-01-15T02:00:00+01:00 | CLEANED | alice | age: 7 days | 3 directories removed"
        )

    def test_from_line_parses_fields(self) -> None:
        """A log line parses back into its fields."""
        line = "2024-01-15T02:00:00+01:00 | REMOVED | bob/.trash.old | empty directory\n"

        record = LogRecord.from_line(line)

        assert record.outcome == Outcome.REMOVED
        assert record.subject == "bob/.trash.old"
        assert record.details == ("empty directory",)

    def test_from_line_rejects_unknown_outcome(self) -> None:
        """Outcomes outside CLEANED, REMOVED and SUMMARY are rejected."""
        with pytest.raises(ValueError):
            LogRecord.from_line("2024-01-15T02:00:00 | DELETED | alice")

    def test_from_line_rejects_short_line(self) -> None:
        """Lines with fewer than three fields are rejected."""
        with pytest.raises(ValueError, match="Malformed"):
            LogRecord.from_line("garbage")

    def test_newlines_flattened(self) -> None:
        """Embedded newlines cannot split a record over several lines."""
        record = LogRecord("t", Outcome.SUMMARY, "trash", ("a\nb",))

        assert "\n" not in record.to_line()

    def test_empty_subject_rejected(self) -> None:
        """Every record names its subject."""
        with pytest.raises(ValueError, match="subject"):
            LogRecord("t", Outcome.SUMMARY, "")


class TestCreateLogRecord:
    """Tests for create_log_record."""

    def test_timestamp_is_iso_with_offset(self) -> None:
        """Records carry an ISO 8601 timestamp with UTC offset."""
        record = create_log_record(Outcome.SUMMARY, "trash", "cleaned 0 out of 0 users")

        parsed = datetime.fromisoformat(record.timestamp)
        assert parsed.tzinfo is not None
        assert record.details == ("cleaned 0 out of 0 users",)


class TestCleanupLog:
    """Tests for CleanupLog file handling."""

    def test_append_creates_file_and_directory(self, tmp_path: Path) -> None:
        """The first append creates the log directory and file."""
        log = CleanupLog(tmp_path / "logs" / "trash_cleanup.log")

        log.append(create_log_record(Outcome.CLEANED, "alice", "age: 7 days"))

        assert log.path.exists()
        assert len(log.read()) == 1

    def test_append_only(self, tmp_path: Path) -> None:
        """Records accumulate in order; earlier lines are never rewritten."""
        log = CleanupLog(tmp_path / "trash_cleanup.log")
        log.append(create_log_record(Outcome.CLEANED, "alice"))
        log.append(create_log_record(Outcome.SUMMARY, "trash"))

        records = log.read()

        assert [r.subject for r in records] == ["alice", "trash"]

    def test_read_missing_file(self, tmp_path: Path) -> None:
        """Reading a missing log returns no records."""
        assert CleanupLog(tmp_path / "none.log").read() == []

    def test_read_skips_malformed_lines(self, tmp_path: Path) -> None:
        """Malformed lines are skipped instead of failing the read."""
        path = tmp_path / "trash_cleanup.log"
        path.write_text("junk\n\n2024-01-15T02:00:00 | SUMMARY | trash | ok\n")

        records = CleanupLog(path).read()

        assert len(records) == 1
        assert records[0].outcome == Outcome.SUMMARY
