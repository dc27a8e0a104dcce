"""Unit tests for age thresholds."""

import pytest
from saferm.core.errors import InvalidAgeError
from saferm.sweeper.age import AgeThreshold


class TestParse:
    """Tests for AgeThreshold.parse."""

    @pytest.mark.parametrize(
        ("text", "seconds"),
        [("30m", 1800), ("2h", 7200), ("7d", 604800), ("0d", 0)],
    )
    def test_valid(self, text: str, seconds: int) -> None:
        """Minutes, hours and days are accepted."""
        assert AgeThreshold.parse(text).seconds == seconds

    @pytest.mark.parametrize("text", ["", "7", "d", "7w", "-1d", "1.5h", "7 d", "7D"])
    def test_invalid(self, text: str) -> None:
        """Anything but <number><m|h|d> is rejected with a usage hint."""
        with pytest.raises(InvalidAgeError, match="Use format like: 30m, 2h, 7d"):
            AgeThreshold.parse(text)

    def test_invalid_is_value_error(self) -> None:
        """InvalidAgeError is also a ValueError."""
        with pytest.raises(ValueError):
            AgeThreshold.parse("soon")


class TestDisplay:
    """Tests for textual forms."""

    def test_display(self) -> None:
        """display spells out the unit."""
        assert AgeThreshold.parse("7d").display == "7 days"
        assert AgeThreshold.parse("30m").display == "30 minutes"

    def test_str_round_trips(self) -> None:
        """str() gives back the command-line form."""
        assert str(AgeThreshold.parse("2h")) == "2h"

    def test_rejects_unknown_unit(self) -> None:
        """Direct construction validates the unit."""
        with pytest.raises(InvalidAgeError):
            AgeThreshold(1, "w")


class TestIsExceeded:
    """Tests for the strictly-older-than rule."""

    def test_exactly_at_boundary_not_eligible(self) -> None:
        """An item exactly as old as the threshold is kept."""
        threshold = AgeThreshold.parse("1h")

        assert not threshold.is_exceeded(mtime=10_000.0, now=13_600.0)

    def test_one_second_past_boundary_eligible(self) -> None:
        """One whole second past the threshold is eligible."""
        threshold = AgeThreshold.parse("1h")

        assert threshold.is_exceeded(mtime=10_000.0, now=13_601.0)

    def test_sub_second_parts_ignored(self) -> None:
        """Fractions of a second never tip an item over the boundary."""
        threshold = AgeThreshold.parse("1h")

        assert not threshold.is_exceeded(mtime=10_000.9, now=13_600.99)

    def test_future_mtime_never_eligible(self) -> None:
        """Items from the future (clock skew) are kept."""
        assert not AgeThreshold.parse("0m").is_exceeded(mtime=20_000.0, now=10_000.0)
