"""Unit tests for disk usage measurement and size formatting."""

import os
from pathlib import Path

import pytest
from saferm.sweeper.usage import disk_usage_kib, format_size


class TestDiskUsage:
    """Tests for disk_usage_kib."""

    def test_missing_path_is_zero(self, tmp_path: Path) -> None:
        """A missing path has no size."""
        assert disk_usage_kib(tmp_path / "missing") == 0

    def test_counts_allocated_blocks(self, tmp_path: Path) -> None:
        """Sizes follow allocated blocks like du -sk."""
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "data").write_bytes(os.urandom(64 * 1024))

        expected = sum(
            os.lstat(p).st_blocks * 512 for p in (tree, tree / "data")
        ) // 1024

        assert disk_usage_kib(tree) == expected
        assert disk_usage_kib(tree) >= 64

    def test_hard_links_counted_once(self, tmp_path: Path) -> None:
        """A file reachable through two hard links is counted once."""
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "a").write_bytes(os.urandom(64 * 1024))
        single = disk_usage_kib(tree)

        os.link(tree / "a", tree / "b")

        assert disk_usage_kib(tree) == single

    def test_symlinks_not_followed(self, tmp_path: Path) -> None:
        """A symlink to a large file does not add the file's size."""
        big = tmp_path / "big"
        big.write_bytes(os.urandom(256 * 1024))
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "link").symlink_to(big)

        assert disk_usage_kib(tree) < 256


class TestFormatSize:
    """Tests for format_size."""

    @pytest.mark.parametrize(
        ("kib", "expected"),
        [
            (0, "0B"),
            (1, "1.0KiB"),
            (1536, "1.5MiB"),
            (3 * 1024 * 1024, "3.0GiB"),
        ],
    )
    def test_binary_units(self, kib: int, expected: str) -> None:
        """Sizes use binary prefixes with one decimal."""
        assert format_size(kib) == expected
