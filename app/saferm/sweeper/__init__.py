"""Retention sweep.

This package parses age thresholds, measures trash sizes and purges aged
trash entries for every user.
"""

from saferm.sweeper.age import AgeThreshold
from saferm.sweeper.models import ContainerKind, ContainerSweep, SweepReport
from saferm.sweeper.sweeper import TrashSweeper
from saferm.sweeper.usage import disk_usage_kib, format_size

__all__ = [
    "AgeThreshold",
    "ContainerKind",
    "ContainerSweep",
    "SweepReport",
    "TrashSweeper",
    "disk_usage_kib",
    "format_size",
]
