"""Trash-on-delete interception.

This package resolves per-user TrashRoots, generates collision-free
timestamp keys and moves removal targets into the trash.
"""

from saferm.trash.interceptor import TrashInterceptor, canonical_path, relative_trash_path
from saferm.trash.keys import KeyGenerator, format_key, is_date_prefixed, parse_key
from saferm.trash.layout import (
    AliasResult,
    AliasStatus,
    ensure_alias,
    ensure_trash_root,
    legacy_trash_path,
    resolve_trash_root,
)
from saferm.trash.models import (
    RemovalFlags,
    RemovalResult,
    RemovalStatus,
    TrashEntry,
    TrashRoot,
)

__all__ = [
    "AliasResult",
    "AliasStatus",
    "KeyGenerator",
    "RemovalFlags",
    "RemovalResult",
    "RemovalStatus",
    "TrashEntry",
    "TrashInterceptor",
    "TrashRoot",
    "canonical_path",
    "ensure_alias",
    "ensure_trash_root",
    "format_key",
    "is_date_prefixed",
    "legacy_trash_path",
    "parse_key",
    "relative_trash_path",
    "resolve_trash_root",
]
