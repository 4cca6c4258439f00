"""Utility helpers shared across modules."""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)

# Signal message types: the low five bits carry the base type.
BASE_TYPE_MASK = 0x1F
OUTGOING_BASE_TYPES = frozenset({2, 11, 21, 22, 23, 24, 25, 26})


def sanitize_filename(name: str | None) -> str:
    """Make ``name`` legal on common filesystems. Idempotent; may return ''."""
    if not name:
        return ""
    cleaned = _ILLEGAL_CHARS.sub("_", name)
    # Windows drops trailing dots and spaces silently.
    cleaned = cleaned.lstrip(" ").rstrip(" .")
    if not cleaned:
        return ""
    stem, dot, rest = cleaned.partition(".")
    if stem.upper() in _RESERVED_NAMES:
        cleaned = f"{stem}_{dot}{rest}"
    return cleaned


def is_outgoing(message_type: int) -> bool:
    """Classify a Signal message type as sent by the backup owner."""
    return (message_type & BASE_TYPE_MASK) in OUTGOING_BASE_TYPES


def format_local_stamp(epoch_ms: int, pattern: str = "signal-%Y-%m-%d-%H%M%S") -> str:
    """Render epoch milliseconds in local time."""
    try:
        return datetime.fromtimestamp(epoch_ms // 1000).strftime(pattern)
    except (OverflowError, OSError, ValueError):
        logger.warning("Timestamp %s out of range, using it verbatim", epoch_ms)
        return f"signal-{epoch_ms}"


def set_file_timestamp(path: Path | str, epoch_ms: int) -> bool:
    """Set access and modification time of ``path``; False on failure."""
    ns = epoch_ms * 1_000_000
    try:
        os.utime(path, ns=(ns, ns))
    except (OSError, OverflowError, ValueError) as exc:
        logger.error("Failed to set timestamp on '%s': %s", path, exc)
        return False
    return True
