"""Turn user supplied date ranges into epoch-millisecond SQL filters."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from .models import DateRange

logger = logging.getLogger(__name__)

# (format, date_only)
DATE_FORMATS = (
    ("%Y-%m-%d %H:%M:%S", False),
    ("%Y-%m-%dT%H:%M:%S", False),
    ("%Y-%m-%d %H:%M", False),
    ("%Y-%m-%dT%H:%M", False),
    ("%Y-%m-%d", True),
)

# Added to a date-only end bound so the whole final second matches.
ROUNDING_MS = 999


def date_to_msecs(value: str) -> tuple[int, bool] | None:
    """Parse ``value`` (local time, or bare epoch ms) into ``(ms, date_only)``."""
    text = value.strip()
    if text.isascii() and text.isdigit():
        return int(text), False
    for fmt, date_only in DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
            return int(parsed.timestamp()) * 1000, date_only
        except (ValueError, OverflowError, OSError):
            continue
    return None


def parse_date_ranges(tokens: Sequence[str]) -> list[DateRange]:
    """Pair up ``tokens`` as (start, end) and keep the valid ranges."""
    if not tokens:
        return []
    if len(tokens) % 2 != 0:
        logger.error(
            "Date ranges need an even number of values (start end ...), got %d; ignoring all of them",
            len(tokens),
        )
        return []

    ranges: list[DateRange] = []
    for first, second in zip(tokens[::2], tokens[1::2]):
        start = date_to_msecs(first)
        end = date_to_msecs(second)
        if start is None or end is None or end[0] < start[0]:
            logger.warning(
                "Skipping range: '%s - %s'. Failed to parse or invalid range.", first, second
            )
            continue

        end_ms, date_only = end
        if date_only:
            end_ms += ROUNDING_MS
        logger.debug("Using range: %s - %s (%d - %d)", first, second, start[0], end_ms)
        ranges.append(DateRange(start_ms=start[0], end_ms=end_ms))
    return ranges


def build_date_filter(ranges: Iterable[DateRange], column: str) -> tuple[str, list[int]]:
    """OR all ranges into one parenthesised clause over ``column``."""
    clauses: list[str] = []
    params: list[int] = []
    for date_range in ranges:
        clauses.append(f"{column} BETWEEN ? AND ?")
        params.extend([date_range.start_ms, date_range.end_ms])
    if not clauses:
        return "", []
    return "(" + " OR ".join(clauses) + ")", params
