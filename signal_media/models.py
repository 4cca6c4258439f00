"""Typed containers shared across the media dump."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


@dataclass
class AttachmentRecord:
    """Raw attachment payload as found in the decrypted backup."""

    row_id: int
    unique_id: int
    data: Optional[bytes]
    size: int

    def clear_data(self) -> None:
        """Drop the payload so its memory can be reclaimed."""
        self.data = None


@dataclass
class MetadataRow:
    """The single database row describing one attachment."""

    content_type: Optional[str]
    file_name: Optional[str]
    display_order: int
    date_received: Optional[int] = None
    message_type: Optional[int] = None
    thread_id: Optional[int] = None
    chat_partner: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MetadataRow":
        return cls(
            content_type=row.get("ct"),
            file_name=row.get("file_name"),
            display_order=row.get("display_order") or 0,
            date_received=row.get("date_received"),
            message_type=row.get("message_type"),
            thread_id=row.get("thread_id"),
            chat_partner=row.get("chatpartner"),
        )

    @property
    def has_conversation(self) -> bool:
        """True when thread, partner and direction are all known."""
        return (
            self.thread_id is not None
            and self.chat_partner is not None
            and self.message_type is not None
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive epoch-millisecond bounds."""

    start_ms: int
    end_ms: int


@dataclass(frozen=True)
class ConversationEntry:
    thread_id: int
    name: str


@dataclass
class SchemaInfo:
    """Version-dependent table and column names found in the database."""

    full: bool = False
    mms_table: Optional[str] = None
    mms_type_column: str = "msg_box"
    thread_recipient_column: str = "recipient_ids"
    recipient_system_name_column: str = "system_display_name"
    recipient_profile_joined_name_column: Optional[str] = "profile_joined_name"
    recipient_profile_given_name_column: str = "signal_profile_name"


class SkipReason(str, Enum):
    FILTERED = "filtered"
    UNEXPECTED_ROWS = "unexpected_rows"
    DIRECTORY_FAILED = "directory_failed"
    UNIQUE_NAME_FAILED = "unique_name_failed"
    OPEN_FAILED = "open_failed"
    WRITE_FAILED = "write_failed"


@dataclass
class ExportOutcome:
    """Result of processing one attachment; ``skip`` is None when written."""

    skip: Optional[SkipReason] = None
    path: Optional[str] = None

    @property
    def written(self) -> bool:
        return self.skip is None

    @classmethod
    def skipped(cls, reason: SkipReason) -> "ExportOutcome":
        return cls(skip=reason)


@dataclass
class ExportStats:
    """Per-run counters, logged once the run completes."""

    total: int = 0
    written: int = 0
    skipped: Counter = field(default_factory=Counter)

    def record(self, outcome: ExportOutcome) -> None:
        self.total += 1
        if outcome.written:
            self.written += 1
        else:
            self.skipped[outcome.skip.value] += 1
