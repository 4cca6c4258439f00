"""Pick a file name for each attachment and keep it unique per folder."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from .mimetypes_table import MimeTypes
from .models import AttachmentRecord, MetadataRow
from .utils import format_local_stamp, sanitize_filename

logger = logging.getLogger(__name__)

FALLBACK_EXTENSION = "attach"
MAX_UNIQUE_ATTEMPTS = 100_000

_NUMBERED_STEM = re.compile(r"^(?P<stem>.*) \((?P<counter>\d+)\)$")


def split_counter(stem: str) -> tuple[str, int]:
    """Strip a trailing `` (N)`` from ``stem``; return it with the next counter.

    >>> split_counter("photo (3)")
    ('photo', 4)
    >>> split_counter("photo")
    ('photo', 2)
    """
    match = _NUMBERED_STEM.match(stem)
    if match:
        return match.group("stem"), int(match.group("counter")) + 1
    return stem, 2


def effective_timestamp(row: MetadataRow, attachment: AttachmentRecord) -> int:
    """Received date when known, otherwise the attachment's unique id."""
    if row.date_received is not None:
        return row.date_received
    return attachment.unique_id


class FilenameResolver:
    """Names attachments and remembers which names this run has claimed."""

    def __init__(self, mime_types: MimeTypes | None = None) -> None:
        self.mime_types = mime_types or MimeTypes()
        self._claimed: dict[Path, set[str]] = {}

    def candidate(self, row: MetadataRow, attachment: AttachmentRecord) -> str:
        if row.file_name is not None:
            filename = sanitize_filename(row.file_name)
            if filename:
                return filename

        stem = format_local_stamp(effective_timestamp(row, attachment))
        if row.display_order:
            stem += f"_{row.display_order}"

        extension = self.mime_types.extension(row.content_type)
        if not extension:
            extension = FALLBACK_EXTENSION
            logger.warning(
                "mimetype not found in database (%s) -> saving as '%s.%s'",
                row.content_type,
                stem,
                extension,
            )
        return f"{stem}.{extension}"

    def is_taken(self, target_dir: Path, filename: str) -> bool:
        return filename in self._claimed.get(target_dir, ()) or os.path.lexists(target_dir / filename)

    def make_unique(self, target_dir: Path, filename: str) -> str | None:
        """Return a free variant of ``filename`` and claim it, or None."""
        target_dir = Path(target_dir)
        if self.is_taken(target_dir, filename):
            stem, extension = os.path.splitext(filename)
            stem, counter = split_counter(stem)
            for _ in range(MAX_UNIQUE_ATTEMPTS):
                filename = f"{stem} ({counter}){extension}"
                if not self.is_taken(target_dir, filename):
                    break
                counter += 1
            else:
                return None
        self._claimed.setdefault(target_dir, set()).add(filename)
        return filename

    def resolve(
        self, target_dir: Path, row: MetadataRow, attachment: AttachmentRecord
    ) -> str | None:
        return self.make_unique(target_dir, self.candidate(row, attachment))
