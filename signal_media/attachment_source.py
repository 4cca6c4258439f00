"""Enumerate raw attachment payloads of a decrypted backup directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .models import AttachmentRecord

logger = logging.getLogger(__name__)

ATTACHMENT_FILENAME = re.compile(r"^Attachment_(?P<row_id>\d+)_(?P<unique_id>-?\d+)\.bin$")


class AttachmentSource:
    """Yield ``AttachmentRecord``s, loading one payload at a time.

    Files are named ``Attachment_<rowid>_<uniqueid>.bin``; iteration order is
    (row id, unique id) so repeated runs over the same directory agree.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self._index = self._scan()

    def _scan(self) -> list[tuple[int, int, Path]]:
        found = []
        for path in self.directory.iterdir():
            match = ATTACHMENT_FILENAME.match(path.name)
            if match and path.is_file():
                found.append((int(match.group("row_id")), int(match.group("unique_id")), path))
        found.sort()
        logger.debug("Found %d attachments in %s", len(found), self.directory)
        return found

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[AttachmentRecord]:
        for row_id, unique_id, path in self._index:
            try:
                data = path.read_bytes()
            except OSError as exc:
                logger.error("Failed to read attachment '%s': %s", path, exc)
                continue
            yield AttachmentRecord(row_id=row_id, unique_id=unique_id, data=data, size=len(data))
