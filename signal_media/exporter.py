"""Dump attachments into a per-conversation folder tree."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Sequence

from .conversations import ConversationRegistry
from .database import SignalDatabase
from .date_ranges import parse_date_ranges
from .filenames import FilenameResolver, effective_timestamp
from .mimetypes_table import MimeTypes
from .models import AttachmentRecord, ExportOutcome, ExportStats, MetadataRow, SkipReason
from .query_builder import QueryBuilder
from .writer import (
    OutputDirectoryError,
    conversation_directory,
    ensure_directory,
    prepare_output_directory,
    write_attachment,
)

logger = logging.getLogger(__name__)


class MediaExporter:
    """Match raw attachments with their database rows and write them out.

    Attachments are processed one by one in the order ``attachments`` yields
    them. Problems with a single attachment are logged and that attachment is
    skipped; only an unusable output directory or a failing query ends the run.
    """

    def __init__(
        self,
        database: SignalDatabase,
        attachments: Iterable[AttachmentRecord],
        mime_types: MimeTypes | None = None,
        verbose: bool = False,
    ) -> None:
        self.database = database
        self.attachments = attachments
        self.mime_types = mime_types or MimeTypes()
        self.verbose = verbose
        self.conversations = ConversationRegistry()
        self.filenames = FilenameResolver(self.mime_types)
        self.stats = ExportStats()

    def export_attachments(
        self,
        output_root: Path,
        date_ranges: Sequence[str] = (),
        threads: Sequence[int] = (),
        overwrite: bool = False,
    ) -> bool:
        """Run the dump; False only when the whole run had to be abandoned."""
        output_root = Path(output_root)
        logger.info("Dumping media to dir '%s'", output_root)

        try:
            supported = self.database.supports_media_dump()
            schema = self.database.detect_schema() if supported else None
        except sqlite3.Error as exc:
            logger.error("Failed to read database schema: %s", exc)
            return False
        if not supported:
            logger.error(
                "Database too badly damaged or too old, dumping media is not (yet) supported"
            )
            return False

        try:
            prepare_output_directory(output_root, overwrite)
        except OutputDirectoryError as exc:
            logger.error("%s", exc)
            return False

        self.conversations = ConversationRegistry(output_root)
        self.filenames = FilenameResolver(self.mime_types)
        self.stats = ExportStats()
        builder = QueryBuilder(schema, threads=threads, date_ranges=parse_date_ranges(date_ranges))
        logger.log(logging.INFO if self.verbose else logging.DEBUG, "Dump media query: %s", builder.sql)

        total = len(self.attachments) if hasattr(self.attachments, "__len__") else "?"
        for count, attachment in enumerate(self.attachments, start=1):
            logger.debug("Saving attachments... %d/%s", count, total)
            try:
                outcome = self._export_one(attachment, output_root, builder)
            except sqlite3.Error as exc:
                logger.error("Failed to run metadata query: %s", exc)
                return False
            finally:
                attachment.clear_data()
            if outcome.written:
                logger.debug("Wrote '%s'", outcome.path)
            self.stats.record(outcome)

        for entry in self.conversations.entries():
            logger.debug("Thread %s -> '%s'", entry.thread_id, entry.name)
        logger.info(
            "Run complete: attachments=%d written=%d skipped=%s conversations=%d",
            self.stats.total,
            self.stats.written,
            dict(self.stats.skipped),
            len(self.conversations),
        )
        return True

    def _export_one(
        self, attachment: AttachmentRecord, output_root: Path, builder: QueryBuilder
    ) -> ExportOutcome:
        sql, params = builder.for_attachment(attachment)
        rows = self.database.query(sql, params)

        if not rows and builder.filters_active:
            logger.debug(
                "Attachment %s/%s excluded by filter", attachment.row_id, attachment.unique_id
            )
            return ExportOutcome.skipped(SkipReason.FILTERED)

        if len(rows) != 1:
            logger.error(
                "Unexpected number of results: %d (rowid: %s, uniqueid: %s)",
                len(rows),
                attachment.row_id,
                attachment.unique_id,
            )
            return ExportOutcome.skipped(SkipReason.UNEXPECTED_ROWS)

        row = MetadataRow.from_row(rows[0])

        target_dir = output_root
        if builder.full and row.has_conversation:
            conversation = self.conversations.resolve(row.thread_id, row.chat_partner)
            target_dir = conversation_directory(output_root, conversation, row.message_type)
            if not ensure_directory(target_dir):
                return ExportOutcome.skipped(SkipReason.DIRECTORY_FAILED)

        filename = self.filenames.resolve(target_dir, row, attachment)
        if filename is None:
            logger.error(
                "Failed to get a unique filename in '%s' for attachment %s/%s",
                target_dir,
                attachment.row_id,
                attachment.unique_id,
            )
            return ExportOutcome.skipped(SkipReason.UNIQUE_NAME_FAILED)

        return write_attachment(target_dir / filename, attachment, effective_timestamp(row, attachment))
