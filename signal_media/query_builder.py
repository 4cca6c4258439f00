"""Build the per-attachment metadata lookup."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from .date_ranges import build_date_filter
from .models import AttachmentRecord, DateRange, SchemaInfo

logger = logging.getLogger(__name__)

MINIMAL_SELECT = (
    "SELECT part.mid, part.ct, part.file_name, part.display_order FROM part"
)
KEY_CLAUSE = "WHERE part._id = ? AND part.unique_id = ?"


class QueryBuilder:
    """Assemble the lookup statement once, then bind it per attachment.

    The projection depends on ``schema.full``; the thread allow-list and the
    date ranges are independent optional narrowing filters.
    """

    def __init__(
        self,
        schema: SchemaInfo,
        threads: Iterable[int] = (),
        date_ranges: Sequence[DateRange] = (),
    ) -> None:
        self.schema = schema
        self.threads = list(threads)
        self.date_ranges = list(date_ranges)
        self.filter_params: list[Any] = []
        self.filters_active = False
        self.sql = self._build()

    @property
    def full(self) -> bool:
        return self.schema.full

    def for_attachment(self, attachment: AttachmentRecord) -> tuple[str, list[Any]]:
        return self.sql, [attachment.row_id, attachment.unique_id, *self.filter_params]

    def _build(self) -> str:
        query = self._full_select() if self.full else MINIMAL_SELECT
        query += " " + KEY_CLAUSE

        thread_clause = self._thread_clause()
        if thread_clause:
            query += " AND " + thread_clause
            self.filter_params.extend(self.threads)
            self.filters_active = True

        date_clause, date_params = self._date_clause()
        if date_clause:
            query += " AND " + date_clause
            self.filter_params.extend(date_params)
            self.filters_active = True

        return query

    def _full_select(self) -> str:
        s = self.schema
        mms = s.mms_table
        partner_columns = ['"groups".title', f"recipient.{s.recipient_system_name_column}"]
        if s.recipient_profile_joined_name_column:
            partner_columns.append(f"recipient.{s.recipient_profile_joined_name_column}")
        partner_columns.append(f"recipient.{s.recipient_profile_given_name_column}")
        return (
            "SELECT part.mid, part.ct, part.file_name, part.display_order, "
            f"{mms}.date_received, {mms}.{s.mms_type_column} AS message_type, "
            f"{mms}.thread_id, thread.{s.thread_recipient_column}, "
            f"COALESCE({', '.join(partner_columns)}) AS chatpartner "
            "FROM part "
            f"LEFT JOIN {mms} ON part.mid = {mms}._id "
            f"LEFT JOIN thread ON {mms}.thread_id = thread._id "
            f"LEFT JOIN recipient ON thread.{s.thread_recipient_column} = recipient._id "
            'LEFT JOIN "groups" ON recipient.group_id = "groups".group_id'
        )

    def _thread_clause(self) -> str:
        if not self.threads:
            return ""
        placeholders = ", ".join("?" for _ in self.threads)
        if self.full:
            return f"thread._id IN ({placeholders})"
        if self.schema.mms_table:
            return (
                f"part.mid IN (SELECT _id FROM {self.schema.mms_table} "
                f"WHERE thread_id IN ({placeholders}))"
            )
        logger.warning("Database has no message table, ignoring thread selection %s", self.threads)
        return ""

    def _date_clause(self) -> tuple[str, list[int]]:
        if not self.date_ranges:
            return "", []
        if not self.full:
            logger.warning("Database lacks message dates, ignoring date ranges")
            return "", []
        return build_date_filter(self.date_ranges, f"{self.schema.mms_table}.date_received")
