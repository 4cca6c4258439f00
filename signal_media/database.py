"""Read access to a decrypted Signal database."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Sequence

import sqlite_utils

from .models import SchemaInfo

logger = logging.getLogger(__name__)


class SignalDatabase:
    """Thin wrapper over ``sqlite_utils`` exposing what the dump needs."""

    PART_TABLE = "part"

    def __init__(self, db: sqlite_utils.Database) -> None:
        self.db = db

    @classmethod
    def open(cls, db_path: Path) -> "SignalDatabase":
        """Open an existing database file (read-only)."""
        if not db_path.exists():
            raise FileNotFoundError(f"Signal database not found at {db_path}")
        conn = sqlite3.connect(db_path.resolve().as_uri() + "?mode=ro", uri=True)
        return cls(sqlite_utils.Database(conn))

    def close(self) -> None:
        self.db.conn.close()

    def contains_table(self, name: str) -> bool:
        return name in self.db.table_names()

    def table_contains_column(self, table: str, column: str) -> bool:
        return self.contains_table(table) and column in self.db[table].columns_dict

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """Run ``sql``; engine errors (``sqlite3.Error``) propagate."""
        return list(self.db.query(sql, list(params)))

    def supports_media_dump(self) -> bool:
        return self.table_contains_column(self.PART_TABLE, "display_order")

    def detect_schema(self) -> SchemaInfo:
        """Work out which version-dependent names this database uses."""
        schema = SchemaInfo()
        if self.contains_table("message"):
            schema.mms_table = "message"
        elif self.contains_table("mms"):
            schema.mms_table = "mms"

        if schema.mms_table and self.table_contains_column(schema.mms_table, "type"):
            schema.mms_type_column = "type"

        for column in ("recipient_id", "thread_recipient_id"):
            if self.table_contains_column("thread", column):
                schema.thread_recipient_column = column
                break

        if self.table_contains_column("recipient", "system_joined_name"):
            schema.recipient_system_name_column = "system_joined_name"
        if self.table_contains_column("recipient", "profile_given_name"):
            schema.recipient_profile_given_name_column = "profile_given_name"
        if not self.table_contains_column("recipient", "profile_joined_name"):
            schema.recipient_profile_joined_name_column = None

        schema.full = bool(schema.mms_table) and all(
            self.contains_table(name) for name in ("thread", "groups", "recipient")
        )
        logger.debug("Detected schema: %s", schema)
        return schema
