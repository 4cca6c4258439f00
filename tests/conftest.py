"""Builders for small Signal-shaped databases."""

from __future__ import annotations

from pathlib import Path

import pytest
import sqlite_utils

from signal_media.database import SignalDatabase
from signal_media.models import AttachmentRecord

INCOMING = 20  # base inbox type
OUTGOING = 23  # base sent type


class SignalFixture:
    """Populate a throwaway database the way a decrypted backup looks."""

    def __init__(self, path: Path, full: bool = True) -> None:
        self.db = sqlite_utils.Database(path)
        self.db["part"].create(
            {
                "_id": int,
                "mid": int,
                "ct": str,
                "file_name": str,
                "display_order": int,
                "unique_id": int,
            },
            pk="_id",
        )
        if full:
            self.db["message"].create(
                {"_id": int, "date_received": int, "type": int, "thread_id": int}, pk="_id"
            )
            self.db["thread"].create({"_id": int, "recipient_id": int}, pk="_id")
            self.db["recipient"].create(
                {
                    "_id": int,
                    "group_id": str,
                    "system_joined_name": str,
                    "profile_joined_name": str,
                    "profile_given_name": str,
                },
                pk="_id",
            )
            self.db["groups"].create({"_id": int, "group_id": str, "title": str}, pk="_id")
        self._next_message = 1
        self._next_part = 1

    @property
    def database(self) -> SignalDatabase:
        return SignalDatabase(self.db)

    def add_thread(self, thread_id: int, name: str | None, group_title: str | None = None) -> None:
        """One thread with one recipient (or group) named ``name``."""
        group_id = f"group-{thread_id}" if group_title else None
        self.db["recipient"].insert(
            {"_id": thread_id, "group_id": group_id, "system_joined_name": name}
        )
        if group_title:
            self.db["groups"].insert({"group_id": group_id, "title": group_title})
        self.db["thread"].insert({"_id": thread_id, "recipient_id": thread_id})

    def add_attachment(
        self,
        unique_id: int,
        *,
        thread_id: int | None = None,
        date_received: int | None = None,
        message_type: int = INCOMING,
        ct: str = "image/png",
        file_name: str | None = None,
        display_order: int = 0,
        data: bytes = b"payload",
    ) -> AttachmentRecord:
        mid = None
        if thread_id is not None:
            mid = self._next_message
            self._next_message += 1
            self.db["message"].insert(
                {
                    "_id": mid,
                    "date_received": date_received,
                    "type": message_type,
                    "thread_id": thread_id,
                }
            )
        row_id = self._next_part
        self._next_part += 1
        self.db["part"].insert(
            {
                "_id": row_id,
                "mid": mid,
                "ct": ct,
                "file_name": file_name,
                "display_order": display_order,
                "unique_id": unique_id,
            }
        )
        return AttachmentRecord(row_id=row_id, unique_id=unique_id, data=data, size=len(data))


@pytest.fixture
def signal_db(tmp_path):
    return SignalFixture(tmp_path / "database.sqlite")


@pytest.fixture
def minimal_db(tmp_path):
    return SignalFixture(tmp_path / "minimal.sqlite", full=False)


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "media"
