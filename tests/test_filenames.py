"""Tests for attachment file naming and uniqueness."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from signal_media.filenames import (
    FilenameResolver,
    effective_timestamp,
    split_counter,
)
from signal_media.models import AttachmentRecord, MetadataRow

TIMESTAMP = 1_672_574_400_000


def stamp(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms // 1000).strftime("signal-%Y-%m-%d-%H%M%S")


def attachment(unique_id: int = 1_600_000_000_000) -> AttachmentRecord:
    return AttachmentRecord(row_id=1, unique_id=unique_id, data=b"x", size=1)


@pytest.mark.parametrize(
    "stem, expected",
    [
        ("photo", ("photo", 2)),
        ("photo (2)", ("photo", 3)),
        ("photo (41)", ("photo", 42)),
        ("photo(2)", ("photo(2)", 2)),
        ("photo (x)", ("photo (x)", 2)),
        ("a (1) (7)", ("a (1)", 8)),
    ],
)
def test_split_counter(stem, expected):
    assert split_counter(stem) == expected


def test_fallback_name_without_order():
    row = MetadataRow(content_type="image/png", file_name=None, display_order=0, date_received=TIMESTAMP)
    assert FilenameResolver().candidate(row, attachment()) == f"{stamp(TIMESTAMP)}.png"


def test_fallback_name_with_order_and_surrogate_timestamp():
    row = MetadataRow(content_type="video/mp4", file_name=None, display_order=3)
    record = attachment(1_600_000_000_000)
    assert effective_timestamp(row, record) == 1_600_000_000_000
    assert FilenameResolver().candidate(row, record) == f"{stamp(1_600_000_000_000)}_3.mp4"


def test_unknown_mime_type_warns(caplog):
    row = MetadataRow(
        content_type="application/x-made-up", file_name=None, display_order=0, date_received=TIMESTAMP
    )
    with caplog.at_level(logging.WARNING):
        name = FilenameResolver().candidate(row, attachment())
    assert name == f"{stamp(TIMESTAMP)}.attach"
    assert "application/x-made-up" in caplog.text
    assert name in caplog.text


def test_record_filename_is_kept_but_sanitized():
    row = MetadataRow(content_type="image/png", file_name="holiday: day 1?.jpeg", display_order=4)
    assert FilenameResolver().candidate(row, attachment()) == "holiday_ day 1_.jpeg"


def test_unusable_record_filename_falls_back():
    row = MetadataRow(content_type="image/png", file_name="...", display_order=0, date_received=TIMESTAMP)
    assert FilenameResolver().candidate(row, attachment()) == f"{stamp(TIMESTAMP)}.png"


def test_existing_file_on_disk_is_avoided(tmp_path):
    (tmp_path / "photo.jpg").write_bytes(b"")
    (tmp_path / "photo (2).jpg").write_bytes(b"")
    assert FilenameResolver().make_unique(tmp_path, "photo.jpg") == "photo (3).jpg"


def test_existing_directory_is_avoided(tmp_path):
    (tmp_path / "notes.txt").mkdir()
    assert FilenameResolver().make_unique(tmp_path, "notes.txt") == "notes (2).txt"


def test_numbered_candidate_continues_counting(tmp_path):
    (tmp_path / "scan (4).pdf").write_bytes(b"")
    assert FilenameResolver().make_unique(tmp_path, "scan (4).pdf") == "scan (5).pdf"


def test_claimed_names_count_before_anything_is_written(tmp_path):
    resolver = FilenameResolver()
    row = MetadataRow(content_type="image/png", file_name=None, display_order=0, date_received=TIMESTAMP)
    first = resolver.resolve(tmp_path, row, attachment())
    second = resolver.resolve(tmp_path, row, attachment())
    assert first == f"{stamp(TIMESTAMP)}.png"
    assert second == f"{stamp(TIMESTAMP)} (2).png"


def test_claims_are_per_directory(tmp_path):
    resolver = FilenameResolver()
    assert resolver.make_unique(tmp_path / "a", "x.png") == "x.png"
    assert resolver.make_unique(tmp_path / "b", "x.png") == "x.png"
    assert resolver.make_unique(tmp_path / "a", "x.png") == "x (2).png"


def test_name_without_extension(tmp_path):
    resolver = FilenameResolver()
    resolver.make_unique(tmp_path, "README")
    assert resolver.make_unique(tmp_path, "README") == "README (2)"


def test_gives_up_when_every_candidate_is_taken(tmp_path, monkeypatch):
    monkeypatch.setattr("signal_media.filenames.MAX_UNIQUE_ATTEMPTS", 3)
    resolver = FilenameResolver()
    claimed = [resolver.make_unique(tmp_path, "x.png") for _ in range(4)]
    assert claimed == ["x.png", "x (2).png", "x (3).png", "x (4).png"]
    assert resolver.make_unique(tmp_path, "x.png") is None
