"""Entry point that dumps Signal backup attachments into a folder tree."""

from __future__ import annotations

import argparse
import logging
import sqlite3
from pathlib import Path
import sys

from dotenv import load_dotenv

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from signal_media.attachment_source import AttachmentSource
from signal_media.config import DATABASE_FILENAME, Settings
from signal_media.database import SignalDatabase
from signal_media.exporter import MediaExporter

load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dump attachments of a decrypted Signal backup, sorted per conversation."
    )
    parser.add_argument(
        "--backup-dir",
        type=Path,
        help="Decrypted backup directory (database.sqlite + Attachment_*.bin files)",
    )
    parser.add_argument("--database", type=Path, help="Database file, if not inside --backup-dir")
    parser.add_argument("--output", type=Path, help="Directory to dump media into")
    parser.add_argument(
        "--dateranges",
        nargs="+",
        metavar="DATE",
        help="Pairs of 'YYYY-MM-DD[ HH:MM[:SS]]' or epoch-ms bounds: START END [START END ...]",
    )
    parser.add_argument(
        "--limit-to", nargs="+", type=int, metavar="THREAD", help="Only dump these thread ids"
    )
    parser.add_argument(
        "--overwrite", action="store_true", default=None, help="Clear a non-empty output directory first"
    )
    parser.add_argument("--verbose", action="store_true", default=None, help="Log the generated query")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    settings = Settings()
    configure_logging(settings.log_level)

    backup_dir = args.backup_dir or settings.backup_dir
    database_file = args.database or (
        backup_dir / DATABASE_FILENAME if args.backup_dir else settings.database_file
    )
    output_dir = args.output or settings.output_dir
    if backup_dir is None or database_file is None or output_dir is None:
        parser.error("a backup directory and an output directory are required")

    date_ranges = args.dateranges or settings.date_ranges
    threads = args.limit_to or settings.threads
    overwrite = settings.overwrite if args.overwrite is None else args.overwrite
    verbose = settings.verbose if args.verbose is None else args.verbose

    try:
        database = SignalDatabase.open(database_file)
    except (FileNotFoundError, sqlite3.Error) as exc:
        logging.error("%s", exc)
        return 1

    try:
        exporter = MediaExporter(database, AttachmentSource(backup_dir), verbose=verbose)
        ok = exporter.export_attachments(
            output_dir, date_ranges=date_ranges, threads=threads, overwrite=overwrite
        )
    finally:
        database.close()

    logging.info("done." if ok else "Dumping media failed.")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
