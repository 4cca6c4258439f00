"""Filesystem side of the dump: folders, payloads and timestamps."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .models import AttachmentRecord, ExportOutcome, SkipReason
from .utils import is_outgoing, set_file_timestamp

logger = logging.getLogger(__name__)


class OutputDirectoryError(RuntimeError):
    """The output root cannot be used for this run."""


def prepare_output_directory(root: Path, overwrite: bool) -> None:
    """Create ``root`` or make sure it is an empty directory."""
    if root.exists() and not root.is_dir():
        raise OutputDirectoryError(f"Output path '{root}' exists but is not a directory")

    if not root.exists():
        try:
            root.mkdir(parents=True)
        except OSError as exc:
            raise OutputDirectoryError(f"Failed to create output directory '{root}': {exc}") from exc
        return

    if not any(root.iterdir()):
        return
    if not overwrite:
        raise OutputDirectoryError(
            f"Directory '{root}' is not empty. Use --overwrite to clear its contents before export."
        )

    logger.warning("Clearing contents of directory '%s'", root)
    for child in root.iterdir():
        try:
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
        except OSError as exc:
            raise OutputDirectoryError(f"Failed to remove '{child}': {exc}") from exc


def ensure_directory(path: Path) -> bool:
    """Create ``path`` and its parents; an existing directory is fine."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Failed to create directory '%s': %s", path, exc)
        return False
    return True


def conversation_directory(root: Path, conversation: str, message_type: int) -> Path:
    return root / conversation / ("sent" if is_outgoing(message_type) else "received")


def write_attachment(path: Path, attachment: AttachmentRecord, epoch_ms: int) -> ExportOutcome:
    """Write the payload to a new file at ``path`` and stamp it with ``epoch_ms``.

    The payload is released whatever happens. The handle is closed before the
    timestamp is applied, otherwise closing would touch the mtime again.
    """
    try:
        try:
            handle = open(path, "xb")
        except OSError as exc:
            logger.error("Failed to open file for writing: '%s': %s", path, exc)
            return ExportOutcome.skipped(SkipReason.OPEN_FAILED)

        try:
            with handle:
                handle.write(attachment.data or b"")
        except OSError as exc:
            logger.error("Failed to write data to file: '%s': %s", path, exc)
            return ExportOutcome.skipped(SkipReason.WRITE_FAILED)
    finally:
        attachment.clear_data()

    set_file_timestamp(path, epoch_ms)
    return ExportOutcome(path=str(path))
