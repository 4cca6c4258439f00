"""Mime type to file extension lookup."""

from __future__ import annotations

import mimetypes


class MimeTypes:
    """Map content types to extensions (without leading dot).

    Signal-specific and ambiguous types are pinned in ``OVERRIDES``; anything
    else falls through to the platform registry. Unknown types yield ''.
    """

    OVERRIDES = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "image/gif": "gif",
        "image/webp": "webp",
        "image/heic": "heic",
        "image/heif": "heif",
        "image/bmp": "bmp",
        "image/svg+xml": "svg",
        "image/tiff": "tiff",
        "video/mp4": "mp4",
        "video/3gpp": "3gp",
        "video/quicktime": "mov",
        "video/webm": "webm",
        "video/x-matroska": "mkv",
        "audio/aac": "aac",
        "audio/mp4": "m4a",
        "audio/mpeg": "mp3",
        "audio/ogg": "ogg",
        "audio/opus": "opus",
        "audio/wav": "wav",
        "audio/x-wav": "wav",
        "audio/flac": "flac",
        "text/plain": "txt",
        "text/x-signal-plain": "txt",
        "text/x-vcard": "vcf",
        "text/vcard": "vcf",
        "application/pdf": "pdf",
        "application/zip": "zip",
        "application/x-signal-view-once": "bin",
    }

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self.table = dict(self.OVERRIDES)
        if overrides:
            self.table.update(overrides)

    def extension(self, mime_type: str | None) -> str:
        if not mime_type:
            return ""
        key = mime_type.split(";", 1)[0].strip().lower()
        if key in self.table:
            return self.table[key]
        guessed = mimetypes.guess_extension(key, strict=False)
        return guessed.lstrip(".") if guessed else ""
