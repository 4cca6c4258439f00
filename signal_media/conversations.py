"""Stable, collision-free folder names per conversation."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .models import ConversationEntry
from .utils import sanitize_filename

logger = logging.getLogger(__name__)

DISAMBIGUATION_MARKER = "(2)"


class ConversationRegistry:
    """Map thread ids to folder names for one run.

    Entries are only ever added. A thread keeps the first name it was given,
    and two threads never share a name.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._names: dict[int, str] = {}
        self._owners: dict[str, int] = {}

    def is_taken(self, name: str) -> bool:
        """Owned by another thread, or something else already sits at ``root/name``."""
        if name in self._owners:
            return True
        return self.root is not None and os.path.lexists(self.root / name)

    def resolve(self, thread_id: int, chat_partner: str | None) -> str:
        existing = self._names.get(thread_id)
        if existing is not None:
            return existing

        name = sanitize_filename(chat_partner) or f"Contact {thread_id}"
        if self.is_taken(name):
            logger.debug("Conversation name '%s' already taken, disambiguating thread %s", name, thread_id)
            name += DISAMBIGUATION_MARKER
            while self.is_taken(name):
                name += DISAMBIGUATION_MARKER

        self._names[thread_id] = name
        self._owners[name] = thread_id
        return name

    def entries(self) -> list[ConversationEntry]:
        return [ConversationEntry(thread_id, name) for thread_id, name in self._names.items()]

    def __len__(self) -> int:
        return len(self._names)
