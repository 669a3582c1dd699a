# vidgrab/core/history.py
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import List

from .config import HISTORY_LIMIT, write_json_atomic

logger = logging.getLogger(__name__)

CURRENT_DIR_ALIASES = ("", ".")


def normalize_folder(raw: str) -> Path:
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(raw.strip()))))


class FolderHistory:
    """Most-recently-used download folders, persisted as a JSON list."""

    def __init__(self, path: Path, limit: int = HISTORY_LIMIT):
        self.path = path
        self.limit = limit
        self.entries: List[str] = self._load()

    def _load(self) -> List[str]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read folder history: %s", e)
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring folder history: expected a list, got %s", type(raw).__name__)
            return []
        out: List[str] = []
        for item in raw:
            if not isinstance(item, str) or item.strip() in CURRENT_DIR_ALIASES:
                continue
            p = str(normalize_folder(item))
            if p not in out:
                out.append(p)
        return out[: self.limit]

    def reload(self) -> None:
        self.entries = self._load()

    def save(self) -> None:
        try:
            write_json_atomic(self.path, self.entries)
        except OSError as e:
            logger.warning("Could not save folder history: %s", e)

    def remember(self, folder: str) -> None:
        """Move (or insert) `folder` to the front, trim, and save."""
        if folder.strip() in CURRENT_DIR_ALIASES:
            return
        p = str(normalize_folder(folder))
        if p in self.entries:
            self.entries.remove(p)
        self.entries.insert(0, p)
        del self.entries[self.limit:]
        self.save()

    def __iter__(self):
        return iter(list(self.entries))

    def __len__(self) -> int:
        return len(self.entries)
