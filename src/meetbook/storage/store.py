"""JSON key/value store with an in-memory mirror."""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONTACTS_KEY = "contacts"
MEETINGS_KEY = "meetings"
THEME_KEY = "theme"


class JsonFileStore:
    """One JSON file per key under ``root``; reads are served from memory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._mirror: dict[str, Any] = {}
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    # ── Reads ─────────────────────────────────────────────────

    def load(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key``, or ``default`` when absent."""
        if key not in self._mirror:
            self._mirror[key] = self._read(key, default)
        return copy.deepcopy(self._mirror[key])

    def _read(self, key: str, default: Any) -> Any:
        path = self._path(key)
        if not path.exists():
            return copy.deepcopy(default)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Unreadable store file %s, using default: %s", path, e)
            return copy.deepcopy(default)

    # ── Writes ────────────────────────────────────────────────

    def save(self, key: str, value: Any) -> None:
        self.save_many({key: value})

    def save_many(self, values: dict[str, Any]) -> None:
        """Commit several keys together.

        Every value is serialized and written to a temp file first. Files are
        only swapped into place (and the mirror updated) once all temp files
        exist. If a later swap fails, keys already swapped get their previous
        contents back, so a failure leaves disk and memory as they were.
        """
        staged: list[tuple[Path, Path]] = []
        try:
            for key, value in values.items():
                text = json.dumps(value, indent=2, ensure_ascii=False)
                target = self._path(key)
                tmp = target.with_name(f".{target.name}.tmp")
                staged.append((tmp, target))
                tmp.write_text(text, encoding="utf-8")
            previous = {target: self._snapshot(target) for _, target in staged}
        except (TypeError, ValueError, OSError):
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            raise

        swapped: list[Path] = []
        try:
            for tmp, target in staged:
                os.replace(tmp, target)
                swapped.append(target)
        except OSError:
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            for target in swapped:
                self._put_back(target, previous[target])
            raise
        for key, value in values.items():
            self._mirror[key] = copy.deepcopy(value)
        logger.debug("Stored keys: %s", ", ".join(values))

    @staticmethod
    def _snapshot(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    @staticmethod
    def _put_back(path: Path, content: bytes | None) -> None:
        try:
            if content is None:
                path.unlink(missing_ok=True)
            else:
                path.write_bytes(content)
        except OSError as e:
            logger.error("Could not roll back %s: %s", path, e)
