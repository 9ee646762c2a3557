"""File capability: where backups are written to and read from.

Two hosts implement the same protocol and one is chosen at startup:

- DownloadsFileHost ("web"): saves into a downloads directory, like a browser
  download; restores from an explicit path or the newest backup there.
- DialogFileHost ("desktop"): asks the user for a path, like native save/open
  dialogs.

Every operation is async and fails with FileHostError without touching
application state.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

from meetbook.errors import FileHostError

logger = logging.getLogger(__name__)

BACKUP_GLOB = "scheduler-backup-*.json"

Prompt = Callable[[str], str]


@runtime_checkable
class FileHost(Protocol):
    @property
    def name(self) -> str: ...

    async def save_file(self, data: str, suggested_name: str) -> Path | None:
        """Persist ``data``. Returns the written path, or None if cancelled."""
        ...

    async def open_file(self, path: str | None = None) -> str | None:
        """Return file contents, or None if nothing was chosen."""
        ...

    async def open_external(self, url: str) -> bool:
        """Open a link outside the app. Returns False when refused."""
        ...


def _write(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data, encoding="utf-8")


async def _read(path: Path) -> str:
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileHostError(f"Cannot read {path}: {e}") from e


async def open_link(url: str) -> bool:
    try:
        return await asyncio.to_thread(webbrowser.open, url)
    except webbrowser.Error as e:
        raise FileHostError(f"Cannot open {url}: {e}") from e


class DownloadsFileHost:
    """Browser-style host backed by a downloads directory."""

    def __init__(self, downloads_dir: Path) -> None:
        self.downloads_dir = downloads_dir

    @property
    def name(self) -> str:
        return "web"

    async def save_file(self, data: str, suggested_name: str) -> Path | None:
        path = self.downloads_dir / suggested_name
        try:
            await asyncio.to_thread(_write, path, data)
        except OSError as e:
            raise FileHostError(f"Cannot write {path}: {e}") from e
        logger.info("Backup downloaded to %s", path)
        return path

    def latest_backup(self) -> Path | None:
        if not self.downloads_dir.is_dir():
            return None
        candidates = sorted(self.downloads_dir.glob(BACKUP_GLOB))
        return candidates[-1] if candidates else None

    async def open_file(self, path: str | None = None) -> str | None:
        chosen = Path(path).expanduser() if path else self.latest_backup()
        if chosen is None:
            return None
        return await _read(chosen)

    async def open_external(self, url: str) -> bool:
        return await open_link(url)


class DialogFileHost:
    """Desktop-style host that asks for paths, JSON files only."""

    def __init__(self, prompt: Prompt, start_dir: Path | None = None) -> None:
        self._prompt = prompt
        self.start_dir = start_dir or Path.cwd()

    @property
    def name(self) -> str:
        return "desktop"

    async def save_file(self, data: str, suggested_name: str) -> Path | None:
        default = self.start_dir / suggested_name
        answer = await asyncio.to_thread(self._prompt, f"Save App Data [{default}]: ")
        answer = (answer or "").strip()
        path = Path(answer).expanduser() if answer else default
        if path.suffix.lower() != ".json":
            path = path.with_suffix(".json")
        try:
            await asyncio.to_thread(_write, path, data)
        except OSError as e:
            raise FileHostError(f"Cannot write {path}: {e}") from e
        logger.info("Backup saved to %s", path)
        return path

    async def open_file(self, path: str | None = None) -> str | None:
        if path is None:
            path = await asyncio.to_thread(self._prompt, "Restore App Data (JSON file): ")
            path = (path or "").strip()
        if not path:
            return None
        chosen = Path(path).expanduser()
        if chosen.suffix.lower() != ".json":
            raise FileHostError(f"Not a JSON file: {chosen}")
        return await _read(chosen)

    async def open_external(self, url: str) -> bool:
        if not url or not url.startswith("https://discord.com"):
            logger.warning("Refusing to open non-Discord link: %s", url)
            return False
        return await open_link(url)
