"""Meetbook application core.

Responsibilities:
1. Wire store -> repositories -> backup gateway -> invitation drafter
2. Create contacts and meetings with fresh ids and join links
3. Gate destructive actions (delete, restore) behind a confirmation
4. Produce the filtered, time-sorted projections the views render
5. Hand backups and invitations to the configured file host
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from meetbook.backup import BackupGateway, backup_filename
from meetbook.config import MeetbookConfig
from meetbook.errors import NoContactsError
from meetbook.files import DialogFileHost, DownloadsFileHost
from meetbook.invitations import EmailDraft, InvitationDrafter, compose_email
from meetbook.models import (
    DEFAULT_TIMEZONE,
    Contact,
    LocationType,
    Meeting,
    new_id,
    shareable_link,
)
from meetbook.repositories import (
    ContactRepository,
    MeetingRepository,
    resolve_participants,
    sort_by_time,
)
from meetbook.storage.store import THEME_KEY, JsonFileStore

if TYPE_CHECKING:
    from meetbook.config import EngineConfig
    from meetbook.engines.base import Engine
    from meetbook.files import FileHost, Prompt

logger = logging.getLogger(__name__)

Confirm = Callable[[], bool]

THEMES = ("light", "dark")


def build_engine(config: EngineConfig) -> Engine:
    if config.name == "template":
        from meetbook.engines.template import TemplateEngine

        return TemplateEngine()
    if config.name == "anthropic_api":
        from meetbook.engines.anthropic_api import AnthropicAPIEngine

        return AnthropicAPIEngine(
            model=config.model, max_tokens=config.max_tokens, timeout=config.timeout
        )
    raise ValueError(f"Unknown engine: {config.name}")


def build_file_host(config: MeetbookConfig, prompt: Prompt = input) -> FileHost:
    if config.host == "web":
        return DownloadsFileHost(config.backup.downloads_dir)
    if config.host == "desktop":
        return DialogFileHost(prompt)
    raise ValueError(f"Unknown host: {config.host}")


class Meetbook:
    """Contacts, meetings, backups and invitations for one user."""

    def __init__(
        self,
        config: MeetbookConfig,
        store: JsonFileStore | None = None,
        engine: Engine | None = None,
        file_host: FileHost | None = None,
    ) -> None:
        self.config = config
        self.store = store or JsonFileStore(config.data_dir)
        self.contact_repo = ContactRepository(self.store)
        self.meeting_repo = MeetingRepository(self.store)
        self.backup = BackupGateway(self.contact_repo, self.meeting_repo)
        self.engine = engine or build_engine(config.engine)
        self.drafter = InvitationDrafter(self.engine)
        self.file_host = file_host or build_file_host(config)

    # ── Contacts ──────────────────────────────────────────────

    def new_contact(
        self,
        name: str,
        email: str,
        timezone: str = DEFAULT_TIMEZONE,
        socials: dict[str, str] | None = None,
    ) -> Contact:
        return Contact(
            id=new_id(), name=name, email=email, timezone=timezone, socials=socials or {}
        )

    def save_contact(self, contact: Contact) -> None:
        self.contact_repo.save(contact)

    def delete_contact(self, contact_id: str, confirm: Confirm) -> bool:
        """Delete a contact and remove it from every meeting, if confirmed."""
        if not confirm():
            return False
        return self.contact_repo.delete(contact_id, self.meeting_repo)

    def contacts(self, term: str = "") -> list[Contact]:
        return self.contact_repo.search(term)

    # ── Meetings ──────────────────────────────────────────────

    def new_meeting(
        self,
        topic: str,
        date_time: str,
        location_type: LocationType | str,
        location: str,
        participant_ids: list[str] | None = None,
    ) -> Meeting:
        """Build an unsaved meeting with a fresh id and join link."""
        if not len(self.contact_repo):
            raise NoContactsError("You must add a contact first")
        meeting_id = new_id()
        return Meeting(
            id=meeting_id,
            topic=topic,
            date_time=date_time,
            location_type=location_type,
            location=location,
            participant_ids=list(participant_ids or []),
            shareable_link=shareable_link(meeting_id, self.config.base_url),
        )

    def save_meeting(self, meeting: Meeting) -> None:
        self.meeting_repo.save(meeting)

    def update_meeting(self, meeting_id: str, **changes) -> Meeting:
        return self.meeting_repo.update(meeting_id, **changes)

    def delete_meeting(self, meeting_id: str, confirm: Confirm) -> bool:
        if not confirm():
            return False
        return self.meeting_repo.delete(meeting_id)

    def meetings(self, term: str = "") -> list[Meeting]:
        """Meetings matching ``term``, soonest first."""
        return sort_by_time(self.meeting_repo.search(term, self.contact_repo.list()))

    def participants(self, meeting: Meeting) -> list[Contact]:
        return resolve_participants(meeting, self.contact_repo.list())

    async def draft_invitation(self, meeting_id: str) -> EmailDraft:
        meeting = self.meeting_repo.get(meeting_id)
        if meeting is None:
            raise KeyError(meeting_id)
        participants = self.participants(meeting)
        body = await self.drafter.draft(meeting, participants)
        return compose_email(meeting, participants, body, self.config.timezone)

    # ── Backup / restore ──────────────────────────────────────

    def export_backup(self) -> str:
        return self.backup.export()

    async def save_backup(self) -> Path | None:
        return await self.file_host.save_file(self.export_backup(), backup_filename())

    def restore_backup(self, text: str | bytes, confirm: Confirm) -> tuple[int, int] | None:
        """Overwrite all data with a backup document, if confirmed."""
        if not confirm():
            return None
        return self.backup.restore(text)

    async def load_backup(
        self, confirm: Confirm, path: str | None = None
    ) -> tuple[int, int] | None:
        text = await self.file_host.open_file(path)
        if text is None:
            return None
        return self.restore_backup(text, confirm)

    # ── Preferences ───────────────────────────────────────────

    @property
    def theme(self) -> str:
        value = self.store.load(THEME_KEY, "light")
        return value if value in THEMES else "light"

    def toggle_theme(self) -> str:
        theme = "dark" if self.theme == "light" else "light"
        self.store.save(THEME_KEY, theme)
        return theme
