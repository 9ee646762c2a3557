"""Backup document export and restore.

A backup is a UTF-8 JSON object with exactly two arrays::

    {"contacts": [...], "meetings": [...]}

There is no version field. Restore replaces both collections wholesale; any
problem with the document leaves current data untouched.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import TYPE_CHECKING

from meetbook.errors import BackupFormatError
from meetbook.models import Contact, Meeting
from meetbook.repositories import dump

if TYPE_CHECKING:
    from meetbook.repositories import ContactRepository, MeetingRepository

logger = logging.getLogger(__name__)


def backup_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"scheduler-backup-{today.isoformat()}.json"


def export_document(contacts: list[Contact], meetings: list[Meeting]) -> str:
    return json.dumps(
        {"contacts": dump(contacts), "meetings": dump(meetings)},
        indent=2,
        ensure_ascii=False,
    )


def _records(document: dict, key: str, record_cls: type) -> list:
    items = document.get(key)
    if not isinstance(items, list):
        raise BackupFormatError(f"Backup field '{key}' is missing or not a list")
    records = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or "id" not in item:
            raise BackupFormatError(f"Backup entry {key}[{i}] is not a record with an id")
        try:
            records.append(record_cls.from_dict(item))
        except (TypeError, ValueError) as e:
            raise BackupFormatError(f"Backup entry {key}[{i}] is invalid: {e}") from e
    return records


def parse_document(text: str | bytes) -> tuple[list[Contact], list[Meeting]]:
    """Decode a backup document into contacts and meetings."""
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BackupFormatError(f"Backup is not UTF-8 text: {e}") from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise BackupFormatError("Backup must be a JSON object")

    contacts = _records(document, "contacts", Contact)
    meetings = _records(document, "meetings", Meeting)
    return contacts, meetings


class BackupGateway:
    """Serializes both repositories and restores them in one commit."""

    def __init__(self, contacts: ContactRepository, meetings: MeetingRepository) -> None:
        self.contacts = contacts
        self.meetings = meetings

    def export(self) -> str:
        contacts = self.contacts.list()
        meetings = self.meetings.list()
        logger.info("Exporting backup: %d contacts, %d meetings", len(contacts), len(meetings))
        return export_document(contacts, meetings)

    def restore(self, text: str | bytes) -> tuple[int, int]:
        """Replace all data with the document's contents.

        Returns (contact_count, meeting_count). Raises BackupFormatError
        before anything is written when the document is unusable.
        """
        contacts, meetings = parse_document(text)
        self.contacts.store.save_many(
            {self.contacts.key: dump(contacts), self.meetings.key: dump(meetings)}
        )
        logger.info("Restored backup: %d contacts, %d meetings", len(contacts), len(meetings))
        return len(contacts), len(meetings)
