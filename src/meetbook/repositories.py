"""Contact and meeting repositories backed by a JsonFileStore.

Both are ordered, id-keyed collections with upsert semantics. Meetings refer
to contacts only by id; deleting a contact strips it from every meeting in
the same store commit.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from meetbook.models import Contact, Meeting
from meetbook.storage.store import CONTACTS_KEY, MEETINGS_KEY

if TYPE_CHECKING:
    from meetbook.storage.store import JsonFileStore

logger = logging.getLogger(__name__)

_IMMUTABLE_MEETING_FIELDS = {"id", "shareable_link"}


class _Repository:
    key: str
    record_cls: type

    def __init__(self, store: JsonFileStore) -> None:
        self.store = store

    def list(self) -> list:
        return [self.record_cls.from_dict(item) for item in self.store.load(self.key, [])]

    def get(self, record_id: str):
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def __len__(self) -> int:
        return len(self.store.load(self.key, []))

    def save(self, record) -> None:
        """Replace the record with the same id in place, or append it."""
        records = self.list()
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                logger.debug("Updated %s %s", self.key, record.id)
                break
        else:
            records.append(record)
            logger.debug("Added %s %s", self.key, record.id)
        self.store.save(self.key, dump(records))

    def _without(self, record_id: str) -> tuple[list, bool]:
        records = self.list()
        remaining = [r for r in records if r.id != record_id]
        return remaining, len(remaining) != len(records)


def dump(records: list) -> list[dict]:
    return [record.to_dict() for record in records]


class ContactRepository(_Repository):
    key = CONTACTS_KEY
    record_cls = Contact

    def delete(self, contact_id: str, meetings: MeetingRepository) -> bool:
        """Remove a contact and strip its id from every meeting.

        Both collections are written in one commit. Returns False when no
        contact had that id (dangling participant ids are still cleaned).
        """
        remaining, removed = self._without(contact_id)
        stripped = meetings.without_participant(contact_id)
        self.store.save_many({self.key: dump(remaining), meetings.key: dump(stripped)})
        logger.debug("Deleted contact %s (found=%s)", contact_id, removed)
        return removed

    def search(self, term: str = "") -> list[Contact]:
        contacts = self.list()
        needle = (term or "").strip().lower()
        if not needle:
            return contacts
        return [c for c in contacts if needle in c.name.lower() or needle in c.email.lower()]


class MeetingRepository(_Repository):
    key = MEETINGS_KEY
    record_cls = Meeting

    def delete(self, meeting_id: str) -> bool:
        remaining, removed = self._without(meeting_id)
        if removed:
            self.store.save(self.key, dump(remaining))
            logger.debug("Deleted meeting %s", meeting_id)
        return removed

    def update(self, meeting_id: str, **changes) -> Meeting:
        """Change individual fields of a stored meeting through the upsert path."""
        frozen = _IMMUTABLE_MEETING_FIELDS & changes.keys()
        if frozen:
            raise ValueError(f"Meeting fields cannot be changed: {sorted(frozen)}")
        meeting = self.get(meeting_id)
        if meeting is None:
            raise KeyError(meeting_id)
        updated = dataclasses.replace(meeting, **changes)
        self.save(updated)
        return updated

    def without_participant(self, contact_id: str) -> list[Meeting]:
        meetings = self.list()
        for meeting in meetings:
            meeting.participant_ids = [pid for pid in meeting.participant_ids if pid != contact_id]
        return meetings

    def search(self, term: str, contacts: list[Contact]) -> list[Meeting]:
        """Match topic, location, or the name of any resolvable participant."""
        meetings = self.list()
        needle = (term or "").strip().lower()
        if not needle:
            return meetings
        names = {c.id: c.name.lower() for c in contacts}
        return [
            m
            for m in meetings
            if needle in m.topic.lower()
            or needle in m.location.lower()
            or any(needle in names[pid] for pid in m.participant_ids if pid in names)
        ]


def sort_by_time(meetings: list[Meeting]) -> list[Meeting]:
    """Soonest first by instant; unparseable dates keep their order at the end."""

    def sort_key(meeting: Meeting):
        instant = meeting.instant
        return (instant is None, instant.timestamp() if instant else 0.0)

    return sorted(meetings, key=sort_key)


def resolve_participants(meeting: Meeting, contacts: list[Contact]) -> list[Contact]:
    """Contacts taking part in ``meeting``; ids with no contact are skipped."""
    wanted = set(meeting.participant_ids)
    return [c for c in contacts if c.id in wanted]
