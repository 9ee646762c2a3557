"""Interactive CLI REPL for managing contacts and meetings."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import shlex
import sys
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from meetbook.errors import BackupFormatError, MeetbookError
from meetbook.files import open_link
from meetbook.invitations import choose_delivery
from meetbook.models import (
    SOCIAL_PLATFORMS,
    TIMEZONES,
    LocationType,
    meeting_helper_link,
    parse_instant,
)

if TYPE_CHECKING:
    from meetbook.core import Meetbook
    from meetbook.models import Contact, Meeting

logger = logging.getLogger(__name__)

HELP = """\
Commands:
  contacts [TERM]        list contacts (optionally filtered by name/email)
  add-contact            add a contact
  edit-contact ID        edit a contact
  delete-contact ID      delete a contact (removes it from meetings)
  meetings [TERM]        list meetings, soonest first
  schedule               schedule a meeting
  edit-meeting ID        edit a meeting
  rename ID TOPIC        change a meeting's topic
  delete-meeting ID      delete a meeting
  invite ID              draft an invitation email
  join ID                open a Discord meeting link
  export                 save a backup file
  import [PATH]          restore from a backup file (overwrites everything)
  theme                  toggle light/dark
  help                   show this help
  exit                   quit
IDs may be shortened to any unique prefix."""


def prompt(text: str) -> str:
    """Blocking prompt; also used by the desktop file host as its dialog."""
    sys.stdout.write(text)
    sys.stdout.flush()
    raw = sys.stdin.buffer.readline()
    if not raw:
        raise EOFError
    return raw.decode("utf-8", errors="replace").rstrip("\n")


def _an_hour_from_now() -> str:
    return (datetime.now() + timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M")


class CLIConnector:
    """Interactive REPL: reads commands from stdin, writes to stdout."""

    def __init__(self, app: Meetbook) -> None:
        self.app = app
        self._running = False
        self._commands = {
            "contacts": self._list_contacts,
            "add-contact": self._add_contact,
            "edit-contact": self._edit_contact,
            "delete-contact": self._delete_contact,
            "meetings": self._list_meetings,
            "schedule": self._schedule,
            "edit-meeting": self._edit_meeting,
            "rename": self._rename,
            "delete-meeting": self._delete_meeting,
            "invite": self._invite,
            "join": self._join,
            "export": self._export,
            "import": self._import,
            "theme": self._theme,
            "help": self._help,
        }

    @property
    def name(self) -> str:
        return "cli"

    # ── I/O ───────────────────────────────────────────────────

    async def ask(self, text: str, default: str = "") -> str:
        loop = asyncio.get_event_loop()
        label = f"{text} [{default}]: " if default else f"{text}: "
        answer = (await loop.run_in_executor(None, prompt, label)).strip()
        return answer or default

    async def ask_required(self, text: str, default: str = "", choices: list[str] | None = None) -> str:
        while True:
            answer = await self.ask(text, default)
            if not answer:
                print(f"  {text} is required.")
            elif choices and answer not in choices:
                print(f"  Choose one of: {', '.join(choices)}")
            else:
                return answer

    async def confirm(self, question: str) -> bool:
        return (await self.ask(f"{question} (y/N)")).lower() in ("y", "yes")

    # ── Main loop ─────────────────────────────────────────────

    async def start(self) -> None:
        self._running = True
        print("Meetbook (type 'help' for commands, 'exit' or Ctrl+C to quit)")
        print("-" * 48)

        while self._running:
            try:
                line = await self.ask("\nmeetbook")
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                break

            if line.lower() in ("exit", "quit"):
                print("Bye!")
                break
            if not line:
                continue

            try:
                await self.handle(line)
            except EOFError:
                print("\nBye!")
                break

    async def stop(self) -> None:
        self._running = False

    async def handle(self, line: str) -> None:
        try:
            parts = shlex.split(line)
        except ValueError as e:
            print(f"Cannot parse command: {e}")
            return
        command, args = parts[0].lower(), parts[1:]
        handler = self._commands.get(command)
        if handler is None:
            print(f"Unknown command '{command}'. Type 'help'.")
            return
        try:
            await handler(args)
        except MeetbookError as e:
            print(f"Error: {e}")

    # ── Lookup ────────────────────────────────────────────────

    def _find(self, records: list, ref: str | None, kind: str):
        if not ref:
            print(f"Usage: give a {kind} ID.")
            return None
        matches = [r for r in records if r.id.startswith(ref)]
        if len(matches) == 1:
            return matches[0]
        print(f"No {kind} matches '{ref}'." if not matches else f"'{ref}' is ambiguous.")
        return None

    # ── Rendering ─────────────────────────────────────────────

    def _show_contact(self, contact: Contact) -> None:
        print(f"  {contact.id[:8]}  {contact.name} <{contact.email}>  ({contact.timezone})")
        for platform, handle in contact.socials.items():
            print(f"            {platform}: {handle}")

    def _show_meeting(self, meeting: Meeting) -> None:
        instant = meeting.instant
        when = instant.astimezone().strftime("%Y-%m-%d %H:%M") if instant else meeting.date_time
        names = ", ".join(c.name for c in self.app.participants(meeting)) or "no participants"
        print(f"  {meeting.id[:8]}  {when}  {meeting.topic}")
        print(f"            {meeting.location_type.value}: {meeting.location}")
        print(f"            with {names}")
        print(f"            join: {meeting.shareable_link}")

    # ── Contacts ──────────────────────────────────────────────

    async def _list_contacts(self, args: list[str]) -> None:
        term = " ".join(args)
        contacts = self.app.contacts(term)
        print(f"Contacts ({len(contacts)})")
        if not contacts:
            print(f'  No contacts found for "{term}".' if term else "  No contacts yet!")
        for contact in contacts:
            self._show_contact(contact)

    async def _contact_form(self, contact: Contact | None = None) -> dict:
        fields = {
            "name": await self.ask_required("Full name", contact.name if contact else ""),
            "email": await self.ask_required("Email", contact.email if contact else ""),
            "timezone": await self.ask_required(
                "Timezone",
                contact.timezone if contact else "America/New_York",
                choices=TIMEZONES,
            ),
        }
        socials = dict(contact.socials) if contact else {}
        for platform in SOCIAL_PLATFORMS:
            value = await self.ask(f"{platform.capitalize()} ('-' to clear)", socials.get(platform, ""))
            socials[platform] = "" if value == "-" else value
        fields["socials"] = socials
        return fields

    async def _add_contact(self, args: list[str]) -> None:
        contact = self.app.new_contact(**await self._contact_form())
        self.app.save_contact(contact)
        print(f"Added {contact.name} ({contact.id[:8]}).")

    async def _edit_contact(self, args: list[str]) -> None:
        contact = self._find(self.app.contacts(), args[0] if args else None, "contact")
        if contact is None:
            return
        contact = dataclasses.replace(contact, **await self._contact_form(contact))
        self.app.save_contact(contact)
        print(f"Saved {contact.name}.")

    async def _delete_contact(self, args: list[str]) -> None:
        contact = self._find(self.app.contacts(), args[0] if args else None, "contact")
        if contact is None:
            return
        answer = await self.confirm(
            f"Delete {contact.name}? This will also remove them from any meetings."
        )
        if self.app.delete_contact(contact.id, confirm=lambda: answer):
            print(f"Deleted {contact.name}.")

    # ── Meetings ──────────────────────────────────────────────

    async def _list_meetings(self, args: list[str]) -> None:
        term = " ".join(args)
        meetings = self.app.meetings(term)
        print(f"Meetings ({len(meetings)})")
        if not meetings:
            print(f'  No meetings found for "{term}".' if term else "  No meetings scheduled.")
        for meeting in meetings:
            self._show_meeting(meeting)

    async def _ask_datetime(self, default: str) -> str:
        while True:
            value = await self.ask_required("Date & time (YYYY-MM-DDTHH:MM)", default)
            if parse_instant(value) is not None:
                return value
            print("  Not a valid date and time.")

    async def _ask_participants(self, current: list[str]) -> list[str]:
        contacts = self.app.contacts()
        for i, contact in enumerate(contacts, 1):
            mark = "*" if contact.id in current else " "
            print(f"  {mark}{i}. {contact.name}")
        default = ",".join(str(i) for i, c in enumerate(contacts, 1) if c.id in current)
        while True:
            raw = await self.ask_required("Participants (numbers, comma separated)", default)
            try:
                picks = [int(p) for p in raw.replace(" ", "").split(",") if p]
            except ValueError:
                picks = []
            if picks and all(1 <= p <= len(contacts) for p in picks):
                return [contacts[p - 1].id for p in picks]
            print(f"  Pick numbers between 1 and {len(contacts)}.")

    async def _meeting_form(self, meeting: Meeting | None = None) -> dict:
        types = [t.value for t in LocationType]
        location_type = await self.ask_required(
            "Location type", meeting.location_type.value if meeting else "URL", choices=types
        )
        helper = meeting_helper_link(location_type)
        if helper:
            print(f"  Create the meeting at {helper} and paste its link below.")
        placeholder = "Address" if location_type == LocationType.PHYSICAL.value else "URL or link"
        return {
            "topic": await self.ask_required("Topic", meeting.topic if meeting else ""),
            "date_time": await self._ask_datetime(meeting.date_time if meeting else _an_hour_from_now()),
            "location_type": location_type,
            "location": await self.ask_required(placeholder, meeting.location if meeting else ""),
            "participant_ids": await self._ask_participants(
                meeting.participant_ids if meeting else []
            ),
        }

    async def _schedule(self, args: list[str]) -> None:
        if not self.app.contacts():
            print("You must add a contact first.")
            return
        meeting = self.app.new_meeting(**await self._meeting_form())
        self.app.save_meeting(meeting)
        print(f"Scheduled '{meeting.topic}' ({meeting.id[:8]}).")

    async def _edit_meeting(self, args: list[str]) -> None:
        meeting = self._find(self.app.meetings(), args[0] if args else None, "meeting")
        if meeting is None:
            return
        self.app.update_meeting(meeting.id, **await self._meeting_form(meeting))
        print("Meeting saved.")

    async def _rename(self, args: list[str]) -> None:
        meeting = self._find(self.app.meetings(), args[0] if args else None, "meeting")
        if meeting is None:
            return
        topic = " ".join(args[1:]).strip() or await self.ask_required("New topic", meeting.topic)
        self.app.update_meeting(meeting.id, topic=topic)
        print(f"Renamed to '{topic}'.")

    async def _delete_meeting(self, args: list[str]) -> None:
        meeting = self._find(self.app.meetings(), args[0] if args else None, "meeting")
        if meeting is None:
            return
        answer = await self.confirm(f"Delete '{meeting.topic}'?")
        if self.app.delete_meeting(meeting.id, confirm=lambda: answer):
            print("Meeting deleted.")

    async def _join(self, args: list[str]) -> None:
        meeting = self._find(self.app.meetings(), args[0] if args else None, "meeting")
        if meeting is None:
            return
        if meeting.location_type != LocationType.DISCORD:
            print(f"Location: {meeting.location}")
            return
        if not await self.app.file_host.open_external(meeting.location):
            print("Could not open that link.")

    # ── Invitations ───────────────────────────────────────────

    async def _invite(self, args: list[str]) -> None:
        meeting = self._find(self.app.meetings(), args[0] if args else None, "meeting")
        if meeting is None:
            return
        print("Generating with AI...")
        draft = await self.app.draft_invitation(meeting.id)
        print(f"\nTo: {draft.to or 'No participants selected'}")
        print(f"Subject: {draft.subject}\n")
        print(draft.body)

        choice = (await self.ask("\n[o]pen in email client, [w]ebmail, [c]opy, Enter to skip")).lower()
        if choice in ("o", "w"):
            kind, payload = choose_delivery(draft, prefer_webmail=choice == "w")
            if kind == "clipboard":
                print(
                    "The email is too long for a direct link. "
                    "Copy the text below into your email client:\n"
                )
                print(payload)
            elif not await open_link(payload):
                print(payload)
        elif choice == "c":
            print("\n" + draft.clipboard_text())

    # ── Backup / preferences ──────────────────────────────────

    async def _export(self, args: list[str]) -> None:
        path = await self.app.save_backup()
        print(f"Backup saved to {path}." if path else "Export cancelled.")

    async def _import(self, args: list[str]) -> None:
        answer = await self.confirm(
            "Restore from file? This will overwrite all current data."
        )
        if not answer:
            print("Nothing restored.")
            return
        path = args[0] if args else None
        try:
            counts = await self.app.load_backup(confirm=lambda: True, path=path)
        except BackupFormatError as e:
            logger.info("Restore rejected: %s", e)
            print("Failed to restore data. The file might be corrupted or in the wrong format.")
            return
        if counts is None:
            print("Nothing restored.")
            return
        print(f"Data restored successfully! ({counts[0]} contacts, {counts[1]} meetings)")

    async def _theme(self, args: list[str]) -> None:
        print(f"Theme: {self.app.toggle_theme()}")

    async def _help(self, args: list[str]) -> None:
        print(HELP)
