"""Invitation drafting and email composition.

The engine only writes the conversational part of the invitation. Logistics
(date and time, location, join link) are appended here deterministically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

if TYPE_CHECKING:
    from meetbook.engines.base import Engine
    from meetbook.models import Contact, Meeting

logger = logging.getLogger(__name__)

NO_PARTICIPANTS_MESSAGE = (
    "No participants selected. Add participants to the meeting to draft an invitation."
)

FALLBACK_BODY = (
    "Hello,\n\nThis is an invitation for our upcoming meeting.\n\n"
    "We will discuss: [Meeting Topic].\n\n"
    "Looking forward to seeing you there.\n\nBest,"
)

MAILTO_LIMIT = 2000

# encodeURIComponent leaves these unescaped; mail clients expect the same.
_URI_SAFE = "!*'()"

SYSTEM_PROMPT = """\
You write short, friendly and professional meeting invitation emails.
Write only the conversational message. Never include the location, date,
time or joining links; those are added afterwards.
"""


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return ZoneInfo("UTC")


def format_local_time(moment: datetime, tz_name: str) -> str:
    """e.g. ``Saturday, March 1, 2025 at 10:00 AM EST``."""
    local = moment.astimezone(_zone(tz_name))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local:%A, %B} {local.day}, {local.year} at "
        f"{hour}:{local:%M} {meridiem} {local.tzname()}"
    )


def _meeting_time(meeting: Meeting, tz_name: str) -> str:
    instant = meeting.instant
    if instant is None:
        return meeting.date_time
    return format_local_time(instant, tz_name)


def build_prompt(meeting: Meeting, participants: list[Contact]) -> str:
    schedule = "\n".join(
        f"- {p.name}: {_meeting_time(meeting, p.timezone)} ({p.timezone})" for p in participants
    )
    return (
        "Write the body of an invitation email for a meeting.\n\n"
        f'Meeting topic: "{meeting.topic}"\n\n'
        "Local meeting time for each participant:\n"
        f"{schedule}\n\n"
        "Keep it concise and welcoming, for example: \"Hi team, looking forward to our "
        'discussion about [topic]. I\'ve set aside some time for us to connect..."\n'
        "Do not include the location, date, time or any joining link."
    )


class InvitationDrafter:
    """Asks an engine for the invitation body and never fails the caller."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def draft(self, meeting: Meeting, participants: list[Contact]) -> str:
        if not participants:
            return NO_PARTICIPANTS_MESSAGE

        prompt = build_prompt(meeting, participants)
        try:
            response = await self.engine.send(prompt, system_prompt=SYSTEM_PROMPT)
        except Exception as e:
            logger.error("Error generating email invitation for %s: %s", meeting.id, e)
            return FALLBACK_BODY

        logger.debug(
            "Drafted invitation for %s via %s (%s)",
            meeting.id,
            self.engine.name,
            response.model or "unknown model",
        )
        return response.text.strip() or FALLBACK_BODY


@dataclass
class EmailDraft:
    """A ready-to-send invitation."""

    recipients: list[str]
    subject: str
    body: str

    @property
    def to(self) -> str:
        return ",".join(self.recipients)

    def mailto_uri(self) -> str:
        return (
            f"mailto:{self.to}?subject={quote(self.subject, safe=_URI_SAFE)}"
            f"&body={quote(self.body, safe=_URI_SAFE)}"
        )

    def webmail_url(self) -> str:
        return (
            "https://mail.google.com/mail/?view=cm&fs=1"
            f"&to={quote(self.to, safe=_URI_SAFE)}"
            f"&su={quote(self.subject, safe=_URI_SAFE)}"
            f"&body={quote(self.body, safe=_URI_SAFE)}"
        )

    def clipboard_text(self) -> str:
        return f"To: {self.to}\nSubject: {self.subject}\n\n{self.body}"


def meeting_details(meeting: Meeting, viewer_tz: str) -> str:
    return (
        "---\n"
        "Meeting Details:\n"
        f"Topic: {meeting.topic}\n"
        f"Date & Time: {_meeting_time(meeting, viewer_tz)} ({viewer_tz})\n"
        f"Location: {meeting.location_type.value} - {meeting.location}\n"
        "\n"
        f"Join Link: {meeting.shareable_link}\n"
        "---"
    )


def compose_email(
    meeting: Meeting, participants: list[Contact], body: str, viewer_tz: str
) -> EmailDraft:
    return EmailDraft(
        recipients=[p.email for p in participants],
        subject=f"Invitation: {meeting.topic}",
        body=f"{body.rstrip()}\n\n{meeting_details(meeting, viewer_tz)}",
    )


def choose_delivery(draft: EmailDraft, prefer_webmail: bool = False) -> tuple[str, str]:
    """Pick how to hand the draft to the user.

    Returns ("clipboard", text) when the mailto URI would be too long for mail
    clients, otherwise ("webmail", url) or ("mailto", uri).
    """
    uri = draft.mailto_uri()
    if len(uri) > MAILTO_LIMIT:
        return "clipboard", draft.body
    if prefer_webmail:
        return "webmail", draft.webmail_url()
    return "mailto", uri
