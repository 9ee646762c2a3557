"""Contact and Meeting records.

Python attributes are snake_case; the persisted and backup JSON keep the
camelCase keys (``dateTime``, ``locationType``, ``participantIds``,
``shareableLink``) so existing backup files restore unchanged.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

_FRACTION = re.compile(r"\.(\d+)")

SOCIAL_PLATFORMS = ("twitter", "linkedin", "github", "messenger", "discord", "zoom")

DEFAULT_TIMEZONE = "America/New_York"

TIMEZONES = [
    "Pacific/Honolulu",
    "America/Anchorage",
    "America/Los_Angeles",
    "America/Denver",
    "America/Phoenix",
    "America/Chicago",
    "America/New_York",
    "America/Halifax",
    "America/Sao_Paulo",
    "America/Argentina/Buenos_Aires",
    "Atlantic/Azores",
    "UTC",
    "Europe/London",
    "Europe/Lisbon",
    "Europe/Paris",
    "Europe/Berlin",
    "Europe/Madrid",
    "Europe/Rome",
    "Europe/Athens",
    "Europe/Istanbul",
    "Europe/Moscow",
    "Africa/Cairo",
    "Africa/Lagos",
    "Africa/Johannesburg",
    "Asia/Dubai",
    "Asia/Karachi",
    "Asia/Kolkata",
    "Asia/Dhaka",
    "Asia/Bangkok",
    "Asia/Singapore",
    "Asia/Shanghai",
    "Asia/Hong_Kong",
    "Asia/Tokyo",
    "Asia/Seoul",
    "Australia/Perth",
    "Australia/Sydney",
    "Pacific/Auckland",
]


class LocationType(str, Enum):
    PHYSICAL = "Physical"
    URL = "URL"
    ZOOM = "Zoom"
    DISCORD = "Discord"
    FACEBOOK_MESSENGER = "Facebook Messenger"


_HELPER_LINKS = {
    LocationType.ZOOM: "https://zoom.us/meeting/schedule",
    LocationType.FACEBOOK_MESSENGER: "https://www.messenger.com/new",
}


def new_id() -> str:
    return str(uuid.uuid4())


def shareable_link(meeting_id: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/join?meetingId={meeting_id}"


def meeting_helper_link(location_type: LocationType) -> str | None:
    """Page where a meeting can be created on the given platform.

    Physical, URL and Discord have no helper; Discord links are pasted by hand.
    """
    return _HELPER_LINKS.get(LocationType(location_type))


def parse_instant(value: str) -> datetime | None:
    """Parse an ISO-8601 string into an aware datetime.

    ``Z`` means UTC. Naive values (``datetime-local`` form input) are read in
    the local system timezone. Returns None when the value is not a date.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc)


def clean_socials(socials: dict | None) -> dict[str, str]:
    """Keep known platforms with a non-blank handle."""
    if not socials:
        return {}
    if not isinstance(socials, dict):
        raise TypeError(f"socials must be an object, got {type(socials).__name__}")
    return {
        key: str(socials[key]).strip()
        for key in SOCIAL_PLATFORMS
        if socials.get(key) and str(socials[key]).strip()
    }


def _text(data: dict, key: str, default: str = "") -> str:
    """String field from a JSON record; null or absent means ``default``."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _list(data: dict, key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{key} must be a list, got {type(value).__name__}")
    return value


@dataclass
class Contact:
    """A person meetings can be scheduled with."""

    id: str
    name: str
    email: str
    timezone: str = DEFAULT_TIMEZONE
    socials: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.socials = clean_socials(self.socials)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "timezone": self.timezone,
            "socials": dict(self.socials),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Contact:
        return cls(
            id=str(data["id"]),
            name=_text(data, "name"),
            email=_text(data, "email"),
            timezone=_text(data, "timezone") or DEFAULT_TIMEZONE,
            socials=data.get("socials") or {},
        )


@dataclass
class Meeting:
    """A scheduled event referencing contacts by id."""

    id: str
    topic: str
    date_time: str
    location_type: LocationType
    location: str
    participant_ids: list[str] = field(default_factory=list)
    shareable_link: str = ""

    def __post_init__(self) -> None:
        self.location_type = LocationType(self.location_type)
        # set semantics, first occurrence wins
        self.participant_ids = list(dict.fromkeys(self.participant_ids))

    @property
    def instant(self) -> datetime | None:
        return parse_instant(self.date_time)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "topic": self.topic,
            "dateTime": self.date_time,
            "locationType": self.location_type.value,
            "location": self.location,
            "participantIds": list(self.participant_ids),
            "shareableLink": self.shareable_link,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Meeting:
        return cls(
            id=str(data["id"]),
            topic=_text(data, "topic"),
            date_time=_text(data, "dateTime"),
            location_type=data.get("locationType") or LocationType.URL,
            location=_text(data, "location"),
            participant_ids=[str(pid) for pid in _list(data, "participantIds")],
            shareable_link=_text(data, "shareableLink"),
        )
