"""Tests for the contact and meeting records."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from meetbook.models import (
    Contact,
    LocationType,
    Meeting,
    meeting_helper_link,
    new_id,
    parse_instant,
    shareable_link,
)


def make_meeting(**overrides) -> Meeting:
    fields = dict(
        id="m-1",
        topic="Sync",
        date_time="2025-03-01T15:00:00Z",
        location_type="URL",
        location="https://x",
        participant_ids=["ana-id"],
        shareable_link="http://localhost:8080/join?meetingId=m-1",
    )
    fields.update(overrides)
    return Meeting(**fields)


class TestContact:
    def test_blank_socials_dropped(self):
        contact = Contact(
            id="c-1",
            name="Ana",
            email="ana@x.com",
            socials={"twitter": "ana", "github": "", "zoom": "  ", "myspace": "ana"},
        )
        assert contact.socials == {"twitter": "ana"}

    def test_dict_keys(self):
        contact = Contact(id="c-1", name="Ana", email="ana@x.com", timezone="Europe/Paris")
        assert contact.to_dict() == {
            "id": "c-1",
            "name": "Ana",
            "email": "ana@x.com",
            "timezone": "Europe/Paris",
            "socials": {},
        }

    def test_from_dict_defaults(self):
        contact = Contact.from_dict({"id": "c-1"})
        assert contact.name == ""
        assert contact.timezone == "America/New_York"
        assert contact.socials == {}

    def test_from_dict_requires_id(self):
        with pytest.raises(KeyError):
            Contact.from_dict({"name": "Ana"})


class TestMeeting:
    def test_camel_case_json(self):
        data = make_meeting().to_dict()
        assert data["dateTime"] == "2025-03-01T15:00:00Z"
        assert data["locationType"] == "URL"
        assert data["participantIds"] == ["ana-id"]
        assert data["shareableLink"].endswith("meetingId=m-1")

    def test_from_dict(self):
        meeting = Meeting.from_dict(make_meeting(location_type="Facebook Messenger").to_dict())
        assert meeting.location_type is LocationType.FACEBOOK_MESSENGER
        assert meeting == make_meeting(location_type="Facebook Messenger")

    def test_participants_deduplicated_in_order(self):
        meeting = make_meeting(participant_ids=["b", "a", "b", "c", "a"])
        assert meeting.participant_ids == ["b", "a", "c"]

    def test_invalid_location_type(self):
        with pytest.raises(ValueError):
            make_meeting(location_type="Carrier pigeon")

    def test_instant(self):
        assert make_meeting().instant == datetime(2025, 3, 1, 15, tzinfo=timezone.utc)


class TestParseInstant:
    def test_zulu(self):
        assert parse_instant("2024-01-01T09:00:00Z") == datetime(2024, 1, 1, 9, tzinfo=timezone.utc)

    def test_mixed_precision_same_instant(self):
        assert parse_instant("2024-01-01T09:00:00.000Z") == parse_instant("2024-01-01T09:00:00Z")

    @pytest.mark.parametrize("value", ["2024-01-01T09:00:00.5Z", "2024-01-01T09:00:00.5000000Z"])
    def test_odd_fraction_lengths(self, value):
        assert parse_instant(value) == datetime(2024, 1, 1, 9, 0, 0, 500000, tzinfo=timezone.utc)

    def test_offset(self):
        assert parse_instant("2024-01-01T10:00:00+01:00") == parse_instant("2024-01-01T09:00:00Z")

    def test_naive_is_local(self):
        expected = datetime(2025, 3, 1, 15, 0).astimezone().astimezone(timezone.utc)
        assert parse_instant("2025-03-01T15:00") == expected

    @pytest.mark.parametrize("value", ["", "tomorrow", "2025-13-01T00:00", None])
    def test_invalid(self, value):
        assert parse_instant(value) is None


class TestHelpers:
    def test_new_id_unique(self):
        assert new_id() != new_id()

    def test_shareable_link(self):
        assert shareable_link("abc", "https://meet.example.com/") == (
            "https://meet.example.com/join?meetingId=abc"
        )

    def test_helper_links(self):
        assert meeting_helper_link(LocationType.ZOOM) == "https://zoom.us/meeting/schedule"
        assert meeting_helper_link("Facebook Messenger") == "https://www.messenger.com/new"
        assert meeting_helper_link("Discord") is None
        assert meeting_helper_link("Physical") is None
