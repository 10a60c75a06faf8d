"""Tests for role adapters and the directory registry."""
import unittest
from datetime import date, datetime, timezone

from meetings.core.errors import NotFoundError, ValidationError
from meetings.services.directory.http_directory import (
    AttendeeAdapter,
    ExhibitorAdapter,
    HttpEventSource,
    SpeakerAdapter,
)
from meetings.services.directory.types import ActorRef, EventBounds

from tests.support import EVENT_ID, make_directory


class FakeClient:
    def __init__(self, docs):
        self.docs = docs
        self.paths = []

    def get_json(self, path):
        self.paths.append(path)
        return self.docs.get(path)


class TestRoleAdapters(unittest.TestCase):
    def test_attendee(self):
        client = FakeClient({
            "/attendees/a-1": {
                "personal": {"email": " ann@example.com ", "fullName": "Ann"},
                "matchingIntent": {"openToMeetings": True, "availableDays": ["2030-11-04", "garbage"]},
            }
        })
        identity = AttendeeAdapter(client).get_identity("a-1")
        self.assertEqual(identity.email, "ann@example.com")
        self.assertEqual(identity.display_name, "Ann")
        self.assertTrue(identity.open_to_meetings)
        self.assertEqual(identity.available_days, (date(2030, 11, 4),))
        self.assertIsNone(AttendeeAdapter(client).get_identity("missing"))

    def test_speaker_and_exhibitor(self):
        client = FakeClient({
            "/speakers/s-1": {"personal": {"email": "sam@example.com"}, "b2bIntent": {"openMeetings": True}},
            "/exhibitors/e-1": {
                "identity": {"email": "booth@example.com", "orgName": "Acme"},
                "commercial": {"availableMeetings": False},
            },
        })
        speaker = SpeakerAdapter(client).get_identity("s-1")
        self.assertEqual(speaker.display_name, "User")
        self.assertTrue(speaker.open_to_meetings)
        self.assertTrue(speaker.is_available_on(date(2030, 11, 5)))
        exhibitor = ExhibitorAdapter(client).get_identity("e-1")
        self.assertEqual(exhibitor.display_name, "Acme")
        self.assertFalse(exhibitor.open_to_meetings)

    def test_ids_are_quoted_in_paths(self):
        client = FakeClient({})
        self.assertIsNone(AttendeeAdapter(client).get_identity("../admin?x=1"))
        self.assertIsNone(HttpEventSource(client).get_event("a b/c"))
        self.assertEqual(client.paths, ["/attendees/..%2Fadmin%3Fx%3D1", "/events/a%20b%2Fc"])

    def test_event_source(self):
        client = FakeClient({
            "/events/x": {"startDate": "2030-11-03T10:00:00+01:00", "endDate": "2030-11-05T17:00:00Z", "title": "Expo"}
        })
        bounds = HttpEventSource(client).get_event("x")
        self.assertEqual(bounds.start, datetime(2030, 11, 3, 9, 0, tzinfo=timezone.utc))
        self.assertEqual(bounds.title, "Expo")


class TestDirectory(unittest.TestCase):
    def test_resolve(self):
        directory = make_directory()
        self.assertEqual(directory.resolve(ActorRef("a-1", "attendee")).email, "a-1@example.com")
        with self.assertRaises(NotFoundError):
            directory.resolve(ActorRef("a-1", "speaker"))
        with self.assertRaises(ValidationError):
            directory.resolve(ActorRef("a-1", "sponsor"))

    def test_event_bounds(self):
        directory = make_directory()
        self.assertIsInstance(directory.event_bounds(EVENT_ID), EventBounds)
        with self.assertRaises(NotFoundError):
            directory.event_bounds("nope")
