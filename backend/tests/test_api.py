"""Tests for the meetings HTTP API."""
import unittest

from fastapi.testclient import TestClient

from meetings.api.deps import get_directory, get_mailer
from meetings.db.session import get_db
from meetings.main import app

from tests.support import ADMIN, ALICE, BOB, CAROL, EVENT_ID, RecordingMailer, make_directory, make_session


def _headers(actor):
    return {"X-Actor-Id": actor.id, "X-Actor-Role": actor.role}


class TestMeetsApi(unittest.TestCase):
    def setUp(self):
        self.db = make_session()
        self.directory = make_directory()
        self.mailer = RecordingMailer()

        def override_db():
            yield self.db

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_directory] = lambda: self.directory
        app.dependency_overrides[get_mailer] = lambda: self.mailer
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()

    def create(self, sender=ALICE, receiver=BOB, when="2030-11-04T10:10:00Z"):
        return self.client.post(
            "/meets",
            headers=_headers(sender),
            json={
                "event_id": EVENT_ID,
                "receiver_id": receiver.id,
                "receiver_role": receiver.role,
                "date_time": when,
                "subject": "Partnership",
            },
        )

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_create_accept_calendar(self):
        r = self.create()
        self.assertEqual(r.status_code, 201)
        meet = r.json()["data"]
        self.assertEqual(meet["requested_at"], "2030-11-04T10:00:00Z")
        self.assertEqual(meet["status"], "pending")

        r = self.client.post(f"/meets/{meet['id']}/accept", headers=_headers(BOB))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"]["status"], "accepted")

        r = self.client.get(f"/meets/{meet['id']}/calendar", headers=_headers(ALICE))
        self.assertEqual(r.json()["data"]["duration_minutes"], 30)

        r = self.client.get("/meets/reminders", params={"event_id": EVENT_ID}, headers=_headers(ADMIN))
        self.assertEqual(r.json()["count"], 1)

    def test_error_mapping(self):
        meet = self.create().json()["data"]
        r = self.create(CAROL, BOB)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["detail"]["error"], "slot_conflict")

        r = self.client.post(f"/meets/{meet['id']}/accept", headers=_headers(ALICE))
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["detail"]["error"], "state_conflict")

        r = self.create(when="2030-11-04T20:00:00Z")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"]["error"], "validation_error")

        r = self.client.post("/meets/999/decline", headers=_headers(BOB))
        self.assertEqual(r.status_code, 404)

        r = self.client.get("/meets/reminders", params={"event_id": EVENT_ID}, headers=_headers(ALICE))
        self.assertEqual(r.status_code, 409)

    def test_missing_actor_headers(self):
        r = self.client.get("/meets")
        self.assertEqual(r.status_code, 400)

    def test_propose_confirm_and_listings(self):
        meet = self.create().json()["data"]
        r = self.client.post(
            f"/meets/{meet['id']}/propose", headers=_headers(BOB), json={"date_time": "2030-11-04T13:00:00Z"}
        )
        self.assertEqual(r.json()["data"]["status"], "reschedule-proposed")
        r = self.client.post(f"/meets/{meet['id']}/confirm", headers=_headers(ALICE))
        self.assertEqual(r.json()["data"]["requested_at"], "2030-11-04T13:00:00Z")

        mine = self.client.get("/meets", params={"status": "accepted"}, headers=_headers(BOB)).json()["data"]
        self.assertEqual([m["id"] for m in mine], [meet["id"]])

        agenda = self.client.get(f"/meets/agenda/{ALICE.id}", headers=_headers(ADMIN)).json()["data"]
        self.assertEqual(len(agenda), 1)

        slots = self.client.get(
            "/meets/available-slots",
            params={"event_id": EVENT_ID, "actor_id": BOB.id, "date": "2030-11-04"},
            headers=_headers(CAROL),
        ).json()["data"]
        self.assertNotIn("2030-11-04T13:00:00Z", slots)
        self.assertIn("2030-11-04T10:00:00Z", slots)

        r = self.client.get(f"/meets/exists/{BOB.id}", headers=_headers(ALICE))
        self.assertEqual(r.json()["exists"], "yes")

        r = self.client.post(f"/meets/{meet['id']}/cancel", headers=_headers(BOB))
        self.assertEqual(r.json()["data"]["status"], "cancelled")
