"""Tests for the slot ledger and the optimistic busy check, each on its own."""
import unittest

from meetings.core.constants import STATUS_ACCEPTED, STATUS_DECLINED, STATUS_PENDING, STATUS_RESCHEDULE_PROPOSED
from meetings.core.errors import SlotConflictError
from meetings.models.meet_request import MeetRequest
from meetings.models.slot_lock import SlotLock
from meetings.services.scheduling import conflicts, ledger

from tests.support import ALICE, BOB, CAROL, DAVE, EVENT_ID, make_session

SLOT = "2030-11-04T10:00:00Z"


def _request(db, sender, receiver, slot=SLOT, status=STATUS_PENDING, proposed=None):
    meet = MeetRequest(
        event_id=EVENT_ID,
        sender_id=sender.id,
        sender_role=sender.role,
        receiver_id=receiver.id,
        receiver_role=receiver.role,
        subject="Intro",
        requested_at=slot,
        proposed_new_at=proposed,
        status=status,
    )
    db.add(meet)
    db.commit()
    return meet


class TestSlotLedger(unittest.TestCase):
    def setUp(self):
        self.db = make_session()

    def tearDown(self):
        self.db.close()

    def test_lock_both_participants(self):
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, BOB], SLOT, 1)
        self.db.commit()
        locks = ledger.find_locks(self.db, EVENT_ID, [ALICE.id, BOB.id], SLOT)
        self.assertEqual({l.actor_id for l in locks}, {ALICE.id, BOB.id})
        self.assertEqual({l.actor_role for l in locks}, {ALICE.role, BOB.role})

    def test_conflict_drops_partial_insert(self):
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, BOB], SLOT, 1)
        self.db.commit()
        with self.assertRaises(SlotConflictError):
            ledger.lock_slot(self.db, EVENT_ID, [CAROL, BOB], SLOT, 2)
        self.assertEqual(self.db.query(SlotLock).count(), 2)
        self.assertEqual(ledger.find_locks(self.db, EVENT_ID, [CAROL.id], SLOT), [])

    def test_same_actor_other_slot_or_event_is_fine(self):
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, BOB], SLOT)
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, CAROL], "2030-11-04T10:30:00Z")
        ledger.lock_slot(self.db, "other-event", [ALICE, BOB], SLOT)
        self.db.commit()
        self.assertEqual(self.db.query(SlotLock).count(), 6)

    def test_release(self):
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, BOB], SLOT)
        self.db.commit()
        self.assertEqual(ledger.release_slot(self.db, EVENT_ID, [ALICE.id, BOB.id], SLOT), 2)
        self.db.commit()
        ledger.lock_slot(self.db, EVENT_ID, [CAROL, BOB], SLOT)
        self.db.commit()
        self.assertEqual(self.db.query(SlotLock).count(), 2)

    def test_locked_slot_keys_range(self):
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, BOB], SLOT)
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, CAROL], "2030-11-04T17:00:00Z")
        self.db.commit()
        keys = ledger.locked_slot_keys(self.db, EVENT_ID, [ALICE.id], "2030-11-04T09:00:00Z", "2030-11-04T17:00:00Z")
        self.assertEqual(keys, {SLOT})

    def test_rebuild_from_accepted(self):
        _request(self.db, ALICE, BOB, status=STATUS_ACCEPTED)
        _request(self.db, CAROL, DAVE, status=STATUS_PENDING)
        ledger.lock_slot(self.db, EVENT_ID, [CAROL, DAVE], "2030-11-04T11:00:00Z")
        self.db.commit()
        self.assertEqual(ledger.rebuild_locks(self.db, EVENT_ID), 2)
        self.db.commit()
        self.assertEqual({l.actor_id for l in self.db.query(SlotLock).all()}, {ALICE.id, BOB.id})


class TestConflictDetector(unittest.TestCase):
    def setUp(self):
        self.db = make_session()

    def tearDown(self):
        self.db.close()

    def test_free_slot(self):
        self.assertFalse(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [ALICE, BOB]))

    def test_pending_request_holds_either_side(self):
        _request(self.db, ALICE, BOB)
        self.assertTrue(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [CAROL, BOB]))
        self.assertTrue(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [ALICE, DAVE]))
        self.assertFalse(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [CAROL, DAVE]))
        self.assertFalse(conflicts.is_slot_busy(self.db, "other-event", SLOT, [ALICE, BOB]))

    def test_proposed_time_holds(self):
        _request(self.db, ALICE, BOB, status=STATUS_RESCHEDULE_PROPOSED, proposed="2030-11-04T12:00:00Z")
        self.assertTrue(conflicts.is_slot_busy(self.db, EVENT_ID, "2030-11-04T12:00:00Z", [BOB, CAROL]))

    def test_terminal_requests_do_not_hold(self):
        _request(self.db, ALICE, BOB, status=STATUS_DECLINED)
        self.assertFalse(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [ALICE, BOB]))

    def test_excludes_request_being_rescheduled(self):
        meet = _request(self.db, ALICE, BOB)
        self.assertFalse(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [ALICE, BOB], exclude_request_id=meet.id))

    def test_lock_alone_marks_busy(self):
        ledger.lock_slot(self.db, EVENT_ID, [ALICE, BOB], SLOT)
        self.db.commit()
        self.assertTrue(conflicts.is_slot_busy(self.db, EVENT_ID, SLOT, [BOB, CAROL]))

    def test_busy_slot_keys(self):
        _request(self.db, ALICE, BOB)
        _request(self.db, CAROL, DAVE, slot="2030-11-04T11:00:00Z", status=STATUS_RESCHEDULE_PROPOSED,
                 proposed="2030-11-04T11:30:00Z")
        keys = conflicts.busy_slot_keys(
            self.db, EVENT_ID, [BOB.id, CAROL.id], "2030-11-04T09:00:00Z", "2030-11-04T17:00:00Z"
        )
        self.assertEqual(keys, {SLOT, "2030-11-04T11:00:00Z", "2030-11-04T11:30:00Z"})
