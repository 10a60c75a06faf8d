"""Tests for slot key normalization."""
import unittest
from datetime import date, datetime, timedelta, timezone

from meetings.core.errors import ValidationError
from meetings.services.scheduling.clock import normalize_to_utc, parse_slot_key, slot_end, slot_key, utc_day


class TestSlotKey(unittest.TestCase):
    def test_floors_to_half_hour(self):
        self.assertEqual(slot_key("2025-11-04T09:07:00Z"), "2025-11-04T09:00:00Z")
        self.assertEqual(slot_key("2025-11-04T09:30:00Z"), "2025-11-04T09:30:00Z")
        self.assertEqual(slot_key("2025-11-04T09:59:59.999Z"), "2025-11-04T09:30:00Z")

    def test_offset_is_converted_to_utc(self):
        self.assertEqual(slot_key("2025-11-04T11:45:00+02:00"), "2025-11-04T09:30:00Z")
        self.assertEqual(slot_key("2025-11-04T01:10:00+05:00"), "2025-11-03T20:00:00Z")

    def test_wall_clock_without_offset_is_utc(self):
        self.assertEqual(slot_key("2025-11-04T09:07"), "2025-11-04T09:00:00Z")
        self.assertEqual(slot_key("2025-11-04 14:31:12.250"), "2025-11-04T14:30:00Z")

    def test_native_values(self):
        self.assertEqual(slot_key(datetime(2025, 11, 4, 9, 40)), "2025-11-04T09:30:00Z")
        aware = datetime(2025, 11, 4, 9, 40, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(slot_key(aware), "2025-11-04T14:30:00Z")
        self.assertEqual(slot_key(date(2025, 11, 4)), "2025-11-04T00:00:00Z")

    def test_idempotent(self):
        for raw in ("2025-11-04T09:07:00Z", "2025-11-04T23:59:59+01:00", "2025-11-04 00:29"):
            key = slot_key(raw)
            self.assertEqual(slot_key(key), key)
            self.assertIn(parse_slot_key(key).minute, (0, 30))

    def test_invalid_input(self):
        for bad in ("", "   ", "not-a-date", "2025-13-40T10:00:00Z"):
            with self.assertRaises(ValidationError):
                slot_key(bad)
        with self.assertRaises(ValidationError):
            normalize_to_utc(12345)

    def test_slot_end_and_day(self):
        self.assertEqual(slot_end("2025-11-04T09:30:00Z"), datetime(2025, 11, 4, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(utc_day("2025-11-04"), date(2025, 11, 4))
        self.assertEqual(utc_day("2025-11-04T23:30:00-02:00"), date(2025, 11, 5))
