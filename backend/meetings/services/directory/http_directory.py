"""Profile service client: fetches attendee/exhibitor/speaker profiles and events over HTTP.

Each role stores email, display name and the "open to meetings" flag in a different place; the role
adapters below map those documents to ActorIdentity. A 404 means unknown id (None); any other HTTP or
transport failure is raised as-is so the caller sees an infrastructure error, not a domain one.
"""
import logging
from typing import Any
from urllib.parse import quote

import httpx

from meetings.config import settings
from meetings.core.constants import ROLE_ATTENDEE, ROLE_EXHIBITOR, ROLE_SPEAKER
from meetings.services.directory.registry import Directory
from meetings.services.directory.types import ActorIdentity, EventBounds, parse_available_days
from meetings.services.scheduling.clock import normalize_to_utc

logger = logging.getLogger(__name__)


def _text(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def _first_text(*values: Any) -> str:
    for v in values:
        if _text(v):
            return _text(v)
    return ""


class ProfileServiceClient:
    """Lowest level: GET a JSON document from the profile service. No normalization."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.directory_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.directory_api_key
        self.timeout = timeout if timeout is not None else settings.directory_timeout_seconds

    def headers(self) -> dict[str, str]:
        h = {"Accept": "application/json"}
        if self.api_key:
            h["Authorization"] = f"Bearer {self.api_key}"
        return h

    def get_json(self, path: str) -> dict[str, Any] | None:
        """GET base_url + path. None on 404; raises httpx.HTTPError on anything else that failed."""
        url = f"{self.base_url}{path}"
        with httpx.Client(timeout=self.timeout) as c:
            r = c.get(url, headers=self.headers())
        if r.status_code == 404:
            return None
        r.raise_for_status()
        body = r.json() if r.content else {}
        # The profile service wraps payloads as {"success": true, "data": {...}}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body


class HttpProfileAdapter:
    """Base role adapter. Subclasses set `collection` and implement `normalize`."""

    collection = ""

    def __init__(self, client: ProfileServiceClient) -> None:
        self._client = client

    def get_identity(self, actor_id: str) -> ActorIdentity | None:
        doc = self._client.get_json(f"/{self.collection}/{quote(str(actor_id), safe='')}")
        if doc is None:
            return None
        return self.normalize(doc)

    def normalize(self, doc: dict[str, Any]) -> ActorIdentity:
        raise NotImplementedError


class AttendeeAdapter(HttpProfileAdapter):
    collection = "attendees"

    def normalize(self, doc: dict[str, Any]) -> ActorIdentity:
        personal = doc.get("personal") or {}
        intent = doc.get("matchingIntent") or {}
        return ActorIdentity(
            email=_text(personal.get("email")),
            display_name=_first_text(personal.get("fullName"), "User"),
            open_to_meetings=bool(intent.get("openToMeetings", False)),
            available_days=parse_available_days(intent.get("availableDays")),
        )


class SpeakerAdapter(HttpProfileAdapter):
    collection = "speakers"

    def normalize(self, doc: dict[str, Any]) -> ActorIdentity:
        personal = doc.get("personal") or {}
        intent = doc.get("b2bIntent") or {}
        return ActorIdentity(
            email=_text(personal.get("email")),
            display_name=_first_text(personal.get("fullName"), "User"),
            open_to_meetings=bool(intent.get("openMeetings", False)),
            available_days=parse_available_days(intent.get("availableDays")),
        )


class ExhibitorAdapter(HttpProfileAdapter):
    collection = "exhibitors"

    def normalize(self, doc: dict[str, Any]) -> ActorIdentity:
        identity = doc.get("identity") or {}
        commercial = doc.get("commercial") or {}
        return ActorIdentity(
            email=_text(identity.get("email")),
            display_name=_first_text(identity.get("exhibitorName"), identity.get("orgName"), "Exhibitor"),
            open_to_meetings=bool(commercial.get("availableMeetings", False)),
            available_days=parse_available_days(commercial.get("availableDays")),
        )


class HttpEventSource:
    def __init__(self, client: ProfileServiceClient) -> None:
        self._client = client

    def get_event(self, event_id: str) -> EventBounds | None:
        doc = self._client.get_json(f"/events/{quote(str(event_id), safe='')}")
        if doc is None:
            return None
        return EventBounds(
            event_id=event_id,
            start=normalize_to_utc(doc.get("startDate") or ""),
            end=normalize_to_utc(doc.get("endDate") or ""),
            title=_text(doc.get("title")),
        )


def build_http_directory(client: ProfileServiceClient | None = None) -> Directory:
    """Directory backed by the profile service, one adapter per meeting role."""
    client = client or ProfileServiceClient()
    if not client.base_url:
        logger.warning("DIRECTORY_BASE_URL not set; profile and event lookups will fail")
    return Directory(
        HttpEventSource(client),
        {
            ROLE_ATTENDEE: AttendeeAdapter(client),
            ROLE_EXHIBITOR: ExhibitorAdapter(client),
            ROLE_SPEAKER: SpeakerAdapter(client),
        },
    )
