"""Event lifecycle and attendance rules.

The service sits between the routes and :class:`~app.events.store.EventStore`.
It owns the invariants the store cannot express on its own:

    - New events always start as ``upcoming`` with no attendees, whatever
      the creator sent for those fields.
    - The attendee set only changes through join and cancel. General
      updates may not touch ``attendees``, ``id`` or ``createdAt``.
    - Join and cancel first check that the event exists, then issue the
      store's single conditional write. A missing event is reported as
      NotFound; a write that changed nothing (already joined, not
      attending) is reported as InvalidInput.

Authorization is not checked here. Routes only reach the mutating methods
after the ``require_principal`` dependency has passed.
"""
import logging
from typing import Any
from uuid import UUID

from app.core.errors import InvalidInput, NotFound
from app.events.store import EventStore
from app.models import EventStatus

logger = logging.getLogger(__name__)

# Sentinel eventType meaning "do not filter by type"
ALL_EVENT_TYPES = "All"

# Never taken from a create payload; set by the server instead.
SERVER_MANAGED_FIELDS = frozenset({"id", "_id", "status", "attendees", "createdAt"})

# Rejected in general updates.
UPDATE_DENIED_FIELDS = frozenset({"id", "_id", "attendees", "createdAt"})

# Fields stored as string columns.
STRING_FIELDS = ("title", "eventType")


def parse_event_id(raw_id: str) -> UUID:
    """Validate an event id from the URL, raising InvalidInput if malformed."""
    try:
        return UUID(raw_id)
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidInput(f"Invalid event id: {raw_id!r}") from e


def _require_email(payload: dict[str, Any]) -> str:
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        raise InvalidInput("A non-empty email is required")
    return email.strip()


def _check_string_fields(payload: dict[str, Any]) -> None:
    for field in STRING_FIELDS:
        value = payload.get(field)
        if value is not None and not isinstance(value, str):
            raise InvalidInput(f"{field} must be a string")


class EventService:
    """Operations exposed by the /events routes."""

    def __init__(self, store: EventStore):
        self.store = store

    def create_event(self, payload: dict[str, Any], created_by: str | None = None) -> dict:
        """Insert a new event with server-initialised status and attendees."""
        _check_string_fields(payload)

        document = {
            field: value
            for field, value in payload.items()
            if field not in SERVER_MANAGED_FIELDS
        }
        document["status"] = EventStatus.UPCOMING.value
        document["attendees"] = []

        event_id = self.store.insert(document)
        logger.info(f"Event {event_id} created by {created_by}")
        return {"message": "Event created successfully", "insertedId": str(event_id)}

    def list_events(
        self, search: str | None = None, event_type: str | None = None
    ) -> list[dict]:
        """
        List upcoming events.

        ``search`` is a case-insensitive substring of the title. ``event_type``
        is an exact match unless it is empty or "All".
        """
        search = search.strip() if search else None
        if not event_type or event_type == ALL_EVENT_TYPES:
            event_type = None

        events = self.store.find_many(
            search=search or None,
            event_type=event_type,
            status=EventStatus.UPCOMING.value,
        )
        return [event.to_document() for event in events]

    def get_event(self, raw_id: str) -> dict:
        event = self.store.find_one(parse_event_id(raw_id))
        if event is None:
            raise NotFound("Event not found")
        return event.to_document()

    def update_event(self, raw_id: str, payload: dict[str, Any]) -> dict:
        """
        Join the event or update its fields.

        A body containing ``email`` is a join request and must contain
        nothing else. Any other non-empty body is a field update.
        """
        event_id = parse_event_id(raw_id)
        if not payload:
            raise InvalidInput("Nothing to update")

        if "email" in payload:
            if len(payload) > 1:
                raise InvalidInput("A join request may only contain an email")
            return self.join_event(event_id, _require_email(payload))

        denied = UPDATE_DENIED_FIELDS & payload.keys()
        if denied:
            raise InvalidInput(f"Fields cannot be updated: {', '.join(sorted(denied))}")
        _check_string_fields(payload)
        if "status" in payload:
            allowed = [status.value for status in EventStatus]
            if payload["status"] not in allowed:
                raise InvalidInput(f"status must be one of: {', '.join(allowed)}")

        if not self.store.update_fields(event_id, payload):
            raise NotFound("Event not found")

        logger.info(f"Event {event_id} updated: {sorted(payload)}")
        return {"message": "Event updated successfully"}

    def join_event(self, event_id: UUID, email: str) -> dict:
        if self.store.find_one(event_id) is None:
            raise NotFound("Event not found")
        if not self.store.add_attendee_if_absent(event_id, email):
            raise InvalidInput("Already joined this event")

        logger.info(f"{email} joined event {event_id}")
        return {"message": "Joined event successfully"}

    def cancel_attendance(self, raw_id: str, payload: dict[str, Any]) -> dict:
        event_id = parse_event_id(raw_id)
        email = _require_email(payload)

        if self.store.find_one(event_id) is None:
            raise NotFound("Event not found")
        if not self.store.remove_attendee(event_id, email):
            raise InvalidInput("Not an attendee of this event")

        logger.info(f"{email} cancelled attendance for event {event_id}")
        return {"message": "Attendance cancelled successfully"}

    def delete_event(self, raw_id: str, deleted_by: str | None = None) -> dict:
        event_id = parse_event_id(raw_id)
        if not self.store.delete_one(event_id):
            raise NotFound("Event not found")

        logger.info(f"Event {event_id} deleted by {deleted_by}")
        return {"message": "Event deleted successfully"}
