"""Persistence primitives for events and their attendees.

These are the only operations the lifecycle service uses to touch the
database. Each one runs in a single transaction and reports how many
events it affected, so callers can tell a miss from a hit without a second
query.
"""
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.models import Attendee, Event

logger = logging.getLogger(__name__)

# JSON field name -> Event column. Everything else goes into Event.details.
COLUMN_FIELDS = {
    "title": "title",
    "eventType": "event_type",
    "status": "status",
}


class EventStore:
    """Event collection backed by a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session

    def insert(self, document: dict[str, Any]) -> UUID:
        """Insert an event document and return its new id.

        Recognised fields become columns, ``attendees`` becomes attendee
        rows, and the rest is stored in ``details``.
        """
        document = dict(document)
        attendees = document.pop("attendees", [])
        columns = {
            column: document.pop(field)
            for field, column in COLUMN_FIELDS.items()
            if field in document
        }
        event = Event(**columns, details=document)
        event.attendees = [Attendee(email=email) for email in attendees]

        self.session.add(event)
        self.session.commit()
        return event.id

    def find_many(
        self,
        search: str | None = None,
        event_type: str | None = None,
        status: str | None = None,
    ) -> list[Event]:
        """Return events matching every given filter, oldest first."""
        statement = select(Event)
        if search:
            statement = statement.where(
                func.lower(col(Event.title)).contains(search.lower(), autoescape=True)
            )
        if event_type is not None:
            statement = statement.where(Event.event_type == event_type)
        if status is not None:
            statement = statement.where(Event.status == status)
        statement = statement.order_by(col(Event.created_at))
        return list(self.session.exec(statement).all())

    def find_one(self, event_id: UUID) -> Event | None:
        return self.session.get(Event, event_id)

    def update_fields(self, event_id: UUID, fields: dict[str, Any]) -> int:
        """Set the named fields, leaving all others untouched."""
        event = self.session.get(Event, event_id)
        if event is None:
            return 0

        # Assign a new dict so SQLAlchemy sees the JSON column change.
        details = dict(event.details or {})
        for field, value in fields.items():
            if field in COLUMN_FIELDS:
                setattr(event, COLUMN_FIELDS[field], value)
            else:
                details[field] = value
        event.details = details

        self.session.add(event)
        self.session.commit()
        return 1

    def add_attendee_if_absent(self, event_id: UUID, email: str) -> int:
        """Append ``email`` to the attendees unless it is already there.

        A single INSERT guarded by the (event_id, email) unique constraint
        and the event foreign key. Returns 0 when either guard rejects it,
        so "already joined" and "no such event" look the same here.
        """
        self.session.add(Attendee(event_id=event_id, email=email))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.debug(f"Attendee {email} not added to event {event_id}")
            return 0
        return 1

    def remove_attendee(self, event_id: UUID, email: str) -> int:
        """Remove ``email`` from the attendees; 0 if it was not there."""
        statement = delete(Attendee).where(
            col(Attendee.event_id) == event_id,
            col(Attendee.email) == email,
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount

    def delete_one(self, event_id: UUID) -> int:
        """Hard-delete an event together with its attendee rows."""
        event = self.session.get(Event, event_id)
        if event is None:
            return 0
        self.session.delete(event)
        self.session.commit()
        return 1
