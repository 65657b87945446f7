"""Event model for social events.

This module defines the Event model, the central entity of the service.
An event carries a few indexed columns used for filtering (title, type,
status) and keeps any other descriptive fields supplied by its creator in
a JSON ``details`` column. Attendees live in their own table so that the
store can enforce one row per (event, email).
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.attendee import Attendee


class EventStatus(str, Enum):
    """Lifecycle status. New events are always upcoming; the rest are set by update."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(SQLModel, table=True):
    """A social event people can join.

    Attributes:
        id: Unique identifier (UUID), assigned on insert and never changed.
        title: Event title, matched by the free-text search.
        event_type: Category such as "Picnic" or "Meetup" (``eventType``
            in JSON).
        status: One of :class:`EventStatus`. Set to "upcoming" on creation.
        details: Any other fields the creator supplied, returned as-is.
        created_at: When the event was inserted.
        attendees: People who joined, in join order.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str | None = Field(default=None, index=True)
    event_type: str | None = Field(default=None, index=True)
    status: str = Field(default=EventStatus.UPCOMING.value, index=True)
    details: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    attendees: list["Attendee"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "Attendee.joined_at",
        },
    )

    def to_document(self) -> dict[str, Any]:
        """Flatten the event into the JSON shape clients see."""
        document = dict(self.details or {})
        document.update(
            {
                "id": str(self.id),
                "title": self.title,
                "eventType": self.event_type,
                "status": self.status,
                "attendees": [attendee.email for attendee in self.attendees],
                "createdAt": self.created_at.isoformat(),
            }
        )
        return document
