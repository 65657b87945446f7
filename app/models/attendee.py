"""Attendee model for tracking who joined an event.

Each row is one (event, email) membership. The unique constraint on that
pair is what keeps the attendee set free of duplicates, including when two
join requests for the same email race each other.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.event import Event


class Attendee(SQLModel, table=True):
    """A person attending an event.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Foreign key to the parent Event.
        email: Email address of the verified principal who joined.
        joined_at: When the join was recorded; defines attendee order.
        event: Reference to the parent Event object.
    """
    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_attendee_event_email"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    email: str
    joined_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    event: Optional["Event"] = Relationship(back_populates="attendees")
