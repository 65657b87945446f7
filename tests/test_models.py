"""Tests for database models."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models import Attendee, Event, EventStatus


class TestEventModel:
    """Tests for the Event model."""

    def test_create_event_defaults(self, session: Session):
        """Test a bare event starts upcoming with no attendees."""
        event = Event(title="Book Club")
        session.add(event)
        session.commit()

        retrieved = session.exec(select(Event).where(Event.title == "Book Club")).first()

        assert retrieved is not None
        assert retrieved.status == EventStatus.UPCOMING.value
        assert retrieved.attendees == []
        assert retrieved.details == {}

    def test_to_document_flattens_details(self, session: Session):
        """Test extra fields are returned alongside the core fields."""
        event = Event(
            title="Beach Cleanup",
            event_type="Volunteering",
            details={"location": "North Beach", "capacity": 30},
        )
        session.add(event)
        session.commit()
        session.refresh(event)

        document = event.to_document()

        assert document["id"] == str(event.id)
        assert document["title"] == "Beach Cleanup"
        assert document["eventType"] == "Volunteering"
        assert document["status"] == "upcoming"
        assert document["attendees"] == []
        assert document["location"] == "North Beach"
        assert document["capacity"] == 30
        assert "createdAt" in document

    def test_details_cannot_shadow_core_fields(self, session: Session):
        """Test core fields win over same-named keys in details."""
        event = Event(title="Real Title", details={"title": "Fake", "status": "completed"})
        session.add(event)
        session.commit()
        session.refresh(event)

        document = event.to_document()

        assert document["title"] == "Real Title"
        assert document["status"] == "upcoming"


class TestAttendeeModel:
    """Tests for the Attendee model."""

    def test_attendee_relationship(self, session: Session):
        """Test attendees appear on the event in join order."""
        event = Event(title="Hike")
        session.add(event)
        session.commit()

        session.add(Attendee(event_id=event.id, email="a@example.com"))
        session.commit()
        session.add(Attendee(event_id=event.id, email="b@example.com"))
        session.commit()
        session.refresh(event)

        assert [a.email for a in event.attendees] == ["a@example.com", "b@example.com"]

    def test_attendee_unique_per_event(self, session: Session):
        """Test the same email cannot join the same event twice."""
        event = Event(title="Hike")
        session.add(event)
        session.commit()

        session.add(Attendee(event_id=event.id, email="a@example.com"))
        session.commit()
        session.add(Attendee(event_id=event.id, email="a@example.com"))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_same_email_on_different_events(self, session: Session):
        """Test one person can attend several events."""
        first = Event(title="First")
        second = Event(title="Second")
        session.add(first)
        session.add(second)
        session.commit()

        session.add(Attendee(event_id=first.id, email="a@example.com"))
        session.add(Attendee(event_id=second.id, email="a@example.com"))
        session.commit()

        rows = session.exec(select(Attendee).where(Attendee.email == "a@example.com")).all()
        assert len(rows) == 2

    def test_attendee_requires_existing_event(self, session: Session):
        """Test the foreign key rejects attendees of unknown events."""
        session.add(Attendee(event_id=uuid4(), email="a@example.com"))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_deleting_event_removes_attendees(self, session: Session):
        """Test attendee rows go away with their event."""
        event = Event(title="Hike")
        session.add(event)
        session.commit()
        session.add(Attendee(event_id=event.id, email="a@example.com"))
        session.commit()
        session.refresh(event)

        session.delete(event)
        session.commit()

        assert session.exec(select(Attendee)).all() == []
