from app.models.attendee import Attendee
from app.models.event import Event, EventStatus

__all__ = ["Event", "EventStatus", "Attendee"]
