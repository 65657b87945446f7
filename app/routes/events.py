"""Event routes: discovery, creation, attendance, update and deletion."""
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.core.security import VerifiedPrincipal, require_principal
from app.events.service import EventService
from app.events.store import EventStore

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(session: Session = Depends(get_session)) -> EventService:
    """Dependency building the lifecycle service over this request's session."""
    return EventService(EventStore(session))


@router.post("", status_code=201)
async def create_event(
    payload: dict[str, Any] = Body(...),
    principal: VerifiedPrincipal = Depends(require_principal),
    service: EventService = Depends(get_event_service),
):
    """
    Create an event.

    Any JSON object is accepted. ``status`` and ``attendees`` in the body
    are ignored; the event always starts upcoming with nobody attending.
    """
    return service.create_event(payload, created_by=principal.email)


@router.get("")
async def list_events(
    search: str | None = Query(default=None),
    event_type: str | None = Query(default=None, alias="eventType"),
    service: EventService = Depends(get_event_service),
):
    """
    List upcoming events.

    Optionally filtered by a case-insensitive title substring (``search``)
    and an exact ``eventType``; ``eventType=All`` disables the type filter.
    """
    return service.list_events(search=search, event_type=event_type)


@router.get("/{event_id}")
async def get_event(event_id: str, service: EventService = Depends(get_event_service)):
    """Return a single event. 400 for a malformed id, 404 if it does not exist."""
    return service.get_event(event_id)


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    payload: dict[str, Any] = Body(...),
    principal: VerifiedPrincipal = Depends(require_principal),
    service: EventService = Depends(get_event_service),
):
    """
    Join an event or update its fields.

    ``{"email": ...}`` adds that email to the attendees; any other fields
    are written to the event. The two cannot be combined in one request.
    """
    return service.update_event(event_id, payload)


@router.patch("/{event_id}/cancel")
async def cancel_attendance(
    event_id: str,
    payload: dict[str, Any] = Body(...),
    principal: VerifiedPrincipal = Depends(require_principal),
    service: EventService = Depends(get_event_service),
):
    """Remove ``email`` from the event's attendees."""
    return service.cancel_attendance(event_id, payload)


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    principal: VerifiedPrincipal = Depends(require_principal),
    service: EventService = Depends(get_event_service),
):
    """Delete an event and its attendance records."""
    return service.delete_event(event_id, deleted_by=principal.email)
