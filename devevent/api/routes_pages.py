"""
Server-rendered pages: catalog, event detail and booking form
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from devevent.core.config import settings
from devevent.core.db import get_db
from devevent.core.errors import DomainError
from devevent.schemas.booking import BookingResult
from devevent.services.booking_service import INVALID_EMAIL, INVALID_EVENT_ID, BookingService
from devevent.services.event_service import EventService
from devevent.services.repositories import Repositories

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()

@router.get("/", response_class=HTMLResponse)
async def home(request: Request, repos: Repositories = Depends(get_db)):
    """Catalog of featured events"""
    events, load_failed = [], False
    try:
        events = EventService.list_events(repos)
    except Exception:
        logger.exception("Failed to load featured events")
        load_failed = True

    return templates.TemplateResponse(request, "index.html", {
        "title": settings.APP_NAME,
        "events": events,
        "load_failed": load_failed,
    })

def render_not_found(request: Request):
    return templates.TemplateResponse(
        request, "not_found.html", {"title": "Event not found"}, status_code=404
    )

def render_event_page(
    request: Request,
    repos: Repositories,
    slug: str,
    booking: Optional[BookingResult] = None,
    status_code: int = 200
):
    try:
        event = EventService.get_event_by_slug(repos, slug)
    except DomainError:
        return render_not_found(request)

    similar = EventService.get_similar_events_by_slug(repos, event.slug)
    bookings = EventService.count_bookings(repos, event.id)

    return templates.TemplateResponse(request, "event_detail.html", {
        "title": event.title,
        "event": event,
        "similar_events": similar,
        "bookings": bookings,
        "booking": booking,
    }, status_code=status_code)

@router.get("/events/{slug}", response_class=HTMLResponse)
async def event_detail(request: Request, slug: str, repos: Repositories = Depends(get_db)):
    """Event detail page with similar events and the booking form"""
    return render_event_page(request, repos, slug)

@router.post("/events/{slug}/book", response_class=HTMLResponse)
async def book_event(
    request: Request,
    slug: str,
    event_id: str = Form(""),
    email: str = Form(""),
    repos: Repositories = Depends(get_db)
):
    """Book the event at ``slug`` and re-render its detail page"""
    try:
        event = EventService.get_event_by_slug(repos, slug)
    except DomainError:
        return render_not_found(request)

    submitted_id = event_id.strip().lower()
    if not email.strip():
        result = BookingResult(success=False, error="Email is required", reason=INVALID_EMAIL)
    elif submitted_id and submitted_id != event.id:
        result = BookingResult(
            success=False,
            error="Booking form does not match this event",
            reason=INVALID_EVENT_ID,
        )
    else:
        result = BookingService.create_booking(repos, event_id=event.id, email=email)
    status_code = 200 if result.success else 400
    return render_event_page(request, repos, event.slug, booking=result, status_code=status_code)
