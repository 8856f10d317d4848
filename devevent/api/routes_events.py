"""
Event API routes
"""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from devevent.core.config import settings
from devevent.core.db import Database, get_database, get_db
from devevent.core.errors import DomainError
from devevent.schemas.event import EventUpdate
from devevent.services.event_service import EventService
from devevent.services.image_service import ImageUploader, get_uploader
from devevent.services.repositories import Repositories
from devevent.utils.lists import parse_json_list
from devevent.utils.responses import error_response, message_response

logger = logging.getLogger(__name__)

router = APIRouter()

# Multipart fields handled separately from the plain text fields
SPECIAL_FIELDS = {"image", "tags", "agenda"}

@router.get("")
async def list_events(repos: Repositories = Depends(get_db)):
    """List all events, newest first"""
    try:
        events = EventService.list_events(repos)
    except Exception as e:
        logger.exception("GET /api/events failed")
        return error_response(message="Event Fetch Failed", error=str(e), status_code=500)

    return message_response(
        "Events fetched successfully",
        events=[event.to_json() for event in events]
    )

@router.post("")
async def create_event(
    request: Request,
    repos: Repositories = Depends(get_db),
    uploader: ImageUploader = Depends(get_uploader)
):
    """Create an event from a multipart form with an image file"""
    try:
        form = await request.form()

        image = form.get("image")
        if not isinstance(image, UploadFile) or not image.filename:
            return error_response(message="Image file is required", status_code=400)

        raw_tags, raw_agenda = form.get("tags"), form.get("agenda")
        if not isinstance(raw_tags, str) or not isinstance(raw_agenda, str):
            return error_response(message="Invalid JSON format data", status_code=400)
        try:
            tags = parse_json_list(raw_tags)
            agenda = parse_json_list(raw_agenda)
        except ValueError:
            return error_response(message="Invalid JSON format data", status_code=400)

        fields = {
            name: value for name, value in form.items()
            if name not in SPECIAL_FIELDS and isinstance(value, str)
        }
        fields["tags"] = tags
        fields["agenda"] = agenda

        image_data = await image.read()
        EventService.check_image(image_data, image.content_type, settings.MAX_UPLOAD_SIZE)

        event = await EventService.create_event(
            repos=repos,
            fields=fields,
            image_data=image_data,
            filename=image.filename,
            uploader=uploader
        )
    except DomainError:
        raise
    except Exception as e:
        logger.exception("POST /api/events failed")
        return error_response(message="Event creation failed", error=str(e), status_code=500)

    return message_response("Event created successfully", status_code=201, event=event.to_json())

@router.get("/{slug}")
async def get_event(slug: str, repos: Repositories = Depends(get_db)):
    """Fetch event details by slug"""
    try:
        event = EventService.get_event_by_slug(repos, slug)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("GET /api/events/%s failed", slug)
        return error_response(message="Failed to retrieve event", error=str(e), status_code=500)

    return message_response("Event retrieved successfully", data=event.to_json())

@router.patch("/{slug}")
async def update_event(slug: str, payload: EventUpdate, repos: Repositories = Depends(get_db)):
    """Update event fields; the slug follows the title"""
    try:
        event = EventService.update_event(repos, slug, payload.model_dump(exclude_unset=True))
    except DomainError:
        raise
    except Exception as e:
        logger.exception("PATCH /api/events/%s failed", slug)
        return error_response(message="Event update failed", error=str(e), status_code=500)

    return message_response("Event updated successfully", data=event.to_json())

@router.get("/{slug}/similar")
async def similar_events(slug: str, database: Database = Depends(get_database)):
    """Events sharing at least one tag; empty on any failure, store outages included"""
    events = []
    try:
        async with database.session() as repos:
            events = EventService.get_similar_events_by_slug(repos, slug.strip().lower())
    except Exception:
        logger.exception("GET /api/events/%s/similar failed", slug)
    return message_response(
        "Similar events fetched successfully",
        events=[event.to_json() for event in events]
    )
