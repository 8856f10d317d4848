"""
Event catalog service: listing, lookup, creation, update and similar events
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from devevent.core.errors import EventNotFoundError, EventValidationError, InvalidSlugError
from devevent.schemas.event import EventRecord
from devevent.services.image_service import ImageUploader
from devevent.services.repositories import Repositories
from devevent.services.slug_service import generate_unique_slug
from devevent.services.validation import validate_event
from devevent.utils.ids import new_id
from devevent.utils.lists import coerce_string_list

logger = logging.getLogger(__name__)


class EventService:
    """Service for event operations"""

    @staticmethod
    def normalize_slug_param(slug: Optional[str]) -> str:
        """Trim and lowercase a slug from a URL; empty slugs are rejected"""
        if not isinstance(slug, str) or not slug.strip():
            raise InvalidSlugError()
        return slug.strip().lower()

    @staticmethod
    def list_events(repos: Repositories) -> List[EventRecord]:
        return repos.events.list_events()

    @staticmethod
    def get_event_by_slug(repos: Repositories, slug: str) -> EventRecord:
        slug = EventService.normalize_slug_param(slug)
        event = repos.events.get_by_slug(slug)
        if event is None:
            raise EventNotFoundError(slug)
        return event

    @staticmethod
    def save_event(
        repos: Repositories,
        fields: Mapping[str, Any],
        existing: Optional[EventRecord] = None,
    ) -> EventRecord:
        """Validate, assign slug and timestamps, then insert or update.

        The slug is only regenerated when the title differs from ``existing``.
        """
        result = validate_event(fields)
        if not result.ok:
            raise EventValidationError(result.errors)
        values = result.values

        now = datetime.now(timezone.utc)
        event_id = existing.id if existing else new_id()

        if existing is not None and existing.title == values["title"]:
            slug = existing.slug
        else:
            slug = generate_unique_slug(values["title"], event_id, repos.events.slug_taken)

        record = EventRecord(
            id=event_id,
            slug=slug,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            **values,
        )

        if existing is None:
            saved = repos.events.insert(record)
            logger.info("Created event %s (%s)", saved.slug, saved.id)
        else:
            saved = repos.events.update(record)
            logger.info("Updated event %s (%s)", saved.slug, saved.id)
        return saved

    @staticmethod
    def check_image(data: bytes, content_type: Optional[str], max_size: int) -> None:
        if not data:
            raise EventValidationError({"image": "Image file is required"})
        if content_type and not content_type.startswith("image/"):
            raise EventValidationError({"image": "Uploaded file must be an image"})
        if len(data) > max_size:
            raise EventValidationError({"image": f"Image exceeds the {max_size} byte limit"})

    @staticmethod
    async def create_event(
        repos: Repositories,
        fields: Mapping[str, Any],
        image_data: bytes,
        filename: str,
        uploader: ImageUploader,
    ) -> EventRecord:
        """Create an event from submitted fields and an image file.

        Fields are validated before the upload. A failed upload persists
        nothing.
        """
        precheck = validate_event(fields, require_image=False)
        if not precheck.ok:
            raise EventValidationError(precheck.errors)

        image_url = await uploader.upload(image_data, filename)
        return EventService.save_event(repos, {**fields, "image": image_url})

    @staticmethod
    def update_event(repos: Repositories, slug: str, changes: Dict[str, Any]) -> EventRecord:
        existing = EventService.get_event_by_slug(repos, slug)
        merged = existing.model_dump()
        merged.update({name: value for name, value in changes.items() if value is not None})
        return EventService.save_event(repos, merged, existing=existing)

    @staticmethod
    def count_bookings(repos: Repositories, event_id: str) -> int:
        return repos.bookings.count_for_event(event_id)

    @staticmethod
    def get_similar_events_by_slug(repos: Repositories, slug: str) -> List[EventRecord]:
        """Events sharing at least one tag with the event at ``slug``.

        Any failure yields an empty list.
        """
        try:
            event = repos.events.get_by_slug(slug)
            if event is None:
                logger.warning("Event not found: %s", slug)
                return []

            tags = coerce_string_list(event.tags)
            logger.info("Finding similar events for %s with tags: %s", slug, tags)

            similar = repos.events.find_sharing_tags(tags, exclude_id=event.id)
            logger.info("Found %d similar events", len(similar))
            return similar
        except Exception:
            logger.exception("Error fetching similar events for %s", slug)
            return []
