"""
Booking service: validates and persists event bookings
"""

import logging
import re
from datetime import datetime, timezone

from email_validator import EmailNotValidError, validate_email

from devevent.schemas.booking import BookingRecord, BookingResult
from devevent.services.repositories import Repositories
from devevent.utils.ids import is_valid_id, new_id

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\Z"
)

INVALID_EMAIL = "invalid_email"
INVALID_EVENT_ID = "invalid_event_id"
EVENT_NOT_FOUND = "event_not_found"
BOOKING_FAILED = "booking_failed"

STATUS_BY_REASON = {
    INVALID_EMAIL: 400,
    INVALID_EVENT_ID: 400,
    EVENT_NOT_FOUND: 404,
    BOOKING_FAILED: 500,
}


def is_valid_email(email: str) -> bool:
    """Pattern check, then email-validator for the domain (a TLD is required)"""
    if not EMAIL_PATTERN.match(email or ""):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class BookingService:
    """Service for creating bookings"""

    @staticmethod
    def create_booking(repos: Repositories, event_id: str, email: str) -> BookingResult:
        """Book ``email`` onto an event.

        Never raises: every failure comes back as an unsuccessful result with
        a ``reason`` code.
        """
        email = (email or "").strip()
        if not is_valid_email(email):
            return BookingResult(success=False, error="Invalid email format", reason=INVALID_EMAIL)

        event_id = (event_id or "").strip().lower()
        if not is_valid_id(event_id):
            return BookingResult(success=False, error="Invalid event ID", reason=INVALID_EVENT_ID)

        try:
            # Re-checked at write time; the form may point at a stale event
            if not repos.events.exists(event_id):
                return BookingResult(
                    success=False,
                    error=f"Event with ID {event_id} does not exist",
                    reason=EVENT_NOT_FOUND,
                )

            now = datetime.now(timezone.utc)
            booking = repos.bookings.insert(BookingRecord(
                id=new_id(),
                event_id=event_id,
                email=email.lower(),
                created_at=now,
                updated_at=now,
            ))
        except Exception as e:
            logger.exception("Error creating booking for event %s", event_id)
            return BookingResult(success=False, error=str(e) or "Failed to create booking", reason=BOOKING_FAILED)

        logger.info("booking_created event_id=%s booking_id=%s", event_id, booking.id)
        return BookingResult(success=True, booking=booking.to_json())
