"""
Booking-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from .common import CamelModel

class BookingRequest(CamelModel):
    """Booking submission; both fields are validated by the booking service"""
    event_id: str
    email: str

class BookingRecord(CamelModel):
    """Persisted booking"""
    id: str
    event_id: str
    email: str
    created_at: datetime
    updated_at: datetime

class BookingResult(BaseModel):
    """Outcome of a booking attempt"""
    success: bool
    booking: Optional[dict] = None
    error: Optional[str] = None
    reason: Optional[str] = None
