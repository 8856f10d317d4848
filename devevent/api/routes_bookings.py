"""
Booking API routes
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from devevent.core.db import get_db
from devevent.schemas.booking import BookingRequest
from devevent.services.booking_service import STATUS_BY_REASON, BookingService
from devevent.services.repositories import Repositories

router = APIRouter()

@router.post("")
async def create_booking(payload: BookingRequest, repos: Repositories = Depends(get_db)):
    """Book an email address onto an event"""
    result = BookingService.create_booking(repos, event_id=payload.event_id, email=payload.email)
    status_code = 201 if result.success else STATUS_BY_REASON.get(result.reason, 400)
    return JSONResponse(content=result.model_dump(exclude_none=True), status_code=status_code)
