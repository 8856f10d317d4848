"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .booking import *

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "EventMode",
    "EventRecord",
    "EventUpdate",
    "BookingRequest",
    "BookingRecord",
    "BookingResult",
]
