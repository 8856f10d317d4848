"""
Database models package
"""

from .event import Event
from .booking import Booking

__all__ = ["Event", "Booking"]
