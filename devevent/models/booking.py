"""
Booking model
"""

from sqlalchemy import Column, String, DateTime

from devevent.core.db import Base
from devevent.models.event import utcnow

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True)
    # Checked against the events table at write time, not by a foreign key
    event_id = Column(String(32), nullable=False, index=True)
    email = Column(String(320), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
