"""
Event model
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, JSON

from devevent.core.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(Base):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(320), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False)
    venue = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)  # HH:mm
    mode = Column(String(16), nullable=False)
    audience = Column(String(255), nullable=False)
    agenda = Column(JSON, nullable=False, default=list)
    organizer = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
