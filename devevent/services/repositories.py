"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).

Both backends return the same schema objects, and every list-valued field
passes through ``coerce_string_list`` on the way out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from firebase_admin import firestore
from sqlalchemy import create_engine, func
from sqlalchemy.orm import Session, sessionmaker

from devevent.core.config import Settings
from devevent.core.db import Base
from devevent.models import Booking, Event
from devevent.schemas.booking import BookingRecord
from devevent.schemas.event import EventRecord
from devevent.services.firebase_client import open_firestore_client
from devevent.utils.lists import coerce_string_list

EVENT_FIELDS = (
    "id", "title", "slug", "description", "overview", "image", "venue",
    "location", "date", "time", "mode", "audience", "agenda", "organizer",
    "tags", "created_at", "updated_at",
)

# Firestore caps the value list of an array-contains-any filter
FS_IN_LIMIT = 30


def event_from_mapping(data: Dict[str, Any]) -> EventRecord:
    data = dict(data)
    data["agenda"] = coerce_string_list(data.get("agenda"))
    data["tags"] = coerce_string_list(data.get("tags"))
    return EventRecord.model_validate(data)


# -------- Interfaces --------

class EventRepo(ABC):
    """Persistence operations for events"""

    @abstractmethod
    def list_events(self) -> List[EventRecord]:
        """Return all events, newest first."""

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[EventRecord]:
        ...

    @abstractmethod
    def get_by_id(self, event_id: str) -> Optional[EventRecord]:
        ...

    def exists(self, event_id: str) -> bool:
        return self.get_by_id(event_id) is not None

    @abstractmethod
    def slug_taken(self, slug: str, exclude_id: str) -> bool:
        """Whether an event other than ``exclude_id`` already owns ``slug``."""

    @abstractmethod
    def insert(self, record: EventRecord) -> EventRecord:
        ...

    @abstractmethod
    def update(self, record: EventRecord) -> EventRecord:
        ...

    @abstractmethod
    def find_sharing_tags(self, tags: List[str], exclude_id: str) -> List[EventRecord]:
        """Events other than ``exclude_id`` with at least one tag in ``tags``."""


class BookingRepo(ABC):
    """Persistence operations for bookings"""

    @abstractmethod
    def insert(self, record: BookingRecord) -> BookingRecord:
        ...

    @abstractmethod
    def count_for_event(self, event_id: str) -> int:
        ...


@dataclass
class Repositories:
    events: EventRepo
    bookings: BookingRepo


# -------- SQLAlchemy backend --------

class SqlEventRepo(EventRepo):
    def __init__(self, db: Session):
        self.db = db

    def list_events(self) -> List[EventRecord]:
        rows = self.db.query(Event).order_by(Event.created_at.desc()).all()
        return [self._to_record(row) for row in rows]

    def get_by_slug(self, slug: str) -> Optional[EventRecord]:
        row = self.db.query(Event).filter(Event.slug == slug).first()
        return self._to_record(row) if row else None

    def get_by_id(self, event_id: str) -> Optional[EventRecord]:
        row = self.db.get(Event, event_id)
        return self._to_record(row) if row else None

    def slug_taken(self, slug: str, exclude_id: str) -> bool:
        return self.db.query(Event.id).filter(Event.slug == slug, Event.id != exclude_id).first() is not None

    def insert(self, record: EventRecord) -> EventRecord:
        row = Event(**record.model_dump(include=set(EVENT_FIELDS), mode="python"))
        row.mode = record.mode.value
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_record(row)

    def update(self, record: EventRecord) -> EventRecord:
        row = self.db.get(Event, record.id)
        if row is None:
            raise LookupError(f"Event {record.id} does not exist")
        for name in EVENT_FIELDS:
            if name in ("id", "created_at"):
                continue
            setattr(row, name, getattr(record, name))
        row.mode = record.mode.value
        row.agenda = list(record.agenda)
        row.tags = list(record.tags)
        self.db.commit()
        self.db.refresh(row)
        return self._to_record(row)

    def find_sharing_tags(self, tags: List[str], exclude_id: str) -> List[EventRecord]:
        wanted = set(tags)
        if not wanted:
            return []
        # JSON columns are not portably indexable, so the overlap test runs here
        rows = self.db.query(Event).filter(Event.id != exclude_id).all()
        return [
            self._to_record(row) for row in rows
            if wanted.intersection(coerce_string_list(row.tags))
        ]

    @staticmethod
    def _to_record(row: Event) -> EventRecord:
        return event_from_mapping({name: getattr(row, name) for name in EVENT_FIELDS})


class SqlBookingRepo(BookingRepo):
    def __init__(self, db: Session):
        self.db = db

    def insert(self, record: BookingRecord) -> BookingRecord:
        row = Booking(**record.model_dump(mode="python"))
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return BookingRecord.model_validate(row)

    def count_for_event(self, event_id: str) -> int:
        return self.db.query(func.count(Booking.id)).filter(Booking.event_id == event_id).scalar() or 0


class SqlBackend:
    """Engine plus session factory; opened once per process"""

    def __init__(self, database_url: str, **engine_kwargs):
        if database_url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        self.engine = create_engine(database_url, **engine_kwargs)
        Base.metadata.create_all(bind=self.engine)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @contextmanager
    def repositories(self) -> Iterator[Repositories]:
        db = self.session_factory()
        try:
            yield Repositories(events=SqlEventRepo(db), bookings=SqlBookingRepo(db))
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()


# -------- Firestore backend --------
# Shape: collection "events/{id}" and "bookings/{id}" documents

class FirestoreEventRepo(EventRepo):
    def __init__(self, fs):
        self.fs = fs

    @property
    def collection(self):
        return self.fs.collection("events")

    def list_events(self) -> List[EventRecord]:
        docs = self.collection.order_by("created_at", direction=firestore.Query.DESCENDING).get()
        return [self._to_record(doc) for doc in docs]

    def get_by_slug(self, slug: str) -> Optional[EventRecord]:
        docs = self.collection.where("slug", "==", slug).limit(1).get()
        return self._to_record(docs[0]) if docs else None

    def get_by_id(self, event_id: str) -> Optional[EventRecord]:
        doc = self.collection.document(event_id).get()
        return self._to_record(doc) if doc.exists else None

    def slug_taken(self, slug: str, exclude_id: str) -> bool:
        docs = self.collection.where("slug", "==", slug).get()
        return any(doc.id != exclude_id for doc in docs)

    def insert(self, record: EventRecord) -> EventRecord:
        self.collection.document(record.id).set(self._to_document(record))
        return record

    def update(self, record: EventRecord) -> EventRecord:
        data = self._to_document(record)
        data.pop("created_at", None)
        self.collection.document(record.id).set(data, merge=True)
        return record

    def find_sharing_tags(self, tags: List[str], exclude_id: str) -> List[EventRecord]:
        seen: Dict[str, EventRecord] = {}
        for start in range(0, len(tags), FS_IN_LIMIT):
            chunk = tags[start:start + FS_IN_LIMIT]
            for doc in self.collection.where("tags", "array_contains_any", chunk).get():
                if doc.id != exclude_id and doc.id not in seen:
                    seen[doc.id] = self._to_record(doc)
        return list(seen.values())

    @staticmethod
    def _to_document(record: EventRecord) -> Dict[str, Any]:
        data = record.model_dump(include=set(EVENT_FIELDS), mode="python")
        data.pop("id")
        data["mode"] = record.mode.value
        return data

    @staticmethod
    def _to_record(doc) -> EventRecord:
        data = doc.to_dict()
        data["id"] = doc.id
        return event_from_mapping(data)


class FirestoreBookingRepo(BookingRepo):
    def __init__(self, fs):
        self.fs = fs

    def insert(self, record: BookingRecord) -> BookingRecord:
        data = record.model_dump(mode="python")
        data.pop("id")
        self.fs.collection("bookings").document(record.id).set(data)
        return record

    def count_for_event(self, event_id: str) -> int:
        docs = self.fs.collection("bookings").where("event_id", "==", event_id).get()
        return len(docs)


class FirestoreBackend:
    def __init__(self, settings: Settings):
        self.fs = open_firestore_client(settings)

    @contextmanager
    def repositories(self) -> Iterator[Repositories]:
        yield Repositories(events=FirestoreEventRepo(self.fs), bookings=FirestoreBookingRepo(self.fs))


def open_backend(settings: Settings):
    """Open the backend selected by settings (blocking)"""
    if settings.USE_FIREBASE:
        return FirestoreBackend(settings)
    return SqlBackend(settings.DATABASE_URL)
