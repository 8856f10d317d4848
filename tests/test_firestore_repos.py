"""
Tests for the Firestore repositories against an in-memory client
"""

import copy

import pytest

from conftest import event_fields
from devevent.services.booking_service import BookingService
from devevent.services.event_service import EventService
from devevent.services.repositories import (
    FS_IN_LIMIT,
    FirestoreBookingRepo,
    FirestoreEventRepo,
    Repositories,
)


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, store, doc_id):
        self.store = store
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self.store.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self.store:
            self.store[self.id].update(copy.deepcopy(data))
        else:
            self.store[self.id] = copy.deepcopy(data)


class FakeQuery:
    """Supports the filters the repositories issue: ==, array_contains_any"""

    def __init__(self, collection, filters=(), order=None, limit=None):
        self.collection = collection
        self.filters = list(filters)
        self.order = order
        self._limit = limit

    def where(self, field, op, value):
        if op == "array_contains_any":
            assert len(value) <= FS_IN_LIMIT
            self.collection.any_queries.append(list(value))
        return FakeQuery(self.collection, self.filters + [(field, op, value)], self.order, self._limit)

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self.collection, self.filters, (field, direction), self._limit)

    def limit(self, count):
        return FakeQuery(self.collection, self.filters, self.order, count)

    def _matches(self, data):
        for field, op, value in self.filters:
            if op == "==" and data.get(field) != value:
                return False
            if op == "array_contains_any" and not set(data.get(field) or []) & set(value):
                return False
        return True

    def get(self):
        docs = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self.collection.docs.items()
            if self._matches(data)
        ]
        if self.order:
            field, direction = self.order
            docs.sort(key=lambda doc: doc.to_dict()[field], reverse=direction == "DESCENDING")
        if self._limit is not None:
            docs = docs[:self._limit]
        return docs


class FakeCollection(FakeQuery):
    def __init__(self):
        self.docs = {}
        self.any_queries = []
        super().__init__(self)

    def document(self, doc_id):
        return FakeDocument(self.docs, doc_id)


class FakeFirestore:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def fs():
    return FakeFirestore()


@pytest.fixture
def fs_repos(fs):
    return Repositories(events=FirestoreEventRepo(fs), bookings=FirestoreBookingRepo(fs))


def save(repos, **overrides):
    return EventService.save_event(repos, event_fields(**overrides))


def test_insert_and_lookup(fs, fs_repos):
    event = save(fs_repos)

    assert fs_repos.events.get_by_slug("react-summit-2024").id == event.id
    assert fs_repos.events.get_by_id(event.id).tags == ["react", "frontend"]
    assert fs_repos.events.exists(event.id)
    assert not fs_repos.events.exists("0123456789abcdef0123456789abcdef")
    assert "id" not in fs.collection("events").docs[event.id]


def test_list_events_newest_first(fs_repos):
    first = save(fs_repos, title="Systems Days")
    second = save(fs_repos, title="Java One")

    assert [event.id for event in fs_repos.events.list_events()] == [second.id, first.id]


def test_slug_collision_gets_id_suffix(fs_repos):
    first = save(fs_repos)
    second = save(fs_repos)

    assert first.slug == "react-summit-2024"
    assert second.slug == f"react-summit-2024-{second.id}"
    assert fs_repos.events.slug_taken("react-summit-2024", exclude_id=second.id)
    assert not fs_repos.events.slug_taken("react-summit-2024", exclude_id=first.id)


def test_update_merges_and_keeps_created_at(fs, fs_repos):
    event = save(fs_repos)

    updated = EventService.update_event(fs_repos, event.slug, {"venue": "RAI Amsterdam"})

    stored = fs.collection("events").docs[event.id]
    assert updated.slug == event.slug
    assert stored["venue"] == "RAI Amsterdam"
    assert stored["created_at"] == event.created_at
    assert fs_repos.events.get_by_id(event.id).created_at == event.created_at


def test_update_title_moves_slug(fs_repos):
    event = save(fs_repos)

    updated = EventService.update_event(fs_repos, event.slug, {"title": "React Summit Online"})

    assert updated.slug == "react-summit-online"
    assert fs_repos.events.get_by_slug("react-summit-2024") is None


def test_similar_events_match_sql_rules(fs_repos):
    source = save(fs_repos, title="Systems Days", tags=["go", "rust"])
    both = save(fs_repos, title="Cloud Native Rust", tags=["rust", "go"])
    one = save(fs_repos, title="Gophercon", tags=["go"])
    save(fs_repos, title="Java One", tags=["java"])

    similar = EventService.get_similar_events_by_slug(fs_repos, source.slug)

    assert sorted(event.id for event in similar) == sorted([both.id, one.id])


def test_find_sharing_tags_chunks_and_deduplicates(fs, fs_repos):
    tags = [f"tag-{n}" for n in range(FS_IN_LIMIT + 5)]
    source = save(fs_repos, title="Everything Conf", tags=tags)
    # Matches a tag from each chunk but must come back once
    spanning = save(fs_repos, title="Span Conf", tags=["tag-0", f"tag-{FS_IN_LIMIT + 1}"])

    similar = fs_repos.events.find_sharing_tags(source.tags, exclude_id=source.id)

    assert [event.id for event in similar] == [spanning.id]
    queries = fs.collection("events").any_queries
    assert [len(chunk) for chunk in queries] == [FS_IN_LIMIT, 5]


def test_find_sharing_tags_without_tags(fs, fs_repos):
    assert fs_repos.events.find_sharing_tags([], exclude_id="x") == []
    assert fs.collection("events").any_queries == []


def test_bookings_counted_per_event(fs_repos):
    first = save(fs_repos, title="Systems Days")
    second = save(fs_repos, title="Java One")

    for email in ("a@example.com", "b@example.com"):
        assert BookingService.create_booking(fs_repos, event_id=first.id, email=email).success
    BookingService.create_booking(fs_repos, event_id=second.id, email="c@example.com")

    assert fs_repos.bookings.count_for_event(first.id) == 2
    assert fs_repos.bookings.count_for_event(second.id) == 1
    assert fs_repos.bookings.count_for_event("0123456789abcdef0123456789abcdef") == 0


def test_legacy_string_tags_are_read_as_lists(fs, fs_repos):
    event = save(fs_repos)
    fs.collection("events").docs[event.id]["tags"] = '["react", "frontend"]'

    assert fs_repos.events.get_by_id(event.id).tags == ["react", "frontend"]
