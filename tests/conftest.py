"""Shared test fixtures and in-memory collaborators."""

import random

import pytest

from digest.models import Article, Interest, Room
from digest.providers.base import (
    ChatClient, HistoryStore, InterestStore, RoomStore, SavedArticleStore,
    SearchProvider, Summarizer,
)


def make_article(n, **kwargs) -> Article:
    defaults = {
        "title": f"Article {n}",
        "url": f"https://qiita.com/u/items/{n}",
        "stock_count": 100,
        "tags": ["Go"],
        "body": f"Body of article {n}",
    }
    defaults.update(kwargs)
    return Article(**defaults)


class FakeSearch(SearchProvider):
    """Answers from a {(query, page): result} table; result may be an exception."""

    name = "fake"

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def search(self, query):
        self.calls.append((query.query, query.page))
        result = self.responses.get((query.query, query.page), [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    def queries(self) -> list[str]:
        return [q for q, _ in self.calls]


class FakeHistory(HistoryStore):
    def __init__(self, seen=None, broken=None):
        self.seen = set(seen or [])
        self.broken = dict(broken or {})  # url -> exception
        self.lookups = []

    def exists(self, room_id, url):
        self.lookups.append((room_id, url))
        if url in self.broken:
            raise self.broken[url]
        return (room_id, url) in self.seen

    def record(self, room_id, url):
        self.seen.add((room_id, url))


class FakeInterests(InterestStore, RoomStore):
    def __init__(self, by_room=None):
        self.by_room = {room: list(items) for room, items in (by_room or {}).items()}
        self.deleted = []
        self.fail_delete = None

    def list_rooms(self):
        return [Room(room_id=r) for r in self.by_room]

    def interests(self, room_id):
        return list(self.by_room.get(room_id, []))

    def all_interests(self):
        return {room: list(items) for room, items in self.by_room.items()}

    def add(self, room_id, topic, priority):
        self.by_room.setdefault(room_id, []).append(Interest(room_id, topic, priority))

    def delete(self, room_id, topic):
        if self.fail_delete is not None:
            raise self.fail_delete
        self.deleted.append((room_id, topic))
        self.by_room[room_id] = [i for i in self.by_room.get(room_id, []) if i.topic != topic]


class FakeChat(ChatClient):
    def __init__(self, fail=None, messages=None, fail_after=0):
        self.posted = []
        self.fail = fail
        self.fail_after = fail_after
        self.messages = dict(messages or {})

    def post_message(self, room_id, body):
        if self.fail is not None and len(self.posted) >= self.fail_after:
            raise self.fail
        self.posted.append((room_id, body))
        return str(1000 + len(self.posted))

    def get_message(self, room_id, message_id):
        return self.messages[(room_id, message_id)]


class FakeSummarizer(Summarizer):
    name = "fake"

    def __init__(self, text="・要点1\n・要点2", fail=None):
        self.text = text
        self.fail = fail

    def summarize(self, article):
        if self.fail is not None:
            raise self.fail
        return self.text


class FakeSaved(SavedArticleStore):
    def __init__(self):
        self.saved = []

    def save(self, room_id, content):
        self.saved.append((room_id, content))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def history():
    return FakeHistory()


@pytest.fixture
def chat():
    return FakeChat()


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def sample_article():
    return make_article(
        1,
        title="Goで並行処理入門",
        tags=["Go", "goroutine"],
        body="# Intro\nGoroutines are cheap.",
    )


@pytest.fixture
def sample_item():
    """One element of a Qiita `/items` response."""
    return {
        "title": "Goで並行処理入門",
        "url": "https://qiita.com/alice/items/abc123",
        "created_at": "2024-05-01T10:00:00+09:00",
        "stocks_count": 120,
        "likes_count": 80,
        "tags": [{"name": "Go", "versions": []}, {"name": "goroutine", "versions": []}],
        "user": {"id": "alice", "name": "Alice"},
        "body": "# Intro\nGoroutines are cheap.",
    }
