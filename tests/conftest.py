"""Shared fixtures: in-memory SQLite, a scripted LLM and an in-process Redis list store."""

import json
from collections import defaultdict

import pytest

from goalmap.agents.llm.base import LLMClient
from goalmap.db.session import close_db, init_db, make_engine, make_session_factory

USER_ID = "5f0c6d1e-8f6b-4a57-9c0e-3f2a1b4c5d6e"
OTHER_USER_ID = "0b7d9a62-2c41-4e8a-b1f3-7a6c5e4d3b21"


def make_weeks(count: int = 12) -> list[dict]:
    return [{"week": i, "topics": [f"topic {i}a", f"topic {i}b"]} for i in range(1, count + 1)]


def roadmap_json(level: str = "beginner", weeks: list | None = None) -> str:
    return json.dumps({"level": level, "weeks": make_weeks() if weeks is None else weeks})


class ScriptedLLM(LLMClient):
    """Returns queued replies in order; exceptions in the script are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[dict] = []

    def generate_text(self, *, messages, temperature=0.2):
        self.calls.append({"messages": messages, "temperature": temperature})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeRedis:
    """Just the list commands the job runner uses."""

    def __init__(self):
        self.lists: dict[str, list[str]] = defaultdict(list)

    def lpush(self, key, *values):
        for v in values:
            self.lists[key].insert(0, v)
        return len(self.lists[key])

    def brpoplpush(self, src, dst, timeout=0):
        if not self.lists[src]:
            if timeout == 0:
                raise AssertionError("BRPOPLPUSH with timeout=0 on an empty list blocks forever")
            # an empty list stays empty for the whole wait in a single-threaded test
            return None
        value = self.lists[src].pop()
        self.lists[dst].insert(0, value)
        return value

    def lrem(self, key, count, value):
        removed = 0
        items = self.lists[key]
        while value in items and (count == 0 or removed < count):
            items.remove(value)
            removed += 1
        return removed

    def lrange(self, key, start, end):
        items = self.lists[key]
        return items[start:] if end == -1 else items[start:end + 1]

    def llen(self, key):
        return len(self.lists[key])

    def close(self):
        pass


@pytest.fixture
def engine():
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    close_db(engine)


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()
