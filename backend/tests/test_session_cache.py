"""Session cache TTL logic and session store backends."""

import json
import time

import pytest

from clickid_service.services.session_cache import (
    SESSION_KEY,
    SESSION_TS_KEY,
    Session,
    get_cached_clickid,
    remember_clickid,
)
from clickid_service.services.session_store import (
    SESSION_KEY_PREFIX,
    MemorySessionStore,
    RedisSessionStore,
    is_valid_session_id,
    new_session_id,
)

TTL = 6 * 3600
NOW = 1_700_000_000


def test_cache_hit_within_ttl():
    session = Session(id="s", data={SESSION_KEY: "abc", SESSION_TS_KEY: NOW - TTL + 1})
    assert get_cached_clickid(session, NOW, TTL) == "abc"


def test_cache_expires_at_ttl():
    session = Session(id="s", data={SESSION_KEY: "abc", SESSION_TS_KEY: NOW - TTL})
    assert get_cached_clickid(session, NOW, TTL) is None


@pytest.mark.parametrize(
    "data",
    [
        {},
        {SESSION_KEY: "", SESSION_TS_KEY: NOW},
        {SESSION_KEY: "abc"},
        {SESSION_KEY: "abc", SESSION_TS_KEY: 0},
        {SESSION_KEY: "abc", SESSION_TS_KEY: "garbage"},
    ],
)
def test_cache_miss(data):
    assert get_cached_clickid(Session(id="s", data=data), NOW, TTL) is None


def test_remember_clickid_sets_both_keys():
    session = Session(id="s")
    remember_clickid(session, "xyz", NOW)
    assert session.data == {SESSION_KEY: "xyz", SESSION_TS_KEY: NOW}


def test_session_id_validation():
    assert is_valid_session_id(new_session_id())
    assert not is_valid_session_id(None)
    assert not is_valid_session_id("")
    assert not is_valid_session_id("short")
    assert not is_valid_session_id("x" * 30 + ";drop")


async def test_memory_store_roundtrip_and_delete():
    store = MemorySessionStore()
    await store.save("sid", {SESSION_KEY: "abc"}, ttl=60)

    assert await store.load("sid") == {SESSION_KEY: "abc"}
    assert await store.load("other") == {}

    await store.delete("sid")
    assert await store.load("sid") == {}


async def test_memory_store_expires_sessions(monkeypatch):
    store = MemorySessionStore()
    await store.save("sid", {SESSION_KEY: "abc"}, ttl=10)

    real_time = time.time()
    monkeypatch.setattr(time, "time", lambda: real_time + 11)

    assert await store.load("sid") == {}


async def test_memory_store_returns_copies():
    store = MemorySessionStore()
    await store.save("sid", {SESSION_KEY: "abc"}, ttl=60)

    loaded = await store.load("sid")
    loaded[SESSION_KEY] = "mutated"

    assert await store.load("sid") == {SESSION_KEY: "abc"}


class _FakeRedis:
    """Just enough of redis.asyncio.Redis for the store."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int] = {}
        self.closed = False

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, key):
        self.data.pop(key, None)
        return 1

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


async def test_redis_store_serialises_json_with_ttl():
    fake = _FakeRedis()
    store = RedisSessionStore(fake)

    await store.save("sid", {SESSION_KEY: "abc", SESSION_TS_KEY: NOW}, ttl=86400)

    key = SESSION_KEY_PREFIX + "sid"
    assert json.loads(fake.data[key]) == {SESSION_KEY: "abc", SESSION_TS_KEY: NOW}
    assert fake.expiry[key] == 86400
    assert await store.load("sid") == {SESSION_KEY: "abc", SESSION_TS_KEY: NOW}


async def test_redis_store_ignores_corrupt_payload():
    fake = _FakeRedis()
    fake.data[SESSION_KEY_PREFIX + "sid"] = "{not json"
    store = RedisSessionStore(fake)

    assert await store.load("sid") == {}


async def test_redis_store_delete_ping_close():
    fake = _FakeRedis()
    store = RedisSessionStore(fake)
    await store.save("sid", {"a": 1}, ttl=5)

    await store.delete("sid")
    assert await store.load("sid") == {}
    assert await store.ping() is True

    await store.close()
    assert fake.closed is True


async def test_memory_store_purges_expired_sessions_on_save(monkeypatch):
    store = MemorySessionStore()
    for i in range(1000):
        await store.save(f"sid-{i}", {SESSION_KEY: "abc"}, ttl=1)

    real_time = time.time()
    monkeypatch.setattr(time, "time", lambda: real_time + 10)
    await store.save("fresh", {SESSION_KEY: "new"}, ttl=60)

    assert list(store._sessions) == ["fresh"]
    assert await store.load("fresh") == {SESSION_KEY: "new"}
