import re
from fnmatch import fnmatchcase
from typing import Dict, Optional, Set, Union

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError

from model.storage import StorageConfig
from repository.namespaces import NamespaceManager
from service.storage_service import CrawlStorage

Value = Union[bytes, Set[bytes]]

# what Redis string2ll accepts for INCR
_REDIS_INT = re.compile(rb"0|-?[1-9][0-9]*")


def _b(v) -> bytes:
    if isinstance(v, bytes):
        return v
    return str(v).encode("utf-8")


class FakeRedis:
    """
    In-memory stand-in for redis.asyncio.Redis covering the commands the
    repositories send. Time only moves when a test bumps `now`.
    Replies are bytes, like a client built with decode_responses=False.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.data: Dict[bytes, Value] = {}
        self.expiry: Dict[bytes, float] = {}
        self.fail_on: Set[str] = set()
        self.closed = False

    def _check(self, command: str) -> None:
        if command in self.fail_on:
            raise RedisConnectionError(f"{command} failed: connection refused")

    def _live(self, key) -> Optional[Value]:
        k = _b(key)
        deadline = self.expiry.get(k)
        if deadline is not None and deadline <= self.now:
            self.data.pop(k, None)
            self.expiry.pop(k, None)
        return self.data.get(k)

    def ttl_of(self, key) -> Optional[float]:
        deadline = self.expiry.get(_b(key))
        return None if deadline is None else deadline - self.now

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def aclose(self) -> None:
        self.closed = True

    async def incr(self, key) -> int:
        self._check("incr")
        current = self._live(key)
        if isinstance(current, set):
            raise ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        current = current or b"0"
        if not _REDIS_INT.fullmatch(current) or not -(2**63) <= int(current) < 2**63 - 1:
            raise ResponseError("value is not an integer or out of range")
        n = int(current) + 1
        self.data[_b(key)] = _b(n)
        return n

    async def expire(self, key, seconds) -> bool:
        self._check("expire")
        if self._live(key) is None:
            return False
        self.expiry[_b(key)] = self.now + int(seconds)
        return True

    async def get(self, key) -> Optional[bytes]:
        self._check("get")
        current = self._live(key)
        if isinstance(current, set):
            raise ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return current

    async def set(self, key, value) -> bool:
        self._check("set")
        self.data[_b(key)] = _b(value)
        self.expiry.pop(_b(key), None)
        return True

    async def sadd(self, key, *members) -> int:
        self._check("sadd")
        current = self._live(key)
        if current is None:
            current = set()
            self.data[_b(key)] = current
        before = len(current)
        current.update(_b(m) for m in members)
        return len(current) - before

    async def spop(self, key) -> Optional[bytes]:
        self._check("spop")
        current = self._live(key)
        if not current:
            return None
        member = current.pop()
        if not current:
            self.data.pop(_b(key), None)
        return member

    async def scard(self, key) -> int:
        self._check("scard")
        current = self._live(key)
        return len(current) if current else 0

    async def scan_iter(self, match=None):
        self._check("scan")
        for k in list(self.data):
            if self._live(k) is None:
                continue
            if match is None or fnmatchcase(k.decode("utf-8"), match):
                yield k

    async def delete(self, *keys) -> int:
        self._check("delete")
        if not keys:
            raise ResponseError("wrong number of arguments for 'del' command")
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                self.data.pop(_b(key), None)
                self.expiry.pop(_b(key), None)
                removed += 1
        return removed


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def storage_config():
    return StorageConfig(prefix="crawl", expires_seconds=10, visit_limit=5)


@pytest.fixture
def namespace(storage_config):
    return NamespaceManager(storage_config.prefix)


@pytest.fixture
def storage(storage_config, fake_redis):
    return CrawlStorage(storage_config, client=fake_redis)
