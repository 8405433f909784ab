import logging
from typing import Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from repository.namespaces import NamespaceManager
from util.errors import ConnectivityError, MalformedStateError, StorageError
from util.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class CookieRepository:
    """
    Opaque cookie blob per host, no TTL, overwritten wholesale on each set.

    store()/load() raise StorageError subclasses. set_cookies()/get_cookies()
    serve callers that have no error channel: they are the only methods that
    discard errors, and every discard is logged. A get_cookies() result of ""
    therefore means either "never set" or "read failed".

    The injected lock serializes writes against reads within this process.
    Writers in other processes still race; the last SET wins.
    """

    def __init__(
        self,
        client: Redis,
        namespace: NamespaceManager,
        lock: Optional[ReadWriteLock] = None,
    ) -> None:
        self._client = client
        self._ns = namespace
        self._lock = lock or ReadWriteLock()

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    async def store(self, host: str, cookies: str) -> None:
        key = self._ns.key_for_cookie(host)
        try:
            blob = cookies.encode("utf-8")
        except UnicodeEncodeError as e:
            raise MalformedStateError(f"cookie blob for {key} is not encodable as utf-8") from e
        async with self._lock.write():
            try:
                await self._client.set(key, blob)
            except RedisError as e:
                raise ConnectivityError(f"cookie write failed for {key}: {e}") from e

    async def load(self, host: str) -> str:
        key = self._ns.key_for_cookie(host)
        async with self._lock.read():
            try:
                raw = await self._client.get(key)
            except RedisError as e:
                raise ConnectivityError(f"cookie read failed for {key}: {e}") from e
        if raw is None:
            return ""
        if isinstance(raw, str):
            return raw
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedStateError(f"cookie blob {key} is not utf-8") from e

    async def set_cookies(self, host: str, cookies: str) -> None:
        try:
            await self.store(host, cookies)
        except StorageError as e:
            logger.error(
                "cookies.set.failed host=%s err_type=%s err=%s",
                host,
                type(e).__name__,
                e,
            )

    async def get_cookies(self, host: str) -> str:
        try:
            return await self.load(host)
        except StorageError as e:
            logger.error(
                "cookies.get.failed host=%s err_type=%s err=%s",
                host,
                type(e).__name__,
                e,
            )
            return ""
