import logging
from typing import Optional
from urllib.parse import urlsplit
from redis.asyncio import Redis
from config.cache import build_redis, ping
from model.storage import StorageConfig
from repository.cookie_repository import CookieRepository
from repository.namespaces import NamespaceManager
from repository.request_queue_repository import RequestQueueRepository
from repository.visit_repository import VisitRepository
from util.locks import ReadWriteLock
from util.timing import timed

logger = logging.getLogger(__name__)


def _cookie_host(url: str) -> str:
    """Cookie jars are keyed by the URL's network location (host[:port])."""
    host = urlsplit(url).netloc
    return host or url


class CrawlStorage:
    """
    Redis-backed storage handed to the crawler: visit limiting, a shared cookie
    jar and a shared request queue, all scoped by one namespace prefix so
    several crawl tasks can share a database.

    Pass `client` to reuse an existing connection; otherwise init() builds one
    from the config and owns it until close().
    """

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        *,
        client: Optional[Redis] = None,
        cookie_lock: Optional[ReadWriteLock] = None,
    ) -> None:
        self._config = config or StorageConfig.from_settings()
        self._client = client
        self._owns_client = client is None
        self._cookie_lock = cookie_lock or ReadWriteLock()
        self._namespace = NamespaceManager(self._config.prefix)
        self._visits: Optional[VisitRepository] = None
        self._cookies: Optional[CookieRepository] = None
        self._queue: Optional[RequestQueueRepository] = None
        if client is not None:
            self._bind(client)

    def _bind(self, client: Redis) -> None:
        self._visits = VisitRepository(
            client,
            self._namespace,
            expires_seconds=self._config.expires_seconds,
            visit_limit=self._config.visit_limit,
        )
        self._cookies = CookieRepository(client, self._namespace, self._cookie_lock)
        self._queue = RequestQueueRepository(client, self._namespace)

    def _require(self) -> Redis:
        if self._client is None:
            raise RuntimeError("CrawlStorage.init() must be awaited before use")
        return self._client

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def namespace(self) -> NamespaceManager:
        return self._namespace

    @property
    def visits(self) -> VisitRepository:
        self._require()
        return self._visits  # type: ignore[return-value]

    @property
    def cookie_jar(self) -> CookieRepository:
        self._require()
        return self._cookies  # type: ignore[return-value]

    @property
    def queue(self) -> RequestQueueRepository:
        self._require()
        return self._queue  # type: ignore[return-value]

    # ---------------- Lifecycle ----------------

    async def init(self) -> None:
        """Connect (building a client if none was given) and PING the server."""
        if self._client is None:
            self._client = build_redis(self._config)
            self._bind(self._client)
        await ping(self._client)
        logger.info(
            "storage.init prefix=%s db=%d limit=%d expires=%ds",
            self._config.prefix,
            self._config.db,
            self._config.visit_limit,
            self._config.expires_seconds,
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def clear(self) -> int:
        """
        Remove every visit counter, cookie jar and the request queue for this
        namespace. Cookie writers from this process wait for the clear.
        """
        client = self._require()
        async with self._cookie_lock.write():
            with timed(logger, "storage.clear", prefix=self._config.prefix):
                return await self._namespace.clear_all(client)

    # ---------------- Visits ----------------

    async def visited(self, request_id: int) -> None:
        await self.visits.record_visit(request_id)

    async def is_visited(self, request_id: int) -> bool:
        return await self.visits.check_visited(request_id)

    # ---------------- Cookies ----------------

    async def set_cookies(self, url: str, cookies: str) -> None:
        await self.cookie_jar.set_cookies(_cookie_host(url), cookies)

    async def cookies(self, url: str) -> str:
        return await self.cookie_jar.get_cookies(_cookie_host(url))

    # ---------------- Queue ----------------

    async def add_request(self, payload: bytes) -> None:
        await self.queue.add_request(payload)

    async def get_request(self) -> bytes:
        return await self.queue.get_request()

    async def queue_size(self) -> int:
        return await self.queue.queue_size()
