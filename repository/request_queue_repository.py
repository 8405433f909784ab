import logging
from redis.asyncio import Redis
from redis.exceptions import RedisError
from repository.namespaces import NamespaceManager
from util.errors import ConnectivityError, EmptyQueueError

logger = logging.getLogger(__name__)


class RequestQueueRepository:
    """
    Pending fetch requests kept in one Redis SET per namespace.

    - No ordering: SPOP hands back an arbitrary member.
    - Byte-identical payloads collapse into one entry (SADD semantics), which
      gives cheap de-duplication of re-queued requests.
    """

    def __init__(self, client: Redis, namespace: NamespaceManager) -> None:
        self._client = client
        self._ns = namespace

    async def add_request(self, payload: bytes) -> bool:
        """Queue `payload`. Returns False when an identical entry was already queued."""
        key = self._ns.key_for_queue()
        try:
            added = int(await self._client.sadd(key, payload))
        except RedisError as e:
            logger.error("queue.add.failed key=%s err=%s", key, e)
            raise ConnectivityError(f"queue add failed for {key}: {e}") from e
        if not added:
            logger.debug("queue.add.duplicate key=%s bytes=%d", key, len(payload))
        return bool(added)

    async def get_request(self) -> bytes:
        key = self._ns.key_for_queue()
        try:
            raw = await self._client.spop(key)
        except RedisError as e:
            logger.error("queue.pop.failed key=%s err=%s", key, e)
            raise ConnectivityError(f"queue pop failed for {key}: {e}") from e
        if raw is None:
            raise EmptyQueueError(key)
        return raw if isinstance(raw, bytes) else str(raw).encode("utf-8")

    async def queue_size(self) -> int:
        key = self._ns.key_for_queue()
        try:
            return int(await self._client.scard(key))
        except RedisError as e:
            logger.error("queue.size.failed key=%s err=%s", key, e)
            raise ConnectivityError(f"queue size failed for {key}: {e}") from e
