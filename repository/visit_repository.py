import logging
import re
from typing import Final, Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError, ResponseError
from repository.namespaces import NamespaceManager
from util.errors import (
    ConnectivityError,
    ExpiryRefreshError,
    LimitReachedError,
    MalformedStateError,
)

logger = logging.getLogger(__name__)

# Integers exactly as Redis INCR accepts them: no sign, spaces or leading zeros
COUNTER_RE: Final[re.Pattern[bytes]] = re.compile(rb"0|-?[1-9][0-9]*")
INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1


class VisitRepository:
    """
    Flow:
    - record_visit: INCR the per-resource counter, then EXPIRE it so the window
      slides forward on every visit.
    - check_visited: compare the live count against the shared visit ceiling.
    - A counter that is not touched within the window expires in Redis and the
      next visit counts from 1 again.
    """

    def __init__(
        self,
        client: Redis,
        namespace: NamespaceManager,
        *,
        expires_seconds: int,
        visit_limit: int,
    ) -> None:
        self._client = client
        self._ns = namespace
        self._ttl = int(expires_seconds)
        self._limit = int(visit_limit)

    @property
    def visit_limit(self) -> int:
        return self._limit

    @property
    def expires_seconds(self) -> int:
        return self._ttl

    async def record_visit(self, resource_id: int) -> int:
        """
        Count one visit and refresh the expiry window. Returns the new count.

        Both commands are always sent. When only the EXPIRE fails an
        ExpiryRefreshError is raised: the count is stored but may never age
        out until the TTL is set again. When both fail the INCR error wins.
        """
        key = self._ns.key_for_visit(resource_id)
        first: Optional[Exception] = None
        count = 0

        try:
            count = int(await self._client.incr(key))
        except ResponseError as e:
            # INCR refuses values that are not integers
            logger.error("visit.record.malformed key=%s err=%s", key, e)
            first = MalformedStateError(f"visit counter {key} is not an integer: {e}")
            first.__cause__ = e
        except RedisError as e:
            logger.error("visit.record.incr_failed key=%s err=%s", key, e)
            first = ConnectivityError(f"visit increment failed for {key}: {e}")
            first.__cause__ = e

        try:
            await self._client.expire(key, self._ttl)
        except RedisError as e:
            logger.error("visit.record.expire_failed key=%s err=%s", key, e)
            if first is None:
                raise ExpiryRefreshError(
                    f"visit recorded but expiry refresh failed for {key}: {e}",
                    key=key,
                    count=count,
                ) from e

        if first is not None:
            raise first
        logger.debug("visit.recorded key=%s count=%d", key, count)
        return count

    async def refresh_expiry(self, resource_id: int) -> bool:
        """Re-apply the window TTL alone, e.g. after an ExpiryRefreshError."""
        key = self._ns.key_for_visit(resource_id)
        try:
            return bool(await self._client.expire(key, self._ttl))
        except RedisError as e:
            raise ConnectivityError(f"expiry refresh failed for {key}: {e}") from e

    async def visit_count(self, resource_id: int) -> int:
        key = self._ns.key_for_visit(resource_id)
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            logger.error("visit.get.failed key=%s err=%s", key, e)
            raise ConnectivityError(f"visit lookup failed for {key}: {e}") from e
        if raw is None:
            return 0
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        count = int(raw) if COUNTER_RE.fullmatch(raw) else None
        if count is None or not INT64_MIN <= count <= INT64_MAX:
            logger.error("visit.get.malformed key=%s raw=%r", key, raw)
            raise MalformedStateError(f"visit counter {key} is not an integer: {raw!r}")
        return count

    async def check_visited(self, resource_id: int) -> bool:
        """
        Return False while the resource is within its allowance
        (count <= visit_limit). Past the ceiling, raise LimitReachedError.
        """
        count = await self.visit_count(resource_id)
        if count <= self._limit:
            return False
        logger.info(
            "visit.limit_reached id=%d count=%d limit=%d",
            resource_id,
            count,
            self._limit,
        )
        raise LimitReachedError(resource_id, count=count, limit=self._limit)
