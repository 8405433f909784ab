import logging
from typing import Dict, Final, List, Union
from redis.asyncio import Redis
from redis.exceptions import RedisError
from util.constants import MAX_RESOURCE_ID
from util.enums import KeyKind
from util.errors import ConnectivityError

SEP: Final[str] = ":"
WILDCARD: Final[str] = "*"
# SCAN MATCH glob syntax, plus the key separator
RESERVED_PREFIX_CHARS: Final[str] = SEP + "*?[]\\"

logger = logging.getLogger(__name__)


def check_prefix(prefix: str) -> str:
    """
    Reject prefixes that would bleed into other namespaces: a separator makes
    `a` a parent of `a:c`, glob characters break the clear patterns.
    """
    bad = sorted({ch for ch in prefix if ch in RESERVED_PREFIX_CHARS})
    if bad:
        raise ValueError(
            f"namespace prefix {prefix!r} must not contain {''.join(bad)!r}"
        )
    return prefix


class NamespaceManager:
    """
    Builds every key under one crawl-task prefix and clears them in bulk.

    Keys follow `<prefix>:<kind>:<discriminator>` where kind comes from the
    KeyKind registry (the queue kind has no discriminator). Key builders are
    pure; only clear_all touches Redis.
    """

    def __init__(self, prefix: str) -> None:
        self._prefix = check_prefix(prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key(self, kind: KeyKind, discriminator: str | None = None) -> str:
        if discriminator is None:
            return f"{self._prefix}{SEP}{kind.value}"
        return f"{self._prefix}{SEP}{kind.value}{SEP}{discriminator}"

    def key_for_visit(self, resource_id: int) -> str:
        if not 0 <= resource_id <= MAX_RESOURCE_ID:
            raise ValueError(f"resource id out of uint64 range: {resource_id}")
        return self._key(KeyKind.VISIT, str(resource_id))

    def key_for_cookie(self, host: str) -> str:
        return self._key(KeyKind.COOKIE, host)

    def key_for_queue(self) -> str:
        return self._key(KeyKind.QUEUE)

    def patterns(self) -> Dict[KeyKind, str]:
        """
        One match expression per registered kind: a wildcard for kinds keyed
        by a discriminator, the exact key otherwise.
        """
        return {
            kind: self._key(kind, WILDCARD) if kind.has_discriminator else self._key(kind)
            for kind in KeyKind
        }

    async def clear_all(self, client: Redis) -> int:
        """
        Delete every key of every registered kind under this prefix.

        Enumeration (SCAN) and deletion (DEL) are separate commands, so a key
        written between the two survives the clear. Returns the number of keys
        Redis reports as deleted.
        """
        keys: List[Union[bytes, str]] = []
        try:
            for kind, pattern in self.patterns().items():
                if kind.has_discriminator:
                    keys.extend([k async for k in client.scan_iter(match=pattern)])
                else:
                    keys.append(pattern)
            deleted = int(await client.delete(*keys))
        except RedisError as e:
            logger.error("namespace.clear.failed prefix=%s err=%s", self._prefix, e)
            raise ConnectivityError(f"Redis clear failed: {e}") from e
        logger.info("namespace.clear prefix=%s keys=%d deleted=%d", self._prefix, len(keys), deleted)
        return deleted
