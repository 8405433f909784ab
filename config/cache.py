import logging
from typing import Final, Optional, Tuple
from urllib.parse import urlsplit
from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError
from config.settings import settings
from model.storage import StorageConfig
from util.errors import ConnectivityError

logger = logging.getLogger(__name__)

DEFAULT_PORT: Final[int] = 6379

_client: Optional[Redis] = None


def split_address(address: str) -> Tuple[str, int]:
    """
    `host:port` to (host, port). IPv6 hosts take brackets when a port is
    given (`[::1]:6379`); a bare IPv6 literal means the default port.
    """
    if address.count(":") > 1 and not address.startswith("["):
        return address, DEFAULT_PORT
    parts = urlsplit("//" + address)
    return parts.hostname or address, parts.port or DEFAULT_PORT


def build_redis(config: StorageConfig) -> Redis:
    """
    Create (but do not connect) a client for `config`.
    A full REDIS_URL takes precedence over address/password/db.
    """
    if config.url:
        return from_url(
            config.url,
            decode_responses=False,  # repositories get raw bytes
            socket_keepalive=True,
            health_check_interval=30,
        )
    host, port = split_address(config.address)
    return Redis(
        host=host,
        port=port,
        password=config.password,
        db=config.db,
        decode_responses=False,
        socket_keepalive=True,
        health_check_interval=30,
    )


async def ping(client: Redis) -> None:
    try:
        await client.ping()
    except RedisError as e:
        logger.error("redis.ping.failed err=%s", e)
        raise ConnectivityError(f"Redis connection error: {e}") from e


async def get_redis() -> Redis:
    global _client
    if _client is None:
        client = build_redis(StorageConfig.from_settings(settings))
        # Fail fast on startup if Redis is unreachable.
        try:
            await ping(client)
        except ConnectivityError:
            await client.aclose()
            raise
        _client = client
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
