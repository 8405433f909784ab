from typing import Optional
from config.cache import close_redis, get_redis
from model.storage import StorageConfig
from service.storage_service import CrawlStorage

_storage: Optional[CrawlStorage] = None


async def get_crawl_storage() -> CrawlStorage:
    """Shared CrawlStorage over the process-wide Redis client."""
    global _storage
    if _storage is None:
        storage = CrawlStorage(StorageConfig.from_settings(), client=await get_redis())
        await storage.init()
        _storage = storage
    return _storage


async def close_crawl_storage() -> None:
    global _storage
    _storage = None
    await close_redis()
