from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from config.settings import Settings, settings as default_settings
from repository.namespaces import check_prefix


class StorageConfig(BaseModel):
    """
    Construction-time configuration for a CrawlStorage handle.
    Frozen: the namespace and limits never change after init.
    """

    model_config = ConfigDict(frozen=True)

    address: str = "localhost:6379"
    password: Optional[str] = None
    db: int = Field(default=0, ge=0)
    url: Optional[str] = None
    prefix: str = "crawlstate"
    expires_seconds: int = Field(default=24 * 60 * 60, gt=0)
    visit_limit: int = Field(default=1, ge=0)

    @field_validator("prefix")
    @classmethod
    def _prefix_is_isolated(cls, v: str) -> str:
        return check_prefix(v)

    @classmethod
    def from_settings(cls, s: Settings = default_settings) -> "StorageConfig":
        return cls(
            address=s.REDIS_ADDRESS,
            password=s.REDIS_PASSWORD,
            db=s.REDIS_DB,
            url=s.REDIS_URL,
            prefix=s.STORAGE_PREFIX,
            expires_seconds=s.VISIT_EXPIRES_SECONDS,
            visit_limit=s.DOMAIN_VISIT_LIMIT,
        )
