import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")
    ALLOWED_ORIGIN: str = Field(
        default="http://localhost:3000", validation_alias="ALLOWED_ORIGIN"
    )

    # Redis connection. REDIS_URL wins over address/password/db when set.
    REDIS_URL: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    REDIS_ADDRESS: str = Field(default="localhost:6379", validation_alias="REDIS_ADDRESS")
    REDIS_PASSWORD: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    REDIS_DB: int = Field(default=0, ge=0, validation_alias="REDIS_DB")

    # Crawl state
    STORAGE_PREFIX: str = Field(default="crawlstate", validation_alias="STORAGE_PREFIX")
    VISIT_EXPIRES_SECONDS: int = Field(
        default=24 * 60 * 60, gt=0, validation_alias="VISIT_EXPIRES_SECONDS"
    )
    DOMAIN_VISIT_LIMIT: int = Field(
        default=1, ge=0, validation_alias="DOMAIN_VISIT_LIMIT"
    )

    # Logging knobs
    LOGGER_NAME: str = "crawl-state"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
