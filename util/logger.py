import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional
from config.settings import Settings, settings as default_settings

# Optional: capture warnings.* into logging
logging.captureWarnings(True)

_INITED_FLAG = "_crawlstate_inited"


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Colorize a copy so file handlers still see the plain levelname
        lvl = record.levelname
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{self.COLORS.get(lvl, self.RESET)}{lvl}{self.RESET}"
        return super().format(colored)


def init_logger(s: Optional[Settings] = None) -> logging.Logger:
    """
    Idempotent logger init:
    - Always logs to stdout.
    - Writes to <LOG_DIR>/<LOG_FILE_NAME> only when LOG_TO_FILE is True,
      rotating by size (LOG_MAX_BYTES/LOG_BACKUP_COUNT).
    - Respects LOG_LEVEL.
    """
    s = s or default_settings
    root = logging.getLogger()
    if getattr(root, _INITED_FLAG, False):
        return logging.getLogger(s.LOGGER_NAME)

    level = getattr(logging, (s.LOG_LEVEL or "INFO").upper(), logging.INFO)
    root.setLevel(level)

    # Clear any default handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    text_fmt = "%(asctime)s %(levelname)s %(name)s - %(message)s"
    date_fmt = "%Y-%m-%dT%H:%M:%S%z"

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(ColoredFormatter(text_fmt, datefmt=date_fmt))
    root.addHandler(ch)

    if s.LOG_TO_FILE:
        os.makedirs(s.LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(s.LOG_DIR, s.LOG_FILE_NAME),
            maxBytes=s.LOG_MAX_BYTES,
            backupCount=s.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(text_fmt, datefmt=date_fmt))
        root.addHandler(fh)

    # Redis client chatter is only useful when debugging connections
    logging.getLogger("redis").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    setattr(root, _INITED_FLAG, True)
    logger = logging.getLogger(s.LOGGER_NAME)
    logger.debug("Logger initialized", extra={"component": "bootstrap"})
    return logger
