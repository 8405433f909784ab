import time
from contextlib import contextmanager
from typing import Any, Iterator
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "storage.clear", prefix="crawl"):
          ...
    Emits one INFO "<name>.done ms=<int> key=val ..." on success,
    or one WARNING "<name>.failed ..." when the block raises.
    """
    t0 = time.perf_counter()
    suffix = "".join(f" {k}={v}" for k, v in kv.items())
    try:
        yield
    except Exception:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        logger.warning("%s.failed ms=%d%s", name, dt_ms, suffix)
        raise
    dt_ms = int((time.perf_counter() - t0) * 1000)
    logger.info("%s.done ms=%d%s", name, dt_ms, suffix)
