from typing import Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)


class StorageError(Exception):
    """Base for every failure raised by the crawl-state repositories."""


class ConnectivityError(StorageError):
    """Transport or connection failure talking to Redis. Never retried here."""


class ExpiryRefreshError(ConnectivityError):
    """
    The visit counter was incremented but its TTL could not be refreshed.
    Callers may retry the expiry alone; `count` is the recorded value.
    """

    def __init__(self, message: str, *, key: str, count: int) -> None:
        super().__init__(message)
        self.key = key
        self.count = count


class MalformedStateError(StorageError):
    """A stored value could not be interpreted (e.g. a non-integer counter)."""


class LimitReachedError(StorageError):
    """
    Raised by visit checks once a resource was visited more than the ceiling
    allows within the expiry window. It stands for the `(True, error)` result
    of the check, so `limit_reached` is always True.
    """

    limit_reached = True

    def __init__(self, resource_id: int, *, count: int, limit: int) -> None:
        super().__init__(
            f"Reached domain visit limit id={resource_id} count={count} limit={limit}"
        )
        self.resource_id = resource_id
        self.count = count
        self.limit = limit


class EmptyQueueError(StorageError):
    """No pending requests left in the queue. Expected, not a failure."""

    def __init__(self, key: Optional[str] = None) -> None:
        super().__init__(f"Request queue is empty key={key}" if key else "Request queue is empty")
        self.key = key
