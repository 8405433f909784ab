from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class KeyKind(str, Enum):
    """
    Registry of persisted entity kinds. Every stored key is
    `<prefix>:<kind>[:<discriminator>]`; a new kind needs a new letter here
    and is then picked up by namespace clears automatically.
    """

    VISIT = "r"
    COOKIE = "c"
    QUEUE = "q"

    @property
    def has_discriminator(self) -> bool:
        return self is not KeyKind.QUEUE


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    STORE_UNAVAILABLE = ErrorInfo("Store Unavailable", status.HTTP_502_BAD_GATEWAY)
    MALFORMED_STATE = ErrorInfo(
        "Malformed Stored State", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
