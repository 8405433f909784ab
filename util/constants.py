from typing import Final


class InternalURIs:
    HEALTH = "/healthz"
    API = "/api"
    V1 = API + "/v1"
    STATS = V1 + "/stats"
    VISIT_STATUS = V1 + "/visits/{request_id}"
    NAMESPACE = V1 + "/namespace"


# Resource identifiers are unsigned 64-bit request fingerprints.
MAX_RESOURCE_ID: Final[int] = 2**64 - 1
