from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool


class StatsResponse(BaseModel):
    prefix: str
    queueSize: int
    visitLimit: int
    visitExpiresSeconds: int


class VisitStatusResponse(BaseModel):
    requestId: int
    count: int
    limitReached: bool


class ClearNamespaceResponse(BaseModel):
    ok: bool
    deleted: int
