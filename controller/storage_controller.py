import logging
from fastapi import APIRouter, Depends, Path, status
from model.api import ClearNamespaceResponse, StatsResponse, VisitStatusResponse
from service.storage_service import CrawlStorage
from util.constants import InternalURIs, MAX_RESOURCE_ID
from util.enums import ErrorMessage
from util.errors import AppError, ConnectivityError, LimitReachedError, MalformedStateError
from controller.controller_dependencies import get_crawl_storage

logger = logging.getLogger(__name__)

storage_router = APIRouter()


def _to_app_error(e: Exception) -> AppError:
    info = (
        ErrorMessage.MALFORMED_STATE
        if isinstance(e, MalformedStateError)
        else ErrorMessage.STORE_UNAVAILABLE
    )
    return AppError(info.value.message, info.value.http_status)


@storage_router.get(
    InternalURIs.STATS,
    response_model=StatsResponse,
    status_code=status.HTTP_200_OK,
)
async def get_stats(
    storage: CrawlStorage = Depends(get_crawl_storage),
) -> StatsResponse:
    try:
        size = await storage.queue_size()
    except ConnectivityError as e:
        logger.error("api.stats.failed err=%s", e)
        raise _to_app_error(e)
    return StatsResponse(
        prefix=storage.config.prefix,
        queueSize=size,
        visitLimit=storage.config.visit_limit,
        visitExpiresSeconds=storage.config.expires_seconds,
    )


@storage_router.get(InternalURIs.VISIT_STATUS, response_model=VisitStatusResponse)
async def get_visit_status(
    request_id: int = Path(..., ge=0, le=MAX_RESOURCE_ID),
    storage: CrawlStorage = Depends(get_crawl_storage),
) -> VisitStatusResponse:
    try:
        count = await storage.visits.visit_count(request_id)
        limit_reached = await storage.is_visited(request_id)
    except LimitReachedError as e:
        count, limit_reached = e.count, e.limit_reached
    except (ConnectivityError, MalformedStateError) as e:
        logger.error("api.visit_status.failed id=%d err=%s", request_id, e)
        raise _to_app_error(e)
    return VisitStatusResponse(
        requestId=request_id, count=count, limitReached=limit_reached
    )


@storage_router.delete(InternalURIs.NAMESPACE, response_model=ClearNamespaceResponse)
async def clear_namespace(
    storage: CrawlStorage = Depends(get_crawl_storage),
) -> ClearNamespaceResponse:
    try:
        deleted = await storage.clear()
    except ConnectivityError as e:
        logger.error("api.clear.failed err=%s", e)
        raise _to_app_error(e)
    logger.warning("api.clear prefix=%s deleted=%d", storage.config.prefix, deleted)
    return ClearNamespaceResponse(ok=True, deleted=deleted)
