import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from controller.controller_dependencies import close_crawl_storage, get_crawl_storage
from model.api import HealthResponse
from util.constants import InternalURIs
from util.logger import init_logger


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    logger = init_logger()
    try:
        print(f"{Color.GREEN}Initializing...{Color.RESET}")
        storage = await get_crawl_storage()
        logger.info("server.started prefix=%s", storage.config.prefix)
        print(f"{Color.BLUE}Server Started{Color.RESET}")
    except Exception as e:
        logger.error("server.start.failed err=%s", e)
        raise

    try:
        yield
    finally:
        try:
            await close_crawl_storage()
        except Exception as e:
            logger.error("server.redis.close_failed err=%s", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=False,
    allow_methods=["GET", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)


@app.get(InternalURIs.HEALTH, response_model=HealthResponse)
async def healthz() -> HealthResponse:
    return HealthResponse(ok=True)


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
