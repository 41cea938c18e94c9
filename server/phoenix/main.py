"""
FastAPI application serving the ToS;DR public API from the Phoenix store.

Run with: uvicorn phoenix.main:app
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from phoenix import __version__
from phoenix.core.container import container
from phoenix.core.exceptions import CacheWriteFailed, RemoteFetchFailed, StoreUnavailable
from phoenix.core.health import get_health_status, set_startup_time
from phoenix.core.logging import configure_logging, get_logger
from phoenix.routers import api
from phoenix.routers.responses import ResponseCode, api_response

settings = container.settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting Phoenix API")

    await container.database().startup()
    await container.cache().startup()
    set_startup_time()

    logger.info("Services started successfully", cache_backend=container.cache().backend_name())
    yield

    await container.legacy().aclose()
    await container.cache().shutdown()
    await container.database().shutdown()
    logger.info("Services shutdown complete")


app = FastAPI(
    title="Phoenix API",
    version=__version__,
    description="Cached read access to ToS;DR services, documents, points and cases",
    lifespan=lifespan,
    default_response_class=ORJSONResponse
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error("Store unavailable", path=request.url.path, operation=exc.operation,
                 identifier=exc.identifier, error=str(exc))
    return api_response(ResponseCode.STORE_UNAVAILABLE, "Database unavailable", status_code=503)


@app.exception_handler(CacheWriteFailed)
async def cache_write_failed_handler(request: Request, exc: CacheWriteFailed):
    logger.error("Cache write failed", path=request.url.path, operation=exc.operation,
                 identifier=exc.identifier, cache_key=exc.key)
    return api_response(ResponseCode.CACHE_WRITE_FAILED, "Cache unavailable", status_code=503)


@app.exception_handler(RemoteFetchFailed)
async def remote_fetch_failed_handler(request: Request, exc: RemoteFetchFailed):
    logger.error("Remote fetch failed", path=request.url.path, operation=exc.operation,
                 identifier=exc.identifier, error=str(exc))
    return api_response(ResponseCode.REMOTE_FETCH_FAILED, str(exc), status_code=502)


app.include_router(api.router)


@app.get("/health")
async def health_check():
    """Database and cache probe."""
    status = await get_health_status(container.database(), container.cache())
    status["version"] = __version__
    return status


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Phoenix API", host=settings.host, port=settings.port, debug=settings.debug)
    uvicorn.run(
        "phoenix.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
