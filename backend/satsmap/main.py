import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from . import __version__
from .core.config import settings
from .core.exceptions import NotFoundError
from .api import locations, sync_status
from .services.cache import ResponseCache
from .services.location_store import LocationStore
from .services.scheduler import APSchedulerTaskScheduler, start_scheduler, stop_scheduler
from .services.sync import LocationSync

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the tables exist, then start the hourly sync
    store = LocationStore()
    store.init()

    app.state.response_cache = ResponseCache(settings.RESPONSE_CACHE_SECONDS)
    app.state.location_sync = LocationSync(
        store,
        task_scheduler=APSchedulerTaskScheduler(),
        response_cache=app.state.response_cache,
    )
    start_scheduler(app.state.location_sync)
    yield
    # Shutdown: Stop background scheduler
    stop_scheduler()


app = FastAPI(
    title=settings.APP_NAME,
    description="Map of places that accept bitcoin, merged from OpenStreetMap and btcmap.org",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


# Include routers
app.include_router(locations.router, prefix="/api", tags=["Locations"])
app.include_router(sync_status.router, prefix="/api", tags=["Sync Status"])


# Health check endpoint (no store access)
@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def run():
    """Serve the API with uvicorn on HOST:PORT"""
    import uvicorn

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
