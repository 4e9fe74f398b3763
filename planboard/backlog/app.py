from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.routing import APIRouter
from loguru import logger

from planboard.backlog.log import setup_logging
from planboard.backlog.settings import PlanboardSettings, get_settings
from planboard.backlog.store.base import KeyValueStore
from planboard.backlog.store.local import LocalKeyValueStore
from planboard.backlog.store.memory import MemoryKeyValueStore

DEGRADED_HEADER = "X-Planboard-Degraded"


def create_store(settings: PlanboardSettings) -> KeyValueStore:
    """Create the storage backend based on configuration."""
    if settings.storage == "memory":
        return MemoryKeyValueStore()
    return LocalKeyValueStore(settings.data_root, prefix=settings.data_prefix)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)

    logger.info("Planboard starting (host={}, port={})", settings.host, settings.port)
    prefix_info = f", prefix={settings.data_prefix}" if settings.data_prefix else ""
    logger.info("Data root: {} (storage={}{})", settings.data_root, settings.storage, prefix_info)
    if settings.storage == "memory":
        logger.warning("PLANBOARD_STORAGE=memory -- nothing will survive a restart")

    _app.state.store = create_store(settings)

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Planboard shutting down")


app = FastAPI(title="Planboard", lifespan=lifespan)
app.state.store = None


@app.middleware("http")
async def flag_degraded_storage(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Mark responses whose changes could only be kept in memory."""
    request.state.managers = []
    response = await call_next(request)
    if any(m.persistence_degraded for m in request.state.managers):
        response.headers[DEGRADED_HEADER] = "1"
    return response


# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from planboard.backlog.routers.todos import router as todos_router  # noqa: E402
from planboard.backlog.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(workspaces_router)
api.include_router(todos_router)

app.include_router(api)
