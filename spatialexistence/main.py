from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spatialexistence.api import (
    admin_router,
    collection_router,
    events_router,
    health_router,
    tokens_router,
)
from spatialexistence.config import settings
from spatialexistence.db.database import async_session_factory, init_db
from spatialexistence.db.operations import load_engine
from spatialexistence.models.failure import KnownError
from spatialexistence.services.lifecycle import install_engine


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    async with async_session_factory() as session:
        install_engine(await load_engine(session))
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("spatialexistence"),
    lifespan=lifespan,
)

app.include_router(admin_router)
app.include_router(collection_router)
app.include_router(events_router)
app.include_router(health_router)
app.include_router(tokens_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Return rejected operations as classified failures."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )
