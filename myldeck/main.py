import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from myldeck.api import (
    decks_router,
    health_router,
    imports_router,
    validation_router,
)
from myldeck.config import settings
from myldeck.db.database import dispose_engine, init_db
from myldeck.models.failure import KnownError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    await init_db()
    yield
    await dispose_engine()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("myldeck"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Map known failures to a JSON body with their status code."""
    logger.info("Known failure (%s): %s", exc.kind.value, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_detail().model_dump(mode="json")},
    )


app.include_router(decks_router)
app.include_router(health_router)
app.include_router(imports_router)
app.include_router(validation_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
