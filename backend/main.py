"""
Conatus - FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conatus import __version__
from conatus.core.config import settings
from conatus.core.exceptions import register_exception_handlers
from conatus.core.logging import RequestLoggingMiddleware, setup_logging
from conatus.api import automations, health


setup_logging(
    log_level="DEBUG" if settings.debug else settings.log_level,
    log_dir=settings.log_dir or None,
    json_logs=settings.log_json,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events."""
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(
        f"Condition limits: nesting={settings.condition_max_nesting_level}, "
        f"conditions={settings.condition_max_conditions}"
    )

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_name,
    description="Conditional logic and run gating for personal automations",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, *settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(
    automations.router, prefix=f"{settings.api_prefix}/automations", tags=["Automations"]
)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
