"""FastAPI application factory for the enquiry scoring and transition API."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .middleware.cors import ALLOWED_ORIGINS
from .routes.health import router as health_router
from .routes.priority import router as priority_router
from .routes.statuses import router as statuses_router
from .routes.profiles import router as profiles_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Enquiry Engine API")
    try:
        from .services.evaluation import get_definition_store
        store = get_definition_store()
        logger.info(
            f"Definitions loaded: {len(store.active_tiers())} active priority score types, "
            f"{len(store.active_statuses())} active status types"
        )
    except Exception as e:
        logger.warning(f"Definition check: {e}")

    yield

    logger.info("Enquiry Engine API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Enquiry Engine API",
        description="Priority scoring and status transition checks for enquiries",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(priority_router)
    app.include_router(statuses_router)
    app.include_router(profiles_router)

    return app


# Module-level app instance for uvicorn
app = create_app()
