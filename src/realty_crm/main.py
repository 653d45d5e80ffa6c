"""FastAPI application entry point for the Realty CRM core."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from realty_crm import __version__
from realty_crm.api.deps import close_session, get_db_client, get_session_resolver
from realty_crm.api.routes import router
from realty_crm.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Resolve the session once at startup, release it at shutdown."""
    logger.info(f"Starting Realty CRM v{__version__}")
    settings = get_settings()
    logger.info(f"Debug mode: {settings.debug}, tenant time zone: {settings.tenant_timezone}")

    db = await get_db_client()
    await get_session_resolver(db)

    yield

    await close_session()
    logger.info("Shutting down Realty CRM")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Realty CRM",
        description="Tenant session resolution and dashboard aggregation",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "realty_crm.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
