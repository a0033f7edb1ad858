"""EventGate main application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventgate import __version__
from eventgate.api import router
from eventgate.auth.identity import JwtIdentityProvider, validate_auth_config
from eventgate.config import StoreBackend, settings
from eventgate.seed import seed_demo_data
from eventgate.store import build_store

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("eventgate")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting EventGate server...")
    logger.info(f"Environment: {settings.env.value}")

    # Validate identity configuration (fail fast if unusable)
    validate_auth_config(settings)
    app.state.identity = JwtIdentityProvider.from_settings(settings)

    # One store per process, shared by every request-scoped engine
    store = build_store(settings)
    if settings.store_backend == StoreBackend.SQL:
        await store.inner.create_schema()
        logger.info("Database schema ready")
    app.state.store = store

    if settings.seed_demo_data:
        if settings.store_backend == StoreBackend.SQL:
            logger.warning("Seeding demo data into the SQL store")
        await seed_demo_data(store)

    yield

    # Cleanup
    logger.info("Shutting down EventGate server...")
    await store.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="EventGate",
    description="Moderated community event listings with a public transparency log",
    version=__version__,
    lifespan=lifespan,
)

# Explicit allowlist, no wildcards with credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)

# Include API router
app.include_router(router)


def main():
    """Entry point for the application."""
    uvicorn.run(
        "eventgate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
