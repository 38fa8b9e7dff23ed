"""
Main entrypoint for the We Plan It API.

``create_app`` assembles the FastAPI application: it loads the
settings, sets up logging, applies database migrations, installs the
CORS and request logging middleware, registers the error handlers and
mounts the routers under ``/api``.  Serve it with the factory flag::

    uvicorn we_plan_it_api.app.main:create_app --factory --reload

or through ``run.py`` at the repository root.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.endpoints import index
from .api.router import router as api_router
from .core.config import Settings
from .core.db import init_db
from .core.errors import register_exception_handlers
from .core.logging_config import RequestLoggingMiddleware, setup_logging


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  When omitted it is read from the
        environment, which raises ``RuntimeError`` if ``DATABASE_URL``
        is missing so the process never starts without a store.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or Settings.from_env()

    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file)
    if settings.uses_default_secret:
        logger.warning("TOKEN_SECRET is not set; tokens are signed with an insecure default secret")

    logger.info("Connecting to database...")
    init_db(settings.database_url)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {"message": "We Plan It API is running! Use /api for endpoints."}

    app.include_router(index.router, prefix="/api", tags=["index"])
    app.include_router(api_router, prefix="/api")

    logger.info("%s %s ready (%s)", settings.project_name, settings.api_version, settings.environment)
    return app
