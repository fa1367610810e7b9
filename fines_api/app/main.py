"""
Main entrypoint for the Fines API.

This module assembles the FastAPI application: logging, exception
handlers and routers.  ``create_app`` builds and configures the app,
which is instantiated at module import time as ``app``::

    uvicorn fines_api.app.main:app --reload
"""

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import register_exception_handlers
from .core.logging_config import setup_logging


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.include_router(v1_router)
    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file and the fines table when missing.
        init_db()

    return app


app = create_app()
