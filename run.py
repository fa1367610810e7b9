"""Entry point for the Fines API.

Serves ``fines_api.app.main:app`` with Uvicorn.  Host and port come
from ``API_HOST`` / ``API_PORT`` (defaults ``0.0.0.0`` and ``8000``);
the database and logging settings are described in
``fines_api/app/core/config.py``.

Usage:
    python run.py
"""
import logging

from uvicorn import Config, Server

from fines_api.app.core.config import settings
from fines_api.app.main import app


def main() -> None:
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Starting %s on %s:%s", settings.project_name, settings.host, settings.port)
    server.run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
