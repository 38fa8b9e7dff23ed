"""Entry point for serving the We Plan It API.

Builds the application with ``create_app`` and serves it with Uvicorn.
Configuration is read from the environment (``DATABASE_URL`` is
required); host and port come from ``HOST`` and ``PORT``, defaulting
to ``0.0.0.0`` and ``5005``.

Usage:
    DATABASE_URL=./we_plan_it.db python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from we_plan_it_api.app.main import create_app


async def run_api() -> None:
    """Start the API server using Uvicorn."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5005"))
    config = Config(app=create_app(), host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass
