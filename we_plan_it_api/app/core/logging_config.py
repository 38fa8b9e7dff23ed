"""
Logging configuration for the application.

``setup_logging`` configures the root logger through
``logging.basicConfig``: console output always, plus a UTF-8 file when
``LOG_FILE`` is set.  ``RequestLoggingMiddleware`` writes one line per
HTTP request (method, path, status and duration) to the
``we_plan_it_api.access`` logger.
"""

import logging
import time
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

access_logger = logging.getLogger("we_plan_it_api.access")


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger unless something already has.

    ``create_app`` and the CLI both call this; when handlers are
    already attached (a second app in the same process, or pytest's
    capture handlers) the existing configuration is kept.
    """
    if logging.getLogger().handlers:
        return
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(logfile, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
    )


class RequestLoggingMiddleware:
    """ASGI middleware logging each HTTP request once it has completed."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def send_with_status(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            access_logger.info(
                "%s %s %s %.1f ms", scope["method"], scope["path"], status_code, elapsed_ms
            )
