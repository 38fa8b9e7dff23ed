"""
Top-level package for the We Plan It API.

All functionality lives in the ``app`` subpackage; build the ASGI
application with ``we_plan_it_api.app.main.create_app``.
"""

__all__ = []
