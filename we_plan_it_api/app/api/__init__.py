"""
HTTP layer.

``router.py`` aggregates the domain routers defined in ``endpoints``
under the ``/api`` prefix.
"""
