"""
Endpoint subpackage.

Each module in this package defines an APIRouter for one domain
(auth, events, tasks, plans) plus the index/health routes.  The
routers are aggregated in ``api/router.py``.
"""
