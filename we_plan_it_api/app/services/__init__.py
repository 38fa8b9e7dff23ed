"""
Service layer.

Each service encapsulates the business logic for one domain and talks
to the store through the ``sqlite3.Connection`` handed in by the
endpoint.  Expected failures are raised as ``core.errors.AppError``
subclasses; endpoints map everything else to a generic internal error.
"""
