"""
Application package.

The project is organised into logical pieces: ``core`` (configuration,
database, security, errors, logging), ``schemas`` (request bodies and
response projections), ``services`` (business logic per domain) and
``api`` (routers).  The application itself is built by
``main.create_app`` rather than at import time, so importing this
package does not require ``DATABASE_URL`` to be set.
"""
