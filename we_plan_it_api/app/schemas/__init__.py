"""
Pydantic schema definitions for API payloads.

Each domain (auth, users, events, tasks, plans) defines its own
models for request bodies and for the projections returned to
clients.  Projections are enumerated once here so that sensitive
columns such as the password hash can never leak through an ad hoc
field list.
"""
