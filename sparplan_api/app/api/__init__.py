"""
API package.

The top-level ``router`` in ``api.router`` aggregates the domain
routers defined in ``api.endpoints``.  It is mounted under ``/api`` by
the application factory.
"""
