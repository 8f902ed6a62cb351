"""
Application package for the Sparplan API.

The code is split by concern: ``core`` holds configuration, logging,
persistence, security primitives and error handling; ``services``
contains the business logic for users and savings plans; ``schemas``
defines the request and response models; and ``api`` wires everything
to HTTP routes.

The application instance is created in ``main`` and can be served with
``uvicorn sparplan_api.app.main:app``.
"""
