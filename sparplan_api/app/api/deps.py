"""
FastAPI dependencies that build services from ``app.state``.

The application factory stores the database path, password hasher and
token service on ``app.state``; these helpers hand them to the service
classes for each request.
"""

from fastapi import Request

from sparplan_api.app.services.sparplan_service import SparplanService
from sparplan_api.app.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    state = request.app.state
    return UserService(state.db_path, state.password_hasher, state.token_service)


def get_sparplan_service(request: Request) -> SparplanService:
    return SparplanService(request.app.state.db_path)
