"""
Authentication endpoints.

All routes here are public.  Registration and login answer with a
bearer token plus the minimal user projection ``{token, userId,
email}``; the password reset answers with a confirmation message only.
"""

from fastapi import APIRouter, Depends, status

from sparplan_api.app.api.deps import get_user_service
from sparplan_api.app.schemas.user import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
)
from sparplan_api.app.services.user_service import AuthResult, UserService

router = APIRouter()


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, user_id=result.user.id, email=result.user.email)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    users: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Register a new user and log them in.

    Returns 400 for a missing email or a password shorter than six
    characters and 409 if the email is already registered (compared
    case-insensitively).
    """
    result = await users.register(body.email, body.password)
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    users: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Exchange email and password for a bearer token.

    Unknown emails and wrong passwords both produce the same 401.
    """
    result = await users.login(body.email, body.password)
    return _auth_response(result)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Set a new password for a registered email.

    Placeholder policy without email verification; 404 if the email is
    unknown.  Existing tokens stay valid until they expire.
    """
    await users.reset_password(body.email, body.new_password)
    return MessageResponse(message="Password changed successfully")
