"""
Pydantic models for user data and the authentication flows.

Request bodies keep every field optional on purpose: presence and
length rules are checked by ``UserService`` so that a missing email and
a too short password produce the same ``{"error": ...}`` shape as the
other business errors.  The password hash never appears in any of these
models.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class RegisterRequest(CamelModel):
    """Body of ``POST /api/auth/register``."""

    email: Optional[str] = Field(None, examples=["user1@example.com"])
    password: Optional[str] = Field(None, examples=["password123"])


class LoginRequest(CamelModel):
    """Body of ``POST /api/auth/login``."""

    email: Optional[str] = Field(None, examples=["user1@example.com"])
    password: Optional[str] = Field(None, examples=["password123"])


class ResetPasswordRequest(CamelModel):
    """Body of ``POST /api/auth/reset-password``."""

    email: Optional[str] = Field(None, examples=["user1@example.com"])
    new_password: Optional[str] = Field(None, examples=["newpassword456"])


class UserRead(CamelModel):
    """Minimal user projection."""

    id: int
    email: str
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    """Token plus the user it was issued for."""

    token: str
    user_id: int
    email: str


class MessageResponse(CamelModel):
    message: str
