"""
Business logic for users: registration, login and password reset.

Emails are normalized (trimmed and lower-cased) before every lookup and
before storage, so uniqueness is case-insensitive.  The ``users.email``
UNIQUE constraint is the final authority on duplicates: an
``IntegrityError`` raised by a concurrent registration is reported as
the same conflict as the explicit existence check.

Login failures use a single message whether the email is unknown or
the password is wrong, so the endpoint cannot be used to probe for
registered addresses.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sparplan_api.app.core.db import get_connection
from sparplan_api.app.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from sparplan_api.app.core.security import BCRYPT_MAX_PASSWORD_BYTES, PasswordHasher, TokenService
from sparplan_api.app.schemas.user import UserRead


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: Optional[str]) -> str:
    """Trim and lower-case ``email``; ``None`` becomes an empty string."""
    return (email or "").strip().lower()


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful registration or login."""

    token: str
    user: UserRead


class UserService:
    """Credential store and authentication flows backed by the ``users`` table."""

    def __init__(self, db_path: str, hasher: PasswordHasher, token_service: TokenService) -> None:
        self.db_path = db_path
        self.hasher = hasher
        self.token_service = token_service

    async def register(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """Create a new user and issue a token for it.

        Raises ``ValidationError`` for a missing email or an invalid
        password and ``ConflictError`` if the normalized email is taken.
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError("Email is required")
        self._check_new_password(password)

        conn = get_connection(self.db_path)
        try:
            cursor = conn.cursor()
            existing = cursor.execute("SELECT id FROM users WHERE email = ?", (normalized,)).fetchone()
            if existing:
                logger.info("Registration rejected, email already registered: %s", normalized)
                raise ConflictError("Email is already registered")
            password_hash = await asyncio.to_thread(self.hasher.hash, password)
            created_at = datetime.now(timezone.utc)
            try:
                cursor.execute(
                    "INSERT INTO users (email, password, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    (normalized, password_hash, created_at.isoformat(), created_at.isoformat()),
                )
                conn.commit()
            except sqlite3.IntegrityError:
                # lost a race against a concurrent registration for the same email
                conn.rollback()
                logger.info("Registration rejected by unique constraint: %s", normalized)
                raise ConflictError("Email is already registered")
            user = UserRead(id=cursor.lastrowid, email=normalized, created_at=created_at)
        finally:
            conn.close()

        logger.info("Registered user %s (%s)", user.id, user.email)
        return AuthResult(token=self.token_service.issue(user), user=user)

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """Check credentials and issue a token.

        Raises ``ValidationError`` when a field is missing and
        ``UnauthorizedError`` when the credentials do not match.
        """
        normalized = normalize_email(email)
        if not normalized or password is None:
            raise ValidationError("Email and password are required")

        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, email, password, created_at FROM users WHERE email = ?",
                (normalized,),
            ).fetchone()
        finally:
            conn.close()

        if row is None or not await asyncio.to_thread(self.hasher.verify, password, row["password"]):
            logger.info("Failed login for %s", normalized)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user = self._row_to_user_read(row)
        logger.info("User %s logged in", user.id)
        return AuthResult(token=self.token_service.issue(user), user=user)

    async def reset_password(self, email: Optional[str], new_password: Optional[str]) -> None:
        """Replace the password of the user registered under ``email``.

        There is no proof of ownership of the address here; anyone who
        knows an email can reset its password.  This is a placeholder
        until a verified reset-token flow exists.  No token is issued.
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError("Email is required")
        self._check_new_password(new_password)
        password_hash = await asyncio.to_thread(self.hasher.hash, new_password)

        conn = get_connection(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET password = ?, updated_at = ? WHERE email = ?",
                (password_hash, datetime.now(timezone.utc).isoformat(), normalized),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("No user registered with this email")
            conn.commit()
        finally:
            conn.close()
        logger.info("Password reset for %s", normalized)

    @staticmethod
    def _check_new_password(password: Optional[str]) -> None:
        if password is None or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must not exceed {BCRYPT_MAX_PASSWORD_BYTES} bytes")

    @staticmethod
    def _row_to_user_read(row: sqlite3.Row) -> UserRead:
        return UserRead(
            id=row["id"],
            email=row["email"],
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
        )
