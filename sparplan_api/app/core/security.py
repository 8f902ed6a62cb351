"""
Security helpers for password hashing and JWT authentication.

``PasswordHasher`` wraps bcrypt: every hash gets its own random salt
and the work factor is configurable so tests can use a cheap one.

``TokenService`` issues and validates HS256-signed JSON Web Tokens via
PyJWT.  A token carries the user id as subject (``sub``), the user's
email, an issued-at (``iat``) and an expiry (``exp``) timestamp.
Validation is all-or-nothing: a malformed, tampered or expired token is
simply invalid, and callers cannot tell these cases apart.  The decoded
payload is exposed as the fixed-shape ``TokenClaims`` record rather than
a free-form dict.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import bcrypt
import jwt

from .errors import UnauthorizedError


logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way password hashing with bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash ``password`` with a freshly generated salt.

        The returned string embeds the algorithm, cost and salt, so it
        is all that needs to be stored.
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Return ``True`` if ``password`` matches the stored ``hashed`` value.

        A malformed stored hash yields ``False`` instead of an exception.
        """
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash could not be parsed")
            return False


class TokenSubject(Protocol):
    """Anything with an ``id`` and an ``email`` can be issued a token."""

    id: int
    email: str


@dataclass(frozen=True)
class TokenClaims:
    """Decoded payload of a valid access token."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issue and validate signed, time-limited access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=24),
    ) -> None:
        if not secret_key:
            raise ValueError("A signing secret is required")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def __repr__(self) -> str:
        return f"TokenService(algorithm={self.algorithm!r}, expires_delta={self.expires_delta!r})"

    def issue(self, user: TokenSubject) -> str:
        """Create a signed token for ``user``.

        Parameters
        ----------
        user : TokenSubject
            Object exposing ``id`` and ``email``.

        Returns
        -------
        str
            Compact JWT to be sent as ``Authorization: Bearer <token>``.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_delta).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[TokenClaims]:
        """Return the claims of ``token`` or ``None`` if it is not valid.

        The signature, expiry and presence of every claim are checked.
        Any failure is reported the same way.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
            email = payload["email"]
            if not isinstance(email, str):
                return None
            return TokenClaims(
                user_id=int(payload["sub"]),
                email=email,
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (jwt.PyJWTError, KeyError, TypeError, ValueError):
            return None

    def validate(self, token: str) -> bool:
        """Return ``True`` iff the signature verifies and the token has not expired."""
        return self.decode(token) is not None

    def identity_of(self, token: str) -> int:
        """Return the user id of a valid token.

        Raises ``UnauthorizedError`` when the token is not valid.
        """
        return self._require_claims(token).user_id

    def email_of(self, token: str) -> str:
        """Return the email of a valid token.

        Raises ``UnauthorizedError`` when the token is not valid.
        """
        return self._require_claims(token).email

    def _require_claims(self, token: str) -> TokenClaims:
        claims = self.decode(token)
        if claims is None:
            raise UnauthorizedError("Invalid or expired token")
        return claims
