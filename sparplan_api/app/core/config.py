"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for every field except
the signing secret: when ``SECRET_KEY`` is not set a random secret is
generated per process, which means issued tokens do not survive a
restart.  In a production deployment always set ``SECRET_KEY``.

Settings are not read through a module-level singleton.  The
application factory receives a ``Settings`` instance (or builds one
with ``Settings()``) and passes the relevant values to the components
that need them.
"""

import os
import secrets
from dataclasses import dataclass, field
from typing import List, Optional


DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173,"
    "https://nickweber651.github.io,"
    "https://etf-sparplaner-fronted.onrender.com,"
    "https://etf-sparplaner-fronted-fi2c.onrender.com"
)


def _env_secret_key() -> str:
    return os.getenv("SECRET_KEY", "")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "ETF Sparplan API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Symmetric secret used to sign access tokens.  Must never be logged.
    secret_key: str = field(default_factory=_env_secret_key, repr=False)
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Work factor for bcrypt.  Each increment doubles the hashing cost.
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by ``core.db.get_database_path``.
    database_url: str = os.getenv("DATABASE_URL", "sparplan.db")

    # Comma-separated list of frontend origins allowed by CORS.
    cors_origins: str = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)

    # Set in __post_init__ when no secret was configured.
    secret_key_generated: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self.secret_key:
            self.secret_key = secrets.token_urlsafe(48)
            self.secret_key_generated = True

    @property
    def allowed_origins(self) -> List[str]:
        """Return ``cors_origins`` split into a list, ignoring blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
