"""
Main entrypoint for the Sparplan API.

This module assembles the FastAPI application.  ``create_app`` takes an
explicit ``Settings`` instance, builds the security components from it
and wires middleware, error handlers and routes.  The module-level
``app`` uses settings from the environment, so the service can be run
with::

    uvicorn sparplan_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import router as api_router
from .core.config import Settings
from .core.db import get_database_path, init_db
from .core.errors import install_exception_handlers
from .core.logging_config import setup_logging
from .core.middleware import AuthenticationMiddleware
from .core.security import PasswordHasher, TokenService


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to ``Settings()``, which reads
        the environment.

    Returns
    -------
    FastAPI
        A configured application.  The database schema is created or
        migrated when the application starts up.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level, settings.log_file)

    if settings.secret_key_generated:
        logger.warning("SECRET_KEY is not set; using a random key, tokens will not survive a restart")

    db_path = get_database_path(settings.database_url)
    token_service = TokenService(
        settings.secret_key,
        algorithm=settings.algorithm,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_db(db_path)
        logger.info("Database ready at %s", db_path)
        yield

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.db_path = db_path
    app.state.token_service = token_service
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    install_exception_handlers(app)

    # Last added is outermost: CORS wraps authentication
    app.add_middleware(AuthenticationMiddleware, token_service=token_service)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
