from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from sparplan_api.app.core.config import Settings
from sparplan_api.app.core.db import init_db
from sparplan_api.app.core.security import PasswordHasher, TokenService
from sparplan_api.app.main import create_app
from sparplan_api.app.services.sparplan_service import SparplanService
from sparplan_api.app.services.user_service import UserService


TEST_SECRET = "test-secret-key-with-enough-length-for-hs256-signing"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        secret_key=TEST_SECRET,
        database_url=str(tmp_path / "sparplan-test.db"),
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture
def db_path(settings) -> str:
    init_db(settings.database_url)
    return settings.database_url


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_service(db_path, hasher, token_service) -> UserService:
    return UserService(db_path, hasher, token_service)


@pytest.fixture
def sparplan_service(db_path) -> SparplanService:
    return SparplanService(db_path)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def register(client) -> Callable[..., Dict[str, str]]:
    """Register a user through the API and return ``{token, userId, email, headers}``."""

    def _register(email: str, password: str = "password123") -> Dict[str, str]:
        response = client.post("/api/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _register
