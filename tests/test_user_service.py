import asyncio
import sqlite3
import time

import pytest

from sparplan_api.app.core.db import get_connection
from sparplan_api.app.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from sparplan_api.app.services.user_service import normalize_email


def test_normalize_email():
    assert normalize_email("  Foo@Bar.DE ") == "foo@bar.de"
    assert normalize_email(None) == ""


def test_register_stores_hash_not_password(user_service, db_path):
    result = asyncio.run(user_service.register("user1@example.com", "password123"))

    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT email, password, created_at FROM users WHERE id = ?", (result.user.id,)).fetchone()
    finally:
        conn.close()
    assert row["email"] == "user1@example.com"
    assert row["password"] != "password123"
    assert row["created_at"] is not None


def test_register_conflict_on_existing_email(user_service):
    asyncio.run(user_service.register("user1@example.com", "password123"))

    with pytest.raises(ConflictError):
        asyncio.run(user_service.register("User1@Example.com", "password123"))


def test_unique_constraint_violation_maps_to_conflict(user_service, db_path, hasher):
    # Simulate a concurrent registration that inserts the same email after
    # the existence check but before our insert.
    original_hash = hasher.hash

    def hash_and_race(password):
        conn = get_connection(db_path)
        try:
            conn.execute("INSERT INTO users (email, password) VALUES (?, ?)", ("race@example.com", "x"))
            conn.commit()
        finally:
            conn.close()
        return original_hash(password)

    hasher.hash = hash_and_race

    with pytest.raises(ConflictError):
        asyncio.run(user_service.register("race@example.com", "password123"))


@pytest.mark.parametrize(
    "email,password",
    [(None, "password123"), ("", "password123"), ("user1@example.com", None), ("user1@example.com", "short")],
)
def test_register_validation(user_service, email, password):
    with pytest.raises(ValidationError):
        asyncio.run(user_service.register(email, password))


def test_login_unknown_email_and_wrong_password_share_message(user_service):
    asyncio.run(user_service.register("user1@example.com", "password123"))

    with pytest.raises(UnauthorizedError) as unknown:
        asyncio.run(user_service.login("nobody@example.com", "password123"))
    with pytest.raises(UnauthorizedError) as wrong:
        asyncio.run(user_service.login("user1@example.com", "password999"))

    assert unknown.value.message == wrong.value.message


def test_login_issues_token_for_user(user_service, token_service):
    registered = asyncio.run(user_service.register("user1@example.com", "password123"))

    result = asyncio.run(user_service.login(" USER1@example.com", "password123"))

    assert result.user.id == registered.user.id
    assert token_service.identity_of(result.token) == registered.user.id


def test_reset_password_unknown_email(user_service):
    with pytest.raises(NotFoundError):
        asyncio.run(user_service.reset_password("nobody@example.com", "newpassword"))


def test_email_uniqueness_enforced_by_schema(db_path):
    conn = get_connection(db_path)
    try:
        conn.execute("INSERT INTO users (email, password) VALUES ('dup@example.com', 'x')")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO users (email, password) VALUES ('dup@example.com', 'y')")
    finally:
        conn.close()


def _finish_order(operation):
    """Run ``operation`` next to a short timer and return which finished first."""

    async def scenario():
        finished = []

        async def run_operation():
            await operation()
            finished.append("operation")

        async def timer():
            await asyncio.sleep(0.05)
            finished.append("timer")

        await asyncio.gather(run_operation(), timer())
        return finished

    return asyncio.run(scenario())


def test_password_hashing_runs_off_the_event_loop(user_service, hasher):
    original_hash = hasher.hash

    def slow_hash(password):
        time.sleep(0.3)
        return original_hash(password)

    hasher.hash = slow_hash

    order = _finish_order(lambda: user_service.register("user1@example.com", "password123"))

    assert order == ["timer", "operation"]


def test_password_verification_runs_off_the_event_loop(user_service, hasher):
    asyncio.run(user_service.register("user1@example.com", "password123"))
    original_verify = hasher.verify

    def slow_verify(password, hashed):
        time.sleep(0.3)
        return original_verify(password, hashed)

    hasher.verify = slow_verify

    order = _finish_order(lambda: user_service.login("user1@example.com", "password123"))

    assert order == ["timer", "operation"]
