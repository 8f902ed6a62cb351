from fastapi.testclient import TestClient

from sparplan_api.app.core.config import Settings
from sparplan_api.app.core.db import get_connection
from sparplan_api.app.main import create_app


PLAN = {"etfName": "MSCI World", "monthlyAmount": 100, "termYears": 10}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "UP"
    assert body["service"] == "etf-sparplaner-backend"
    assert "timestamp" in body


def test_etf_catalogue_is_public(client):
    response = client.get("/api/etfs")

    assert response.status_code == 200
    assert [etf["isin"] for etf in response.json()] == ["IE00B4L5Y983", "IE00B3RBWM25", "IE00BTJRMP35"]


def test_cors_preflight_for_allowed_origin(client):
    response = client.options(
        "/api/sparplaene",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_cors_rejects_unknown_origin(client):
    response = client.get("/api/health", headers={"Origin": "https://evil.example.com"})

    assert "access-control-allow-origin" not in response.headers


def test_startup_applies_migrations(client, settings):
    conn = get_connection(settings.database_url)
    try:
        tables = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        versions = [row["version"] for row in conn.execute("SELECT version FROM migrations ORDER BY version")]
    finally:
        conn.close()

    assert {"users", "sparplaene", "migrations"} <= tables
    assert versions == [1, 2]


def test_store_failure_is_internal_error_without_details(settings, register):
    headers = register("user1@example.com")["headers"]
    conn = get_connection(settings.database_url)
    try:
        conn.execute("DROP TABLE sparplaene")
        conn.commit()
    finally:
        conn.close()

    with TestClient(create_app(settings), raise_server_exceptions=False) as failing_client:
        response = failing_client.get("/api/sparplaene", headers=headers)
        created = failing_client.post("/api/sparplaene", json=PLAN, headers=headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert created.status_code == 500
    assert created.json() == {"error": "Internal server error"}


def test_settings_generate_secret_when_missing():
    settings = Settings(secret_key="")

    assert settings.secret_key_generated
    assert len(settings.secret_key) >= 32
    assert settings.secret_key not in repr(settings)


def test_allowed_origins_are_split():
    settings = Settings(secret_key="x" * 40, cors_origins="http://a.test, ,http://b.test")

    assert settings.allowed_origins == ["http://a.test", "http://b.test"]
