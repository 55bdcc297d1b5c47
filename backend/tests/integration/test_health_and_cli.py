"""Integration tests for the health endpoint and the ``flask auth`` commands."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from justping.infra.sql.sql_token_blacklist import SQLTokenBlacklist


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"
    assert "X-Request-ID" in resp.headers


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"


def test_purge_blacklist_command(app, db):
    store = SQLTokenBlacklist()
    now = datetime.now(UTC)
    store.add("expired-token", now - timedelta(minutes=1))
    store.add("live-token", now + timedelta(hours=1))

    result = app.test_cli_runner().invoke(args=["auth", "purge-blacklist"])

    assert result.exit_code == 0, result.output
    assert "Removed 1 expired blacklist entries." in result.output
    assert store.contains("live-token") is True


def test_init_db_command(app, db):
    result = app.test_cli_runner().invoke(args=["auth", "init-db"])
    assert result.exit_code == 0, result.output
    assert "Schema ready." in result.output
