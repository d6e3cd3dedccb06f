import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from po_router.core.config import get_settings
from po_router.db import session as db_session
from po_router.main import create_app


@pytest.fixture
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("ROUTING_API_KEY", "routing-secret")
    monkeypatch.setenv("ADMIN_API_KEY", "admin-secret")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000")
    monkeypatch.delenv("ROUTING_RULES_PATH", raising=False)
    monkeypatch.setattr(db_session, "engine", None)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def test_create_app_serves_health_with_rules_version(env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    rules_path = env / "rules.json"
    rules_path.write_text(json.dumps({"version": "7", "restricted_prefixes": ["10"]}), encoding="utf-8")
    monkeypatch.setenv("ROUTING_RULES_PATH", str(rules_path))

    client = TestClient(create_app())
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["rules_version"] == "7"


def test_create_app_fails_fast_on_missing_config(env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROUTING_API_KEY", "")

    with pytest.raises(RuntimeError):
        create_app()


def test_create_app_fails_fast_on_invalid_rules(env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    rules_path = env / "rules.json"
    rules_path.write_text("[]", encoding="utf-8")
    monkeypatch.setenv("ROUTING_RULES_PATH", str(rules_path))

    with pytest.raises(RuntimeError):
        create_app()
