from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from po_router.core.config import Settings, get_settings
from po_router.db.models import Base
from po_router.db.session import build_engine
from po_router.orchestration.orchestrator import RoutingEngine
from po_router.routers.roster_router import build_roster_router
from po_router.routers.routing_router import build_routing_router
from po_router.services.roster_service import RosterService

ROUTING_KEY = {"X-API-KEY": "routing-secret"}
ADMIN_KEY = {"X-API-KEY": "admin-secret"}

ROSTER = [
    {"id": "a", "name": "Alice", "role": "Order Entry", "cards": 2, "totalPages": 30},
    {"id": "b", "name": "Ben", "role": "Order Entry", "cards": 1, "totalPages": 10},
    {"id": "m", "name": "Maureen", "role": "Keying", "cards": 0, "totalPages": 0},
]


def _client(tmp_path: Path) -> TestClient:
    engine = build_engine(f"sqlite:///{tmp_path / 'api.db'}")
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    service = RosterService(session_factory=session_factory, engine=RoutingEngine())

    app = FastAPI()
    app.include_router(build_routing_router(service))
    app.include_router(build_roster_router(service))
    app.dependency_overrides[get_settings] = lambda: Settings(
        database_url="sqlite://",
        routing_api_key="routing-secret",
        admin_api_key="admin-secret",
        allowed_origins_raw="http://localhost:3000",
    )
    return TestClient(app)


def test_route_restricted_order_end_to_end(tmp_path: Path) -> None:
    client = _client(tmp_path)
    assert client.put("/roster", json=ROSTER, headers=ADMIN_KEY).status_code == 200

    response = client.post(
        "/route",
        json={
            "poNumber": "4500012345",
            "pageCount": "2",
            "lineItems": [{"lineNumber": 1, "partNumber": "8804", "prefixes": ["59"], "quantity": "3"}],
        },
        headers=ROUTING_KEY,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["route"] == "Maureen"
    assert body["reason"] == "Restricted Prefix '59'"
    assert "Prefix: [59]" in body["evidence"]
    assert body["pageCount"] == 2
    assert body["flags"] == ["CHECKERED FLAG"]

    roster = client.get("/roster", headers=ADMIN_KEY).json()
    assert roster[2] == {"id": "m", "name": "Maureen", "role": "Keying", "cards": 1, "totalPages": 2}

    decisions = client.get("/decisions", headers=ADMIN_KEY).json()
    assert decisions["count"] == 1
    assert decisions["items"][0]["poNumber"] == "4500012345"


def test_route_balances_unrestricted_order(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.put("/roster", json=ROSTER, headers=ADMIN_KEY)

    response = client.post("/route", json={"poNumber": "N/A"}, headers=ROUTING_KEY)

    assert response.status_code == 200
    assert response.json()["route"] == "Ben"
    assert response.json()["reason"] == "Lowest Page Load (10pgs)"


def test_preview_does_not_touch_roster(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.put("/roster", json=ROSTER, headers=ADMIN_KEY)

    response = client.post("/route/preview", json={"pageCount": 9}, headers=ROUTING_KEY)

    assert response.status_code == 200
    assert client.get("/roster", headers=ADMIN_KEY).json()[1]["totalPages"] == 10


def test_route_without_generalists_returns_conflict(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.put("/roster", json=[ROSTER[2]], headers=ADMIN_KEY)

    response = client.post("/route", json={}, headers=ROUTING_KEY)

    assert response.status_code == 409


def test_route_rejects_non_object_payload(tmp_path: Path) -> None:
    client = _client(tmp_path)

    response = client.post("/route", json=["not", "an", "object"], headers=ROUTING_KEY)

    assert response.status_code == 422


def test_route_requires_api_key(tmp_path: Path) -> None:
    client = _client(tmp_path)

    assert client.post("/route", json={}).status_code == 401
    assert client.get("/roster", headers=ROUTING_KEY).status_code == 401


def test_put_roster_rejects_duplicate_ids(tmp_path: Path) -> None:
    client = _client(tmp_path)

    response = client.put("/roster", json=[ROSTER[0], ROSTER[0]], headers=ADMIN_KEY)

    assert response.status_code == 400
