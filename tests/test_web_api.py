"""Tests for the depth web API."""

import shutil
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    from dbt_depthy.web import create_app
    HAS_WEB = True
except ImportError:
    HAS_WEB = False

from dbt_depthy.service import DepthService

pytestmark = pytest.mark.skipif(not HAS_WEB, reason="web dependencies not installed")

FIXTURES = Path(__file__).parent / "fixtures"
JAFFLE = FIXTURES / "jaffle_shop"


@pytest.fixture
def client():
    app = create_app(project_root=JAFFLE)
    return TestClient(app)


# ── Lookups ───────────────────────────────────────────────────

class TestDepthEndpoints:
    def test_status(self, client):
        res = client.get("/api/status")
        assert res.status_code == 200
        data = res.json()
        assert data["models"] == 6
        assert data["max_depth"] == 4
        assert data["manifest_path"].endswith("manifest.json")
        assert data["last_error"] is None

    def test_list_depths(self, client):
        res = client.get("/api/depths")
        assert res.status_code == 200
        depths = res.json()["depths"]
        assert depths["int_order_payments"] == 2
        assert depths["model.jaffle_shop.int_order_payments"] == 2

    def test_get_depth(self, client):
        res = client.get("/api/depths/fct_orders")
        assert res.status_code == 200
        data = res.json()
        assert data["depth"] == 4
        assert data["label"] == "(4)"
        assert data["tier"] == "medium"
        assert "DAG depth of 4" in data["hover"]

    def test_get_depth_unknown(self, client):
        res = client.get("/api/depths/not_a_model")
        assert res.status_code == 404

    def test_depth_feed_initial_snapshot(self, client):
        with client.websocket_connect("/api/ws/depths") as ws:
            data = ws.receive_json()
        assert data["depths"]["fct_orders"] == 4

    def test_depth_feed_pushes_refresh_and_closes_cleanly(self, tmp_path):
        root = tmp_path / "shop"
        shutil.copytree(JAFFLE, root)
        service = DepthService(root)
        service.refresh()
        client = TestClient(create_app(service=service))

        with client.websocket_connect("/api/ws/depths") as ws:
            assert ws.receive_json()["depths"]["fct_orders"] == 4
            assert client.post("/api/refresh").status_code == 200
            assert ws.receive_json()["depths"]["fct_orders"] == 4
        assert service._subscribers == []


# ── Refresh ───────────────────────────────────────────────────

class TestRefreshEndpoint:
    def test_refresh(self, client):
        res = client.post("/api/refresh")
        assert res.status_code == 200
        assert res.json() == {"ok": True, "models": 6}

    def test_refresh_failure_keeps_table(self, tmp_path):
        root = tmp_path / "shop"
        shutil.copytree(JAFFLE, root)
        service = DepthService(root)
        service.refresh()
        client = TestClient(create_app(service=service))

        (root / "target" / "manifest.json").write_text("[]")
        res = client.post("/api/refresh")
        assert res.status_code == 503

        res = client.get("/api/depths/fct_orders")
        assert res.status_code == 200
        assert res.json()["depth"] == 4

        status = client.get("/api/status").json()
        assert status["last_error"]

    def test_refresh_non_utf8_is_503(self, tmp_path):
        root = tmp_path / "shop"
        shutil.copytree(JAFFLE, root)
        service = DepthService(root)
        service.refresh()
        client = TestClient(create_app(service=service))

        (root / "target" / "manifest.json").write_bytes(b'{"nodes": {"\xff\xfe": 1}}')
        res = client.post("/api/refresh")
        assert res.status_code == 503
        assert client.get("/api/depths/fct_orders").json()["depth"] == 4
