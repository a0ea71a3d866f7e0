"""Tests for the FastAPI service."""

import time

import pytest
from fastapi.testclient import TestClient

from freecut_api import __version__
from freecut_api import main as api_main
from freecut_api.main import app


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


def test_optimize_basic_job(client, job_dict):
    response = client.post("/optimize", json=job_dict)
    assert response.status_code == 200

    data = response.json()
    assert len(data["layouts"]) == 1
    assert data["averageUtilization"] == pytest.approx(24.0)
    assert data["totalWaste"] == pytest.approx(760000)
    assert data["cutsPlaced"] == 2
    layout = data["layouts"][0]
    assert layout["stockId"] == "sheet"
    assert [pos["pieceId"] for pos in layout["positions"]] == ["door", "door"]


def test_optimize_with_edge_band_alias(client, job_dict):
    job_dict["cuts"] = [{
        "width": 500, "height": 500,
        "edgeBand": {"name": "ПВХ", "thickness": 2,
                     "sides": {"top": True, "bottom": True, "left": True, "right": True}},
        "groove": {"enabled": True, "width": 4, "offsetSide": "top", "offset": 10},
    }]
    response = client.post("/optimize", json=job_dict)
    assert response.status_code == 200
    pos = response.json()["layouts"][0]["positions"][0]
    assert (pos["width"], pos["height"]) == (496, 496)
    assert pos["pieceId"] == "cut_1"


def test_grain_blocks_rotation(client):
    job = {
        "stock": [{"width": 100, "height": 70}],
        "cuts": [{"width": 60, "height": 90, "pattern": "vertical"}],
    }
    data = client.post("/optimize", json=job).json()
    assert data["layouts"][0]["positions"] == []
    assert data["totalCutsNeeded"] == 1
    assert data["cutsPlaced"] == 0


@pytest.mark.parametrize("patch", [
    {"kerf": -1},
    {"grid_step": 0},
    {"stock": [{"width": -5, "height": 100}]},
    {"cuts": [{"width": 100, "height": 100, "quantity": -1}]},
    {"cuts": [{"width": 100, "height": 100, "pattern": "diagonal"}]},
])
def test_invalid_job_is_rejected(client, job_dict, patch):
    job_dict.update(patch)
    assert client.post("/optimize", json=job_dict).status_code == 422


def test_export_report(client, job_dict):
    response = client.post("/export/report", json=job_dict)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "Average Utilization: 24.00%" in response.text


def test_export_dxf(client, job_dict):
    response = client.post("/export/dxf", json=job_dict)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/dxf")
    assert "attachment" in response.headers["content-disposition"]
    assert "400×300" in response.text


def test_timeout_returns_504(client, job_dict, monkeypatch):
    def slow_job(request):
        time.sleep(0.5)

    monkeypatch.setattr(api_main, "API_TIMEOUT", 0.05)
    monkeypatch.setattr(api_main, "run_job", slow_job)
    assert client.post("/optimize", json=job_dict).status_code == 504


def test_engine_failure_returns_500(client, job_dict, monkeypatch):
    def broken_job(request):
        raise RuntimeError("boom")

    monkeypatch.setattr(api_main, "run_job", broken_job)
    response = client.post("/optimize", json=job_dict)
    assert response.status_code == 500
    assert "boom" in response.json()["detail"]
