"""
Tests for the FastAPI endpoints exposed by `carton_api.api`, using TestClient.

Tests are skipped if FastAPI/TestClient dependencies are not available.
"""

import pytest

# For API tests, ensure fastapi + testclient available; otherwise skip those tests.
fastapi = pytest.importorskip("fastapi")
from fastapi.testclient import TestClient  # type: ignore

from carton_api import api as api_module


def mug_dicts(count=3, **overrides):
    item = {
        "product_id": "MUG",
        "length": 6.0,
        "width": 4.0,
        "height": 2.0,
        "weight": 0.5,
        "fragile": False,
        "requires_padding": False,
    }
    item.update(overrides)
    return [dict(item, product_id=f"MUG-{i}") for i in range(count)]


def cube_catalog_dicts():
    return [
        {
            "name": "CUBE",
            "length": 10.0,
            "width": 10.0,
            "height": 11.0,
            "max_weight": 50.0,
            "tare_weight": 0.5,
            "cost": 1.0,
        }
    ]


def block_dicts():
    return [
        {"product_id": f"BLOCK-{i}", "length": 5.0, "width": 5.0, "height": 4.0, "weight": 1.0}
        for i in range(20)
    ]


@pytest.fixture
def client():
    """
    FastAPI TestClient fixture for API tests.
    """
    return TestClient(api_module.app)


def test_health_and_info(client):
    assert client.get("/health").json() == {"status": "ok"}
    info = client.get("/").json()
    assert info["service"] == "carton_api"
    assert "version" in info


def test_catalog_lists_default_boxes(client):
    response = client.get("/cartons/catalog")
    assert response.status_code == 200

    names = [c["name"] for c in response.json()]
    assert names == ["SMALL_BOX", "MEDIUM_BOX", "LARGE_BOX", "EXTRA_LARGE_BOX"]


def test_select_small_box(client):
    response = client.post("/cartons/select", json={"items": mug_dicts()})
    assert response.status_code == 200, (
        f"API error: {response.status_code} - {response.text}"
    )

    data = response.json()
    assert data["fits"] is True
    carton = data["carton"]
    assert carton["carton_type"] == "SMALL_BOX"
    assert carton["item_count"] == 3
    assert carton["fill_rate"] == pytest.approx(0.75)
    assert carton["score"]["total"] == pytest.approx(94.9)
    assert len(carton["items"]) == 3
    assert carton["items"][0]["position"] == [0.0, 0.0, 0.0]


def test_select_reports_no_fit(client):
    crate = {"product_id": "CRATE", "length": 40, "width": 40, "height": 40, "weight": 10}

    data = client.post("/cartons/select", json={"items": [crate]}).json()

    assert data == {"fits": False, "carton": None}


def test_split_with_catalog_override(client):
    payload = {"items": block_dicts(), "catalog": cube_catalog_dicts()}

    response = client.post("/cartons/split", json=payload)
    assert response.status_code == 200, response.text

    data = response.json()
    assert data["complete"] is True
    assert data["unpacked_items"] == []
    assert [c["item_count"] for c in data["cartons"]] == [8, 8, 4]
    assert data["summary"]["cartons_required"] == 3
    assert data["summary"]["items_count"] == 20


def test_split_returns_unpacked_items(client):
    crate = {"product_id": "CRATE", "length": 40, "width": 40, "height": 40, "weight": 10}

    data = client.post("/cartons/split", json={"items": [crate] + mug_dicts(1)}).json()

    assert data["complete"] is False
    assert [it["product_id"] for it in data["unpacked_items"]] == ["CRATE"]
    assert len(data["cartons"]) == 1


def test_suggest_limit(client):
    response = client.post("/cartons/suggest", json={"items": mug_dicts(), "limit": 2})
    assert response.status_code == 200

    data = response.json()
    assert len(data) == 2
    assert data[0]["carton_type"]["name"] == "SMALL_BOX"
    assert data[0]["recommendation"] == "excellent"
    assert data[0]["score"]["total"] >= data[1]["score"]["total"]


def test_empty_items_rejected(client):
    response = client.post("/cartons/select", json={"items": []})
    assert response.status_code == 400


def test_empty_catalog_rejected(client):
    response = client.post("/cartons/split", json={"items": mug_dicts(), "catalog": []})
    assert response.status_code == 400


def test_invalid_dimensions_rejected(client):
    response = client.post("/cartons/select", json={"items": mug_dicts(1, length=-1.0)})
    assert response.status_code == 422
