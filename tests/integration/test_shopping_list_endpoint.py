"""Integration tests for the shopping list endpoints."""

from __future__ import annotations

from fastapi import status
from fastapi.testclient import TestClient

from grocer.server.app import create_app

from tests.integration.utils import MEALS_PAYLOAD, auth_headers


def _ids(items):
    return [item["id"] for item in items]


def test_empty_list_and_default_stores(client):
    response = client.get("/shopping-list")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["active"] == []
    assert body["archived"] == []
    assert body["stores"][0] == "Unassigned"
    assert body["can_undo"] is False


def test_meal_plan_updates_regenerate_list(client):
    headers = auth_headers()
    response = client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    assert response.status_code == status.HTTP_200_OK
    sync = response.json()
    assert sync["changed"] is True
    assert _ids(sync["added"]) == ["meal-flour", "meal-eggs", "meal-milk", "meal-butter"]

    response = client.put("/meal-plan/pantry", json=["Butter"], headers=headers)
    assert response.status_code == status.HTTP_200_OK
    # Additive merge: pantry changes never remove existing items.
    assert response.json()["changed"] is False

    response = client.get("/meal-plan/meals")
    assert response.json()[1]["recipeUrl"] == "https://example.com/omelette"
    assert client.get("/meal-plan/pantry").json() == ["Butter"]

    eggs = next(item for item in client.get("/shopping-list").json()["active"] if item["id"] == "meal-eggs")
    assert eggs["quantity"] == "5"
    assert eggs["meal"] == "Pancakes"


def test_toggle_archive_and_restore(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)

    response = client.post("/shopping-list/items/meal-eggs/toggle", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["checked"] is True

    response = client.post("/shopping-list/items/meal-flour/archive", headers=headers)
    assert response.status_code == status.HTTP_200_OK

    # Re-saving the same meals retires the toggled item and keeps flour away.
    response = client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    assert _ids(response.json()["retired"]) == ["meal-eggs"]
    body = client.get("/shopping-list").json()
    assert _ids(body["active"]) == ["meal-milk", "meal-butter"]
    assert sorted(_ids(body["archived"])) == ["meal-eggs", "meal-flour"]

    response = client.post("/shopping-list/items/meal-flour/restore", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["checked"] is False


def test_missing_item_returns_404(client):
    headers = auth_headers()
    for path in ("toggle", "archive", "restore"):
        response = client.post(f"/shopping-list/items/ghost/{path}", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.put("/shopping-list/items/ghost", json={"name": "ghost"}, headers=headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_manual_item_update_and_undo(client):
    headers = auth_headers()
    response = client.post(
        "/shopping-list/items",
        json={"name": "Paper towels", "quantity": "2 rolls"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    item = response.json()
    assert item["id"].startswith("manual-paper-towels-")
    assert item["origin"] == "manual"
    assert item["store"] == "Unassigned"

    response = client.put(
        f"/shopping-list/items/{item['id']}",
        json={"name": "Paper towels", "quantity": "2 rolls", "store": "Supermarket"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["store"] == "Supermarket"
    assert response.json()["origin"] == "manual"

    response = client.post("/shopping-list/undo", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["applied"] is True
    body = client.get("/shopping-list").json()
    assert body["active"][0]["store"] == "Unassigned"
    assert body["can_redo"] is True

    response = client.post("/shopping-list/redo", headers=headers)
    assert response.json()["applied"] is True

    titles = [notice["title"] for notice in client.get("/notices").json()]
    assert titles[0] == "Item Added"
    assert "Redo Applied" in titles


def test_partial_update_keeps_other_fields(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    client.put("/shopping-list/items/meal-milk", json={"store": "Supermarket"}, headers=headers)

    response = client.put(
        "/shopping-list/items/meal-milk",
        json={"name": "milk", "quantity": "3 cups"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    milk = response.json()
    assert milk["quantity"] == "3 cups"
    assert milk["store"] == "Supermarket"
    assert milk["category"] == "dairy"
    assert milk["meal"] == "Pancakes"

    # The remembered store still applies after the list is regenerated.
    client.post("/shopping-list/reset", headers=headers)
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    body = client.get("/shopping-list").json()
    milk = next(item for item in body["active"] if item["id"] == "meal-milk")
    assert milk["store"] == "Supermarket"


def test_invalid_item_payload_returns_422(client):
    response = client.post(
        "/shopping-list/items",
        json={"name": "Widget", "category": "gadgets"},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_bulk_update_and_validation(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)

    response = client.patch(
        "/shopping-list/items",
        json={"ids": ["meal-eggs", "meal-milk", "ghost"], "changes": {"store": "Farmers Market"}},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert _ids(response.json()) == ["meal-eggs", "meal-milk"]

    response = client.patch(
        "/shopping-list/items",
        json={"ids": ["meal-eggs"], "changes": {}},
        headers=headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.patch(
        "/shopping-list/items",
        json={"ids": ["meal-eggs"], "changes": {"id": "hijack"}},
        headers=headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_stores_reset_and_clear_archive(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    client.patch(
        "/shopping-list/items",
        json={"ids": ["meal-milk"], "changes": {"store": "Specialty Store"}},
        headers=headers,
    )

    response = client.put(
        "/shopping-list/stores",
        json={"stores": ["Unassigned", "Supermarket"]},
        headers=headers,
    )
    assert response.json() == ["Unassigned", "Supermarket"]
    milk = next(item for item in client.get("/shopping-list").json()["active"] if item["id"] == "meal-milk")
    assert milk["store"] == "Unassigned"

    response = client.post("/shopping-list/reset", headers=headers)
    body = response.json()
    assert body["already_empty"] is False
    assert len(body["archived"]) == 4
    assert all(item["id"].startswith("archived-") for item in body["archived"])

    response = client.post("/shopping-list/reset", headers=headers)
    assert response.json()["already_empty"] is True

    response = client.delete("/shopping-list/archive", headers=headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/shopping-list").json()["archived"] == []


def test_grouped_view(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    client.patch(
        "/shopping-list/items",
        json={"ids": ["meal-milk"], "changes": {"store": "Supermarket"}},
        headers=headers,
    )

    response = client.get("/shopping-list/grouped")
    assert response.status_code == status.HTTP_200_OK
    groups = response.json()["groups"]
    assert list(groups) == ["Supermarket", "Unassigned"]
    assert _ids(groups["Supermarket"]["Dairy"]) == ["meal-milk"]

    response = client.get("/shopping-list/grouped", params={"by_store": False, "search": "fl"})
    assert {key: _ids(value) for key, value in response.json()["groups"].items()} == {
        "Grains": ["meal-flour"]
    }


def test_category_rename_changes_group_headings(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)

    assert client.get("/shopping-list/categories").json()["dairy"] == "Dairy"

    response = client.put(
        "/shopping-list/categories/dairy", json={"label": "Milk & Eggs"}, headers=headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["dairy"] == "Milk & Eggs"

    groups = client.get("/shopping-list/grouped", params={"by_store": False}).json()["groups"]
    assert "Milk & Eggs" in groups
    assert "Dairy" not in groups

    response = client.put("/shopping-list/categories/toys", json={"label": "Toys"}, headers=headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    response = client.put("/shopping-list/categories/dairy", json={"label": ""}, headers=headers)
    assert response.json()["dairy"] == "Dairy"


def test_state_survives_app_restart(client):
    headers = auth_headers()
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=headers)
    client.post("/shopping-list/items/meal-flour/archive", headers=headers)

    restarted = TestClient(create_app())
    body = restarted.get("/shopping-list").json()
    assert "meal-flour" not in _ids(body["active"])
    assert _ids(body["archived"]) == ["meal-flour"]


def test_request_id_echoed_when_provided(client):
    request_id = "test-request-123"
    response = client.get("/shopping-list", headers={"X-Request-ID": request_id})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == request_id


def test_healthz(client):
    response = client.get("/healthz")
    assert response.json()["status"] == "ok"
