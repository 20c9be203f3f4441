"""Integration tests for metrics endpoint."""

from __future__ import annotations

from tests.integration.utils import MEALS_PAYLOAD, auth_headers


def test_metrics_endpoint_available(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    body = response.content.decode()
    assert "grocer_http_requests_total" in body


def test_metrics_track_list_mutations(client):
    client.put("/meal-plan/meals", json=MEALS_PAYLOAD, headers=auth_headers())

    body = client.get("/metrics").content.decode()
    assert 'grocer_reconcile_runs_total{outcome="changed"}' in body
    assert 'grocer_items_added_total{origin="meal"}' in body
    assert 'grocer_item_mutations_total{operation="reconcile"}' in body
