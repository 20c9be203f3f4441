"""Tests for the typer command-line interface."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from grocer.cli import app

runner = CliRunner()

MEALS = [
    {"id": "m1", "title": "Chili", "ingredients": ["1 lb beef", "2 cans beans", "1 onion"]},
]


def _active_ids() -> list[str]:
    result = runner.invoke(app, ["list", "--json"])
    assert result.exit_code == 0, result.output
    return [item["id"] for item in json.loads(result.stdout)]


def test_sync_stores_meals_and_builds_list(tmp_path):
    meals_path = tmp_path / "meals.json"
    meals_path.write_text(json.dumps(MEALS), encoding="utf-8")

    result = runner.invoke(app, ["sync", str(meals_path), "--pantry", "onion"])
    assert result.exit_code == 0, result.output
    assert "Added 2 item(s)" in result.output

    assert sorted(_active_ids()) == ["meal-beans", "meal-beef"]

    result = runner.invoke(app, ["sync"])
    assert "already up to date" in result.output


def test_add_check_and_archive():
    result = runner.invoke(app, ["add", "Coffee", "--quantity", "2 bags", "--store", "Supermarket"])
    assert result.exit_code == 0, result.output
    item_id = result.stdout.strip().split(" as ")[-1]
    assert item_id.startswith("manual-coffee-")

    result = runner.invoke(app, ["check", item_id])
    assert result.exit_code == 0
    assert "Coffee: checked" in result.output

    result = runner.invoke(app, ["archive", item_id])
    assert result.exit_code == 0
    assert _active_ids() == []

    result = runner.invoke(app, ["list", "--archived", "--json"])
    assert [item["id"] for item in json.loads(result.stdout)] == [item_id]


def test_unknown_ids_exit_with_error():
    result = runner.invoke(app, ["check", "ghost"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["assign", "ghost", "Supermarket"])
    assert result.exit_code == 1


def test_invalid_category_is_rejected():
    result = runner.invoke(app, ["add", "Widget", "--category", "gadgets"])
    assert result.exit_code == 1


def test_assign_stores_and_reset():
    result = runner.invoke(app, ["add", "Milk"])
    item_id = result.stdout.strip().split(" as ")[-1]

    result = runner.invoke(app, ["assign", item_id, "Farmers Market"])
    assert result.exit_code == 0
    assert "Milk -> Farmers Market" in result.output

    result = runner.invoke(app, ["stores", "Unassigned", "Supermarket"])
    assert result.exit_code == 0
    assert "1 item(s) moved to Unassigned." in result.output
    assert result.stdout.strip().splitlines()[-2:] == ["Unassigned", "Supermarket"]

    result = runner.invoke(app, ["list"])
    assert "Unassigned" in result.output
    assert "[ ] Milk (1)" in result.output

    result = runner.invoke(app, ["reset"])
    assert "1 item(s) archived." in result.output
    result = runner.invoke(app, ["reset"])
    assert "already empty" in result.output


def test_sync_reports_unreadable_meal_files(tmp_path):
    missing = tmp_path / "missing.json"
    result = runner.invoke(app, ["sync", str(missing)])
    assert result.exit_code == 1
    assert "Cannot read" in result.output

    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    result = runner.invoke(app, ["sync", str(broken)])
    assert result.exit_code == 1
    assert "not valid JSON" in result.output

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps([{"title": "No id"}]), encoding="utf-8")
    result = runner.invoke(app, ["sync", str(invalid)])
    assert result.exit_code == 1
    assert "invalid meal field" in result.output

    assert _active_ids() == []
