from __future__ import annotations

from grocer.models.grocery import GroceryItem
from grocer.shopping.grouping import filter_items, group_items, sort_items

ITEMS = [
    GroceryItem(id="1", name="Milk", category="dairy", store="Store B"),
    GroceryItem(id="2", name="Apples", category="produce"),
    GroceryItem(id="3", name="Steak", category="meat", store="Store A", department="Butcher"),
    GroceryItem(id="4", name="Cheddar", category="dairy", store="Store A", department="Deli"),
]


def test_sort_puts_unassigned_last():
    assert [item.id for item in sort_items(ITEMS)] == ["3", "4", "1", "2"]


def test_filter_by_search_and_store():
    assert [item.id for item in filter_items(ITEMS, search="CHED")] == ["4"]
    assert [item.id for item in filter_items(ITEMS, store="Unassigned")] == ["2"]


def test_group_by_store_then_category():
    groups = group_items(ITEMS)

    assert list(groups) == ["Store A", "Store B", "Unassigned"]
    assert {key: [item.id for item in value] for key, value in groups["Store A"].items()} == {
        "Meat": ["3"],
        "Dairy": ["4"],
    }


def test_group_by_department_without_stores():
    groups = group_items(ITEMS, by_store=False, sort_by="department")

    assert {key: [item.id for item in value] for key, value in groups.items()} == {
        "Butcher": ["3"],
        "Deli": ["4"],
        "Unassigned": ["1", "2"],
    }


def test_group_headings_use_category_overrides():
    groups = group_items(ITEMS, by_store=False, labels={"dairy": "Fridge"})

    assert {key: [item.id for item in value] for key, value in groups.items()} == {
        "Meat": ["3"],
        "Fridge": ["4", "1"],
        "Produce": ["2"],
    }
