"""Command-line interface for Grocer."""

from __future__ import annotations

import json
from typing import List, NoReturn, Optional

import typer
from pydantic import TypeAdapter, ValidationError

from grocer.config import get_settings
from grocer.db.kv_store import DatabaseKeyValueStore
from grocer.models.grocery import NewGroceryItem
from grocer.models.meal import Meal
from grocer.shopping.grouping import group_items, sort_items
from grocer.shopping.service import ShoppingListService
from grocer.shopping.storage import MealPlanStorage, dumps_items

app = typer.Typer(help="Grocer shopping list commands.")

_MEALS = TypeAdapter(list[Meal])


def _service() -> tuple[ShoppingListService, MealPlanStorage]:
    store = DatabaseKeyValueStore()
    return ShoppingListService.from_settings(store, get_settings()), MealPlanStorage(store)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("list")
def list_items(
    archived: bool = typer.Option(False, "--archived", help="Show archived items instead."),
    as_json: bool = typer.Option(False, "--json", help="Print items as JSON."),
    by_store: bool = typer.Option(True, "--by-store/--by-category", help="Grouping for text output."),
) -> None:
    """Show the shopping list."""

    service, _ = _service()
    items = service.archived_items if archived else service.active_items
    if as_json:
        typer.echo(dumps_items(sort_items(items)))
        return
    if not items:
        typer.echo("The list is empty.")
        return

    groups = group_items(items, by_store=by_store, labels=service.category_labels)
    for heading, section in groups.items():
        typer.secho(heading, bold=True)
        entries = [entry for values in section.values() for entry in values] if by_store else section
        for item in entries:
            mark = "x" if item.checked else " "
            typer.echo(f"  [{mark}] {item.name} ({item.quantity})  {item.id}")


@app.command()
def sync(
    meals_path: Optional[str] = typer.Argument(None, help="JSON file with the planned meals."),
    pantry: Optional[List[str]] = typer.Option(None, "--pantry", "-p", help="Pantry item (repeatable)."),
) -> None:
    """Store new meal plan inputs (when given) and regenerate the list."""

    meals = None
    if meals_path:
        try:
            with open(meals_path, "r", encoding="utf-8") as fh:
                meals = _MEALS.validate_python(json.load(fh))
        except OSError as exc:
            _fail(f"Cannot read {meals_path}: {exc.strerror or exc}")
        except json.JSONDecodeError as exc:
            _fail(f"{meals_path} is not valid JSON: {exc.msg} (line {exc.lineno})")
        except ValidationError as exc:
            _fail(f"{meals_path} has {exc.error_count()} invalid meal field(s)")

    service, meal_plan = _service()
    if meals is not None:
        meal_plan.save_meals(meals)
    if pantry:
        meal_plan.save_pantry(pantry)

    result = service.sync(meal_plan.load_meals(), meal_plan.load_pantry())
    if result is None or not result.changed:
        typer.echo("Shopping list already up to date.")
        return
    typer.echo(f"Added {len(result.added)} item(s), retired {len(result.dropped)} item(s).")


@app.command()
def add(
    name: str = typer.Argument(..., help="Item name."),
    quantity: str = typer.Option("1", "--quantity", "-q"),
    category: str = typer.Option("other", "--category", "-c"),
    store: Optional[str] = typer.Option(None, "--store", "-s"),
) -> None:
    """Add a manual item."""

    try:
        new_item = NewGroceryItem.model_validate(
            {"name": name, "quantity": quantity, "category": category, "store": store}
        )
    except ValidationError as exc:
        _fail(f"Invalid item: {exc.errors()[0]['msg']}")

    service, _ = _service()
    item = service.add_item(new_item)
    typer.echo(f"Added {item.name} as {item.id}")


@app.command()
def check(item_id: str = typer.Argument(..., help="Item id to check or uncheck.")) -> None:
    """Toggle the checked state of an item."""

    service, _ = _service()
    item = service.toggle_item(item_id)
    if item is None:
        _fail(f"Item {item_id} not found")
    typer.echo(f"{item.name}: {'checked' if item.checked else 'unchecked'}")


@app.command()
def archive(item_id: str = typer.Argument(..., help="Item id to archive.")) -> None:
    """Move an item to the archive."""

    service, _ = _service()
    if service.archive_item(item_id) is None:
        _fail(f"Item {item_id} not found")
    typer.echo(f"Archived {item_id}")


@app.command()
def assign(
    item_id: str = typer.Argument(..., help="Item id."),
    store: str = typer.Argument(..., help="Store label, or 'Unassigned'."),
) -> None:
    """Assign an item (and future items of the same name) to a store."""

    service, _ = _service()
    current = service.items.get_item(item_id)
    if current is None:
        _fail(f"Item {item_id} not found")
    updated = service.update_item(current.model_copy(update={"store": store}))
    typer.echo(f"{updated.name} -> {updated.store}")


@app.command()
def stores(
    names: Optional[List[str]] = typer.Argument(None, help="New store catalog; omit to show it."),
) -> None:
    """Show or replace the store catalog."""

    service, _ = _service()
    if names:
        demoted = service.update_stores(names)
        if demoted:
            typer.echo(f"{len(demoted)} item(s) moved to Unassigned.")
    for name in service.available_stores:
        typer.echo(name)


@app.command()
def reset() -> None:
    """Archive everything on the list."""

    service, _ = _service()
    outcome = service.reset_list()
    if outcome.already_empty:
        typer.echo("The list is already empty.")
        return
    typer.echo(f"{len(outcome.archived)} item(s) archived.")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
    reload: bool = typer.Option(False, "--reload"),
) -> None:
    """Run the HTTP API."""

    from grocer.server.run import serve as run_server

    run_server(host=host, port=port, reload=reload)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m grocer`."""
    app(prog_name="grocer", args=argv)


if __name__ == "__main__":
    main()
