"""Derive candidate shopping list items from planned meals and the pantry."""

from __future__ import annotations

import re
from fractions import Fraction
from typing import Iterable, Optional, Sequence

from grocer.models.grocery import UNASSIGNED, GroceryCategory, GroceryItem, normalize_name
from grocer.models.meal import Meal

DEFAULT_QUANTITY = "1"

_UNITS = (
    r"oz|ounces?|cups?|tbsp|tsp|teaspoons?|tablespoons?|lbs?|pounds?|g|grams?|ml|liters?|l|"
    r"cloves?|cans?|heads?|bunche?s?|stalks?|pieces?|slices?|pinche?s?|dashe?s?|large|medium|small"
)
_QUANTITY_PATTERN = re.compile(
    rf"^((?:\d+\s+)?\d+\s*/\s*\d+|\d+(?:\.\d+)?)\s*(?:({_UNITS})\b)?",
    re.IGNORECASE,
)
_LEADING_NUMBER = re.compile(r"^\s*((?:\d+\s+)?\d+\s*/\s*\d+|\d+(?:\.\d+)?)\s*(.*)$")
_ARTICLE_PATTERN = re.compile(r"^(?:an?|of)\s+", re.IGNORECASE)
_PAREN_PATTERN = re.compile(r"\(.*?\)")
_WHITESPACE = re.compile(r"\s+")
_SLASH = re.compile(r"\s*/\s*")

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: tuple[tuple[GroceryCategory, tuple[str, ...]], ...] = (
    (
        "produce",
        ("apple", "banana", "lettuce", "tomato", "onion", "potato", "carrot", "broccoli",
         "spinach", "pepper", "cucumber", "lemon"),
    ),
    ("dairy", ("milk", "cheese", "yogurt", "butter", "cream", "egg", "sour cream")),
    (
        "meat",
        ("chicken", "beef", "pork", "fish", "salmon", "tuna", "turkey", "meat", "steak",
         "bacon", "sausage"),
    ),
    ("grains", ("rice", "pasta", "bread", "flour", "cereal", "oats", "grain", "quinoa", "tortilla")),
    ("frozen", ("frozen", "ice cream", "pizza", "fries")),
    ("pantry", ("can", "canned", "sauce", "oil", "vinegar", "beans", "soup")),
    (
        "spices",
        ("salt", "pepper", "spice", "herb", "seasoning", "oregano", "basil", "thyme", "cumin",
         "cinnamon"),
    ),
)


def determine_category(name: str) -> GroceryCategory:
    """Guess the grocery category of an ingredient from keyword matches."""

    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "other"


def parse_ingredient(line: str) -> tuple[str, str]:
    """Split an ingredient line such as ``"2 cups flour (sifted)"`` into (name, quantity)."""

    text = line.strip()
    quantity = DEFAULT_QUANTITY
    match = _QUANTITY_PATTERN.match(text)
    if match:
        quantity = _WHITESPACE.sub(" ", match.group(0).strip())
        text = text[match.end():]

    text = _PAREN_PATTERN.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()
    text = _ARTICLE_PATTERN.sub("", text).strip(" ,")
    return text, quantity


def ingredient_id(name: str) -> str:
    """Deterministic candidate id derived from the ingredient name alone."""

    return "meal-" + _WHITESPACE.sub("-", normalize_name(name))


def _parse_amount(quantity: str) -> Optional[tuple[Fraction, str]]:
    match = _LEADING_NUMBER.match(quantity)
    if not match:
        return None
    raw, unit = match.groups()
    # "1 1/2" -> ["1", "1/2"]
    parts = _SLASH.sub("/", raw).split()
    try:
        amount = sum((Fraction(part) for part in parts), Fraction(0))
    except (ValueError, ZeroDivisionError):
        return None
    return amount, _singular_unit(unit)


def _singular_unit(unit: str) -> str:
    unit = unit.strip().lower()
    if unit.endswith(("ches", "shes", "xes")):
        return unit[:-2]
    if unit.endswith("s") and not unit.endswith("ss"):
        return unit[:-1]
    return unit


def _format_amount(amount: Fraction) -> str:
    if amount.denominator == 1:
        return str(amount.numerator)
    return f"{float(amount):.2f}".rstrip("0").rstrip(".")


def combine_quantities(first: str, second: str) -> str:
    """Merge two quantity annotations for the same ingredient."""

    left = _parse_amount(first)
    right = _parse_amount(second)
    if left and right and left[1] == right[1]:
        total = _format_amount(left[0] + right[0])
        unit = _LEADING_NUMBER.match(first).group(2).strip()  # type: ignore[union-attr]
        return f"{total} {unit}" if unit else total
    return f"{first} + {second}"


def _in_pantry(name: str, pantry: Sequence[str]) -> bool:
    lowered = normalize_name(name)
    return any(entry in lowered or lowered in entry for entry in pantry)


def generate_candidates(meals: Iterable[Meal], pantry: Iterable[str]) -> list[GroceryItem]:
    """Return deduplicated, pantry-filtered candidate items for the given meals.

    The output depends only on the inputs: the same meals and pantry always produce
    the same items with the same ids, in first-seen order.
    """

    pantry_names = [normalize_name(entry) for entry in pantry if entry and entry.strip()]
    merged: dict[str, GroceryItem] = {}

    for meal in meals:
        for line in meal.ingredients:
            name, quantity = parse_ingredient(line)
            if not name or _in_pantry(name, pantry_names):
                continue

            key = ingredient_id(name)
            existing = merged.get(key)
            if existing is not None:
                merged[key] = existing.model_copy(
                    update={"quantity": combine_quantities(existing.quantity, quantity)}
                )
                continue

            merged[key] = GroceryItem(
                id=key,
                name=name,
                category=determine_category(name),
                quantity=quantity,
                checked=False,
                meal=meal.title,
                store=UNASSIGNED,
                origin="meal",
            )

    return list(merged.values())


__all__ = [
    "CATEGORY_KEYWORDS",
    "combine_quantities",
    "determine_category",
    "generate_candidates",
    "ingredient_id",
    "parse_ingredient",
]
