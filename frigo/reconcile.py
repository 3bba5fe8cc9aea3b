"""Glue the four tables back into recipes.

Joins and instructions point at recipes through a list of ids, so both get
bucketed by recipe id in one pass before anything is looked up.
"""
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
import re
from typing import TypeVar

from frigo.models import (
    Instruction,
    InstructionRecord,
    JoinRecord,
    RecipeIngredient,
    RecipeRecord,
    RecipeView,
)


NO_TITLE = "Aucun titre"
NO_DESCRIPTION = "Aucune description"

R = TypeVar("R", JoinRecord, InstructionRecord)

QUANTITY_RE = re.compile(r"^\s*(\d+(?:[.,]\d+)?)\s*(.*?)\s*$")


def parse_quantity(value: str | float | int) -> tuple[float, str]:
    """Split "1,5 kg" into (1.5, "kg"). Anything unreadable is (0.0, "")."""
    if isinstance(value, (int, float)):
        return float(value), ""
    match = QUANTITY_RE.match(value)
    if match is None:
        return 0.0, ""
    number, unit = match.groups()
    return float(number.replace(",", ".")), unit


def resolve_quantity(
    quantity: str | float | None, unit: str | None
) -> tuple[float | None, str]:
    if quantity is None:
        return None, unit or ""
    if isinstance(quantity, str):
        if QUANTITY_RE.match(quantity) is None:
            return 0.0, ""
        magnitude, parsed_unit = parse_quantity(quantity)
        return magnitude, parsed_unit or unit or ""
    return float(quantity), unit or ""


def group_by_recipe(
    records: Iterable[R],
) -> dict[str, list[R]]:
    groups: defaultdict[str, list[R]] = defaultdict(list)
    for record in records:
        for recipe_id in dict.fromkeys(record.fields.recipes):
            groups[recipe_id].append(record)
    return dict(groups)


def ingredient_view(join: JoinRecord, names: Mapping[str, str]) -> RecipeIngredient:
    ingredient_id = join.fields.ingredient[0] if join.fields.ingredient else None
    name = names.get(ingredient_id) if ingredient_id else None
    if name is None:
        name = f"Ingrédient {join.fields.identifier or join.id}"
    quantity, unit = resolve_quantity(join.fields.quantity, join.fields.unit)
    return RecipeIngredient(
        id=join.id,
        ingredient_id=ingredient_id,
        name=name,
        quantity=quantity,
        unit=unit,
    )


def instruction_views(records: Iterable[InstructionRecord]) -> list[Instruction]:
    ordered = sorted(records, key=lambda r: r.fields.order or 0)
    return [
        Instruction(text=r.fields.instruction, order=r.fields.order or 0)
        for r in ordered
    ]


def reconcile(
    recipes: Sequence[RecipeRecord],
    joins: Iterable[JoinRecord],
    instructions: Iterable[InstructionRecord],
    ingredient_names: Mapping[str, str],
) -> list[RecipeView]:
    joins_by_recipe = group_by_recipe(joins)
    steps_by_recipe = group_by_recipe(instructions)

    views: list[RecipeView] = []
    for recipe in recipes:
        fields = recipe.fields
        views.append(
            RecipeView(
                id=recipe.id,
                title=fields.title or NO_TITLE,
                description=fields.description or NO_DESCRIPTION,
                serving=fields.serving,
                preparation_time=fields.preparation_time,
                cooking_time=fields.cooking_time,
                difficulty=fields.difficulty,
                cuisine=fields.cuisine,
                dish_type=fields.dish_type,
                ingredients=[
                    ingredient_view(join, ingredient_names)
                    for join in joins_by_recipe.get(recipe.id, [])
                ],
                instructions=instruction_views(steps_by_recipe.get(recipe.id, [])),
                created_time=recipe.created_time,
            )
        )
    return views
