import random

import pytest

from frigo.models import InstructionRecord, JoinRecord, RecipeRecord
from frigo.reconcile import (
    NO_DESCRIPTION,
    NO_TITLE,
    group_by_recipe,
    parse_quantity,
    reconcile,
)


def join(id: str, recipes: list[str], ingredient: str | None = None, **fields) -> JoinRecord:
    return JoinRecord.model_validate(
        {
            "id": id,
            "fields": {
                "Recipes": recipes,
                "Ingredient": [ingredient] if ingredient else [],
                **fields,
            },
        }
    )


def step(id: str, recipes: list[str], text: str, order: int | None) -> InstructionRecord:
    fields = {"Recipes": recipes, "Instruction": text}
    if order is not None:
        fields["Order"] = order
    return InstructionRecord.model_validate({"id": id, "fields": fields})


def recipe(id: str, **fields) -> RecipeRecord:
    return RecipeRecord.model_validate({"id": id, "fields": fields})


@pytest.mark.parametrize(
    "given,expected",
    (
        ("250 g", (250.0, "g")),
        ("250g", (250.0, "g")),
        ("1,5 kg", (1.5, "kg")),
        ("0.75 l", (0.75, "l")),
        ("  3 c. à s. ", (3.0, "c. à s.")),
        ("2", (2.0, "")),
        (4, (4.0, "")),
        (1.5, (1.5, "")),
        ("abc", (0.0, "")),
        ("", (0.0, "")),
        ("une pincée", (0.0, "")),
    ),
)
def test_parse_quantity(given: str | float, expected: tuple[float, str]) -> None:
    assert parse_quantity(given) == expected


def test_group_by_recipe_lists_a_join_under_every_recipe() -> None:
    joins = [
        join("j1", ["r1"]),
        join("j2", ["r1", "r2"]),
        join("j3", ["r2"]),
        join("j4", []),
    ]
    got = group_by_recipe(joins)
    assert {k: [j.id for j in v] for k, v in got.items()} == {
        "r1": ["j1", "j2"],
        "r2": ["j2", "j3"],
    }


def test_reconcile_set_equality() -> None:
    rng = random.Random(7)
    recipe_ids = [f"r{i}" for i in range(5)]
    joins = [
        join(f"j{i}", rng.sample(recipe_ids, rng.randint(0, 2)), "ing1", Quantity=i)
        for i in range(40)
    ]
    steps = [
        step(f"s{i}", rng.sample(recipe_ids, rng.randint(1, 2)), f"étape {i}", i)
        for i in range(40)
    ]

    views = reconcile([recipe(r) for r in recipe_ids], joins, steps, {"ing1": "Sel"})

    for view in views:
        assert {i.id for i in view.ingredients} == {
            j.id for j in joins if view.id in j.fields.recipes
        }
        assert {i.text for i in view.instructions} == {
            s.fields.instruction for s in steps if view.id in s.fields.recipes
        }


def test_reconcile_sorts_instructions_whatever_the_input_order() -> None:
    steps = [step(f"s{i}", ["r1"], f"étape {i}", i) for i in range(1, 8)]
    steps.append(step("s0", ["r1"], "sans ordre", None))
    random.Random(3).shuffle(steps)

    (view,) = reconcile([recipe("r1")], [], steps, {})

    assert [i.order for i in view.instructions] == [0, 1, 2, 3, 4, 5, 6, 7]
    assert view.instructions[0].text == "sans ordre"


def test_reconcile_resolves_names_and_quantities() -> None:
    joins = [
        join("j1", ["r1"], "ing1", Quantity=200, Unit="g"),
        join("j2", ["r1"], "ing2", Quantity="1,5 kg", Unit="g"),
        join("j3", ["r1"], "gone", Quantity="3", Unit="pièce", Identifier=12),
        join("j4", ["r1"], None),
        join("j5", ["r1"], "ing3", Quantity="une pincée", Unit="g"),
    ]
    names = {"ing1": "Farine", "ing2": "Pomme", "ing3": "Sel"}

    (view,) = reconcile([recipe("r1", Title="Tarte")], joins, [], names)

    got = [(i.name, i.quantity, i.unit) for i in view.ingredients]
    assert got == [
        ("Farine", 200.0, "g"),
        ("Pomme", 1.5, "kg"),
        ("Ingrédient 12", 3.0, "pièce"),
        ("Ingrédient j4", None, ""),
        ("Sel", 0.0, ""),
    ]


def test_reconcile_without_children_or_display_fields() -> None:
    (view,) = reconcile([recipe("r1")], [join("j1", ["r2"])], [], {})

    assert view.ingredients == []
    assert view.instructions == []
    assert view.title == NO_TITLE
    assert view.description == NO_DESCRIPTION
    assert view.serving is None
    assert view.preparation_time is None
