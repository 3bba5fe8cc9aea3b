import pytest

from fakes import FakeAirtable, recipe
from frigo import services
from frigo.airtable import Table
from frigo.errors import StoreError, ValidationError
from frigo.models import RecipeCandidate
from frigo.repository import IngredientRepository, RecipeRepository


def candidate(**kwargs) -> RecipeCandidate:
    return RecipeCandidate.model_validate(recipe(**kwargs))


@pytest.mark.parametrize("name", ("Sel", "Crème fraîche", "  Miel  "))
@pytest.mark.asyncio
async def test_create_then_list_ingredient(
    name: str, ingredients: IngredientRepository
) -> None:
    created = await services.create_ingredient(name, ingredients=ingredients)
    got = await services.list_ingredients(ingredients=ingredients)
    assert created in got
    assert name.strip() in [i.name for i in got]


@pytest.mark.asyncio
async def test_ingredients_come_back_sorted(ingredients: IngredientRepository) -> None:
    await services.create_ingredient("Ail", ingredients=ingredients)
    got = await services.list_ingredients(ingredients=ingredients)
    assert [i.name for i in got] == ["Ail", "Farine", "Pomme"]


@pytest.mark.asyncio
async def test_blank_ingredient_is_refused(
    airtable: FakeAirtable, ingredients: IngredientRepository
) -> None:
    with pytest.raises(ValidationError):
        await services.create_ingredient(" ", ingredients=ingredients)
    assert airtable.requests == []


@pytest.mark.asyncio
async def test_update_and_delete_ingredient(ingredients: IngredientRepository) -> None:
    updated = await services.update_ingredient(
        "rec2", "Farine de blé", ingredients=ingredients
    )
    assert updated.name == "Farine de blé"

    await services.delete_ingredient("rec1", ingredients=ingredients)
    got = await services.list_ingredients(ingredients=ingredients)
    assert [i.id for i in got] == ["rec2"]


@pytest.mark.asyncio
async def test_ingredient_options(ingredients: IngredientRepository) -> None:
    got = await services.ingredient_options(ingredients=ingredients)
    assert [o.to_json() for o in got] == [
        {"label": "Farine", "value": "rec2"},
        {"label": "Pomme", "value": "rec1"},
    ]


@pytest.mark.asyncio
async def test_save_drops_unknown_ingredients(
    airtable: FakeAirtable,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> None:
    data = candidate(
        ingredients=[
            {"id": "rec1", "name": "Pomme", "quantity": 4, "unit": "pièce"},
            {"id": "recGHOST", "name": "Cannelle", "quantity": 1, "unit": "c. à c."},
        ]
    )

    saved = await services.save_recipe(data, recipes=recipes, ingredients=ingredients)

    assert [r["fields"]["Title"] for r in airtable.records(Table.recipes.value)] == [
        "Compote de pommes"
    ]
    joins = airtable.records(Table.joins.value)
    assert [j["fields"]["Ingredient"] for j in joins] == [["rec1"]]
    assert joins[0]["fields"]["Recipes"] == [saved.id]
    assert [i.name for i in saved.ingredients] == ["Pomme"]
    assert [i.order for i in saved.instructions] == [1, 2]


@pytest.mark.asyncio
async def test_save_with_no_known_ingredient_still_creates_the_recipe(
    airtable: FakeAirtable,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> None:
    data = candidate(
        ingredients=[{"id": "recGHOST", "name": "Cannelle", "quantity": 1, "unit": ""}]
    )

    saved = await services.save_recipe(data, recipes=recipes, ingredients=ingredients)

    assert saved.ingredients == []
    assert len(airtable.records(Table.recipes.value)) == 1
    assert len(airtable.records(Table.instructions.value)) == 2


@pytest.mark.asyncio
async def test_list_and_get_recipes(
    recipes: RecipeRepository, ingredients: IngredientRepository
) -> None:
    first = await services.save_recipe(
        candidate(title="Tarte aux pommes"), recipes=recipes, ingredients=ingredients
    )
    await services.save_recipe(
        candidate(title="Beignets"), recipes=recipes, ingredients=ingredients
    )

    listed = await services.list_recipes(recipes=recipes, ingredients=ingredients)
    assert [r.title for r in listed] == ["Beignets", "Tarte aux pommes"]

    got = await services.get_recipe(first.id, recipes=recipes, ingredients=ingredients)
    assert got == first
    assert got.preparation_time == 10


@pytest.mark.asyncio
async def test_get_missing_recipe(
    recipes: RecipeRepository, ingredients: IngredientRepository
) -> None:
    with pytest.raises(StoreError):
        await services.get_recipe("recNOPE", recipes=recipes, ingredients=ingredients)


@pytest.mark.asyncio
async def test_delete_cascades_to_owned_children(
    airtable: FakeAirtable,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> None:
    kept = await services.save_recipe(
        candidate(title="Gardée"), recipes=recipes, ingredients=ingredients
    )
    gone = await services.save_recipe(
        candidate(title="Supprimée"), recipes=recipes, ingredients=ingredients
    )
    shared = airtable.add(
        Table.joins.value,
        {"Recipes": [kept.id, gone.id], "Ingredient": ["rec2"], "Quantity": 100},
    )

    await services.delete_recipe(gone.id, recipes=recipes)

    assert [r["id"] for r in airtable.records(Table.recipes.value)] == [kept.id]
    remaining = airtable.records(Table.joins.value)
    assert {j["id"] for j in remaining} == {kept.ingredients[0].id, shared}
    for step in airtable.records(Table.instructions.value):
        assert step["fields"]["Recipes"] == [kept.id]


@pytest.mark.asyncio
async def test_delete_without_cascade_leaves_children(
    airtable: FakeAirtable,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> None:
    saved = await services.save_recipe(
        candidate(), recipes=recipes, ingredients=ingredients
    )

    await services.delete_recipe(saved.id, recipes=recipes, cascade=False)

    assert airtable.records(Table.recipes.value) == []
    assert len(airtable.records(Table.joins.value)) == 1
    assert len(airtable.records(Table.instructions.value)) == 2


@pytest.mark.asyncio
async def test_delete_missing_recipe_touches_nothing(
    airtable: FakeAirtable,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> None:
    await services.save_recipe(candidate(), recipes=recipes, ingredients=ingredients)

    with pytest.raises(StoreError):
        await services.delete_recipe("recNOPE", recipes=recipes)

    assert len(airtable.records(Table.joins.value)) == 1
    assert len(airtable.records(Table.instructions.value)) == 2
