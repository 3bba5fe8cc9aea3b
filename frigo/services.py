import logging

from frigo.errors import StoreError
from frigo.llm_service import LLMService
from frigo.models import (
    GenerateRequest,
    Ingredient,
    IngredientCreate,
    IngredientOption,
    Nutrition,
    NutritionRequest,
    RecipeCandidate,
    RecipeView,
)
from frigo.reconcile import reconcile
from frigo.repository import IngredientRepository, RecipeRepository
from frigo.validation import validate


logger = logging.getLogger(__name__)


async def list_ingredients(*, ingredients: IngredientRepository) -> list[Ingredient]:
    return await ingredients.list()


async def ingredient_options(
    *, ingredients: IngredientRepository
) -> list[IngredientOption]:
    return [
        IngredientOption(label=i.name, value=i.id) for i in await ingredients.list()
    ]


async def create_ingredient(
    name: object, *, ingredients: IngredientRepository
) -> Ingredient:
    return await ingredients.create(validate(IngredientCreate, {"name": name}))


async def update_ingredient(
    id: str, name: object, *, ingredients: IngredientRepository
) -> Ingredient:
    return await ingredients.update(id, validate(IngredientCreate, {"name": name}))


async def delete_ingredient(id: str, *, ingredients: IngredientRepository) -> None:
    await ingredients.delete(id)


async def list_recipes(
    *,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> list[RecipeView]:
    records = await recipes.list()
    joins = await recipes.joins()
    instructions = await recipes.instructions()
    names = await ingredients.names()
    return reconcile(records, joins, instructions, names)


async def get_recipe(
    id: str,
    *,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> RecipeView:
    # Linked record formulas match on the primary field, not the id, so the
    # children are fetched whole and filtered here.
    record = await recipes.get(id)
    joins = await recipes.joins()
    instructions = await recipes.instructions()
    names = await ingredients.names()
    return reconcile([record], joins, instructions, names)[0]


async def save_recipe(
    candidate: RecipeCandidate,
    *,
    recipes: RecipeRepository,
    ingredients: IngredientRepository,
) -> RecipeView:
    names = await ingredients.names()
    known = [i for i in candidate.ingredients if i.id in names]
    unknown = [i.name for i in candidate.ingredients if i.id not in names]
    if unknown:
        logger.warning("Not saving unknown ingredients: %s", ", ".join(unknown))

    record = await recipes.create(candidate)
    try:
        joins = await recipes.create_joins(record.id, known)
        instructions = await recipes.create_instructions(
            record.id, candidate.instructions
        )
    except StoreError:
        logger.error("Recipe %s was saved without all of its parts", record.id)
        raise
    return reconcile([record], joins, instructions, names)[0]


async def delete_recipe(
    id: str,
    *,
    recipes: RecipeRepository,
    cascade: bool = True,
) -> None:
    """Delete a recipe and, with `cascade`, the joins and instructions it owns.

    The children are looked up first, the store unlinks them once the recipe is
    gone. The recipe goes first so a bad id fails before any child is
    deleted.
    """
    if not cascade:
        await recipes.delete(id)
        return
    joins, instructions = await recipes.owned(id)
    await recipes.delete(id)
    await recipes.delete_owned(joins, instructions)
    logger.info(
        "Deleted recipe %s with %d joins and %d instructions",
        id,
        len(joins),
        len(instructions),
    )


async def generate_recipes(
    request: GenerateRequest, *, llm: LLMService
) -> list[RecipeCandidate]:
    return await llm.generate_recipes(request)


async def analyze_nutrition(request: NutritionRequest, *, llm: LLMService) -> Nutrition:
    return await llm.analyze_nutrition(request)
