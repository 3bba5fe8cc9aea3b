from frigo.airtable import RecordStore, Table
from frigo.models import (
    CandidateIngredient,
    Ingredient,
    IngredientCreate,
    IngredientRecord,
    InstructionFields,
    InstructionRecord,
    JoinFields,
    JoinRecord,
    RecipeCandidate,
    RecipeRecord,
    Step,
)
from frigo.validation import validate, validate_many


def _ingredient(record: IngredientRecord) -> Ingredient:
    return Ingredient(id=record.id, name=record.fields.name)


class IngredientRepository:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def get(self, id: str) -> Ingredient:
        record = await self.store.get(Table.ingredients, id)
        return _ingredient(validate(IngredientRecord, record))

    async def create(self, data: IngredientCreate) -> Ingredient:
        record = await self.store.create(Table.ingredients, {"Name": data.name})
        return _ingredient(validate(IngredientRecord, record))

    async def update(self, id: str, data: IngredientCreate) -> Ingredient:
        record = await self.store.update(Table.ingredients, id, {"Name": data.name})
        return _ingredient(validate(IngredientRecord, record))

    async def delete(self, id: str) -> None:
        # Joins pointing at this ingredient are left alone and read back with a
        # placeholder name.
        await self.store.delete(Table.ingredients, id)

    async def names(self) -> dict[str, str]:
        return {i.id: i.name for i in await self.list()}

    async def list(self) -> list[Ingredient]:
        records = await self.store.list(Table.ingredients, sort=[("Name", "asc")])
        return [_ingredient(r) for r in validate_many(IngredientRecord, records)]


class RecipeRepository:
    """Recipes plus the join and instruction records they own."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def get(self, id: str) -> RecipeRecord:
        return validate(RecipeRecord, await self.store.get(Table.recipes, id))

    async def create(self, candidate: RecipeCandidate) -> RecipeRecord:
        record = await self.store.create(Table.recipes, candidate.store_fields())
        return validate(RecipeRecord, record)

    async def create_joins(
        self, recipe_id: str, ingredients: list[CandidateIngredient]
    ) -> list[JoinRecord]:
        fields = [
            JoinFields(
                recipes=[recipe_id],
                ingredient=[i.id],
                quantity=i.quantity,
                unit=i.unit,
            ).model_dump(by_alias=True, exclude_none=True)
            for i in ingredients
        ]
        records = await self.store.create_many(Table.joins, fields)
        return validate_many(JoinRecord, records)

    async def create_instructions(
        self, recipe_id: str, steps: list[Step]
    ) -> list[InstructionRecord]:
        fields = [
            InstructionFields(
                recipes=[recipe_id],
                instruction=step.text,
                order=step.order,
            ).model_dump(by_alias=True, exclude_none=True)
            for step in steps
        ]
        records = await self.store.create_many(Table.instructions, fields)
        return validate_many(InstructionRecord, records)

    async def joins(self) -> list[JoinRecord]:
        return validate_many(JoinRecord, await self.store.list(Table.joins))

    async def instructions(self) -> list[InstructionRecord]:
        records = await self.store.list(Table.instructions)
        return validate_many(InstructionRecord, records)

    async def owned(self, recipe_id: str) -> tuple[list[str], list[str]]:
        """Ids of the joins and instructions that belong to this recipe alone."""
        joins = [j.id for j in await self.joins() if j.fields.recipes == [recipe_id]]
        steps = [
            s.id for s in await self.instructions() if s.fields.recipes == [recipe_id]
        ]
        return joins, steps

    async def delete(self, id: str) -> None:
        await self.store.delete(Table.recipes, id)

    async def delete_owned(self, joins: list[str], instructions: list[str]) -> None:
        await self.store.delete_many(Table.joins, joins)
        await self.store.delete_many(Table.instructions, instructions)

    async def list(self) -> list[RecipeRecord]:
        records = await self.store.list(Table.recipes, sort=[("Title", "asc")])
        return validate_many(RecipeRecord, records)
