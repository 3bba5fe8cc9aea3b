import logging
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError as PydanticValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel


logger = logging.getLogger(__name__)


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


# Store records. Field names are the Airtable column names. Reading only checks
# types, the bounds live on the write side.


class StoreModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class IngredientFields(StoreModel):
    name: str = Field("", alias="Name")


class RecipeFields(StoreModel):
    title: str | None = Field(None, alias="Title")
    description: str | None = Field(None, alias="Description")
    serving: int | None = Field(None, alias="Serving")
    preparation_time: float | None = Field(None, alias="PreparationTime")
    cooking_time: float | None = Field(None, alias="CookingTime")
    difficulty: str | None = Field(None, alias="Difficulty")
    cuisine: str | None = Field(None, alias="Cuisine")
    dish_type: str | None = Field(None, alias="Type")


class JoinFields(StoreModel):
    recipes: list[str] = Field(default_factory=list, alias="Recipes")
    ingredient: list[str] = Field(default_factory=list, alias="Ingredient")
    quantity: float | str | None = Field(None, alias="Quantity")
    unit: str | None = Field(None, alias="Unit")
    identifier: int | None = Field(None, alias="Identifier")


class InstructionFields(StoreModel):
    recipes: list[str] = Field(default_factory=list, alias="Recipes")
    instruction: str = Field("", alias="Instruction")
    order: int | None = Field(None, alias="Order")


class IngredientRecord(StoreModel):
    id: str
    created_time: str | None = Field(None, alias="createdTime")
    fields: IngredientFields = Field(default_factory=IngredientFields)


class RecipeRecord(StoreModel):
    id: str
    created_time: str | None = Field(None, alias="createdTime")
    fields: RecipeFields = Field(default_factory=RecipeFields)


class JoinRecord(StoreModel):
    id: str
    created_time: str | None = Field(None, alias="createdTime")
    fields: JoinFields = Field(default_factory=JoinFields)


class InstructionRecord(StoreModel):
    id: str
    created_time: str | None = Field(None, alias="createdTime")
    fields: InstructionFields = Field(default_factory=InstructionFields)


# Api payloads. camelCase on the wire, snake_case accepted too.


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Ingredient(ApiModel):
    id: str
    name: str


class IngredientCreate(ApiModel):
    name: Name


class IngredientOption(ApiModel):
    """What the ingredient picker shows."""

    label: str
    value: str


class SelectedIngredient(ApiModel):
    id: Name
    name: Name


class GenerateRequest(ApiModel):
    ingredients: list[SelectedIngredient] = Field(min_length=1)
    intolerances: list[str] = Field(default_factory=list)
    serving: int = Field(1, ge=1, le=100)
    genre: str | None = None


class CandidateIngredient(ApiModel):
    id: str
    name: Name
    quantity: float = Field(ge=0)
    unit: str = ""


class Step(ApiModel):
    text: Name
    order: int = Field(ge=1)


class RecipeCandidate(ApiModel):
    title: Name
    description: str = ""
    ingredients: list[CandidateIngredient] = Field(min_length=1)
    instructions: list[Step] = Field(min_length=1)
    serving: int = Field(ge=1, le=100)
    preparation_time: float | None = Field(None, ge=0, le=24 * 60)
    cooking_time: float | None = Field(None, ge=0, le=24 * 60)
    difficulty: str | None = None
    dish_type: str | None = Field(None, alias="type")

    def store_fields(self) -> dict[str, Any]:
        fields = RecipeFields(
            title=self.title,
            description=self.description,
            serving=self.serving,
            preparation_time=self.preparation_time,
            cooking_time=self.cooking_time,
            difficulty=self.difficulty,
            dish_type=self.dish_type,
        )
        return fields.model_dump(by_alias=True, exclude_none=True)


class RecipeCandidates(ApiModel):
    recipes: list[RecipeCandidate]


class SaveRequest(ApiModel):
    recipe: RecipeCandidate


class DeleteRequest(ApiModel):
    recipe_id: Name


# Denormalised views, built by the reconciler.


class RecipeIngredient(ApiModel):
    id: str
    ingredient_id: str | None = None
    name: str
    quantity: float | None = None
    unit: str = ""


class Instruction(ApiModel):
    text: str
    order: int


class RecipeView(ApiModel):
    id: str
    title: str
    description: str
    serving: int | None = None
    preparation_time: float | None = None
    cooking_time: float | None = None
    difficulty: str | None = None
    cuisine: str | None = None
    dish_type: str | None = Field(None, alias="type")
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    instructions: list[Instruction] = Field(default_factory=list)
    created_time: str | None = None


# Nutrition. Anything optional that comes back out of range is "not reported"
# (None) rather than an error, and never 0.


def _not_reported(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    try:
        return handler(value)
    except PydanticValidationError:
        logger.debug("Dropping implausible nutrient value %r", value)
        return None


class NutritionIngredient(ApiModel):
    name: Name
    quantity: float = Field(ge=0)
    unit: str = ""


class NutritionRequest(ApiModel):
    ingredients: list[NutritionIngredient] = Field(min_length=1)
    servings: int = Field(1, ge=1, le=100)
    recipe_title: str | None = None


class Vitamins(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    a: float | None = Field(None, ge=0, le=10000, alias="A")
    c: float | None = Field(None, ge=0, le=1000, alias="C")
    d: float | None = Field(None, ge=0, le=100, alias="D")
    e: float | None = Field(None, ge=0, le=100, alias="E")
    k: float | None = Field(None, ge=0, le=1000, alias="K")
    b1: float | None = Field(None, ge=0, le=10, alias="B1")
    b2: float | None = Field(None, ge=0, le=10, alias="B2")
    b3: float | None = Field(None, ge=0, le=100, alias="B3")
    b6: float | None = Field(None, ge=0, le=10, alias="B6")
    b12: float | None = Field(None, ge=0, le=100, alias="B12")
    folate: float | None = Field(None, ge=0, le=1000)

    @field_validator("*", mode="wrap")
    @classmethod
    def not_reported(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        return _not_reported(value, handler)


class Minerals(BaseModel):
    calcium: float | None = Field(None, ge=0, le=2000)
    iron: float | None = Field(None, ge=0, le=100)
    magnesium: float | None = Field(None, ge=0, le=1000)
    phosphorus: float | None = Field(None, ge=0, le=2000)
    potassium: float | None = Field(None, ge=0, le=5000)
    zinc: float | None = Field(None, ge=0, le=50)
    copper: float | None = Field(None, ge=0, le=10)
    manganese: float | None = Field(None, ge=0, le=10)
    selenium: float | None = Field(None, ge=0, le=200)

    @field_validator("*", mode="wrap")
    @classmethod
    def not_reported(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        return _not_reported(value, handler)


class Nutrition(ApiModel):
    """Per serving totals."""

    calories: float = Field(ge=0, le=5000)
    protein: float = Field(ge=0, le=200)
    carbs: float = Field(ge=0, le=500)
    fat: float = Field(ge=0, le=200)
    fiber: float | None = Field(None, ge=0, le=100)
    sugar: float | None = Field(None, ge=0, le=200)
    sodium: float | None = Field(None, ge=0, le=5000)
    vitamins: Vitamins = Field(default_factory=Vitamins)
    minerals: Minerals = Field(default_factory=Minerals)
    nutrition_notes: str = Field(min_length=10, max_length=500)
    nutrition_score: float | None = Field(None, ge=0, le=5)

    @field_validator("fiber", "sugar", "sodium", "nutrition_score", mode="wrap")
    @classmethod
    def not_reported(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        return _not_reported(value, handler)
