from enum import Enum
import logging
from typing import TypeVar

import openai
from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)
from pydantic import BaseModel

from frigo.errors import GenerationError, ValidationError
from frigo.models import (
    GenerateRequest,
    Nutrition,
    NutritionRequest,
    RecipeCandidate,
    RecipeCandidates,
)
from frigo.prompts import (
    NUTRITION_SYSTEM_PROMPT,
    RECIPE_SYSTEM_PROMPT,
    GenerateRecipesPrompt,
    NutritionPrompt,
)
from frigo.validation import validate_json


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


TIMEOUT = 60 * 2
MIN_RECIPES = 3
MAX_RECIPES = 10

NO_FEASIBLE_RECIPE = (
    "Aucune recette ne peut être générée avec les ingrédients fournis en tenant "
    "compte de vos intolérances alimentaires. Veuillez modifier vos ingrédients "
    "ou réduire vos restrictions."
)


class Model(Enum):
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4O = "gpt-4o"
    MISTRAL_MEDIUM = "mistral-medium-latest"


def openai_client_factory(
    token: str | None = None,
    *,
    base_url: str | None = None,
    timeout: float = TIMEOUT,
) -> openai.AsyncClient:
    """Any OpenAI compatible endpoint, Mistral included, through `base_url`.

    Failed calls are not retried, the user resubmits.
    """
    return openai.AsyncClient(
        api_key=token, base_url=base_url, timeout=timeout, max_retries=0
    )


class LLMService:
    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str = Model.GPT_4O_MINI.value,
        temperature: float = 0.1,
    ) -> None:
        self.openai_client = (
            openai_client_factory() if openai_client is None else openai_client
        )
        self.model = model
        self.temperature = temperature

    async def structured_chat(
        self,
        *,
        system: str,
        user: str,
        output: type[M],
        name: str,
    ) -> M:
        """Ask for JSON shaped like `output` and check it ourselves anyway."""
        system_message: ChatCompletionSystemMessageParam = {
            "role": "system",
            "content": system,
        }
        user_message: ChatCompletionUserMessageParam = {
            "role": "user",
            "content": user,
        }
        messages: list[ChatCompletionMessageParam] = [system_message, user_message]

        try:
            resp = await self.openai_client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": name,
                        "schema": output.model_json_schema(),
                        "strict": False,
                    },
                },
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"The generation service failed: {e}") from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise GenerationError("The generation service returned nothing.")

        try:
            return validate_json(output, content)
        except ValidationError as e:
            logger.warning("Rejected %s output: %s", name, e)
            raise GenerationError(f"The generated {name} are invalid: {e}") from e

    async def generate_recipes(self, request: GenerateRequest) -> list[RecipeCandidate]:
        prompt = GenerateRecipesPrompt(
            ingredients=[(i.id, i.name) for i in request.ingredients],
            intolerances=request.intolerances,
            serving=request.serving,
            genre=request.genre,
        )
        generated = await self.structured_chat(
            system=RECIPE_SYSTEM_PROMPT,
            user=str(prompt),
            output=RecipeCandidates,
            name="recipes",
        )

        candidates = [c for c in generated.recipes if c.serving == request.serving]
        if len(candidates) < len(generated.recipes):
            logger.warning(
                "Dropped %d recipes not made for %d servings",
                len(generated.recipes) - len(candidates),
                request.serving,
            )
        if not candidates:
            raise GenerationError(NO_FEASIBLE_RECIPE)
        if len(candidates) > MAX_RECIPES:
            logger.info("Keeping %d of %d recipes", MAX_RECIPES, len(candidates))
            candidates = candidates[:MAX_RECIPES]
        elif len(candidates) < MIN_RECIPES:
            logger.warning("Only %d recipes generated", len(candidates))
        return candidates

    async def analyze_nutrition(self, request: NutritionRequest) -> Nutrition:
        prompt = NutritionPrompt(
            ingredients=[(i.name, i.quantity, i.unit) for i in request.ingredients],
            servings=request.servings,
            title=request.recipe_title,
        )
        return await self.structured_chat(
            system=NUTRITION_SYSTEM_PROMPT,
            user=str(prompt),
            output=Nutrition,
            name="nutrition",
        )
