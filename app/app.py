import contextlib
import functools
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, TypeAlias

from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from app import config
from frigo import services
from frigo.airtable import RecordStore, airtable_client_factory
from frigo.errors import FrigoError, ValidationError
from frigo.llm_service import LLMService, openai_client_factory
from frigo.models import DeleteRequest, GenerateRequest, NutritionRequest, SaveRequest
from frigo.repository import IngredientRepository, RecipeRepository
from frigo.validation import validate


logger = logging.getLogger(__name__)


JSONBody: TypeAlias = dict[str, Any] | list[Any]


def aJSONResponse(route: Callable[..., Awaitable[JSONBody | tuple[JSONBody, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> JSONResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            content, code = resp, 200
        else:
            content, code = resp
        return JSONResponse(content, status_code=code)

    return wrapper


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError(
            f"body: Request body is not valid JSON ({e})",
            field="body",
            constraint="json_invalid",
        ) from e


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


@aJSONResponse
async def ingredients(request: Request) -> JSONBody | tuple[JSONBody, int]:
    repo: IngredientRepository = request.app.state.ingredients
    match request.method.lower():
        case "get":
            found = await services.list_ingredients(ingredients=repo)
            return [i.to_json() for i in found]
        case "post":
            body = await read_json(request)
            if not isinstance(body, dict) or not body.get("name"):
                raise ValidationError(
                    "name: Ingredient name is required (missing)",
                    field="name",
                    constraint="missing",
                )
            created = await services.create_ingredient(
                body["name"], ingredients=repo
            )
            return created.to_json(), 201
        case _:
            raise ValueError("Unsupported method.")


@aJSONResponse
async def ingredient_options(request: Request) -> JSONBody:
    repo: IngredientRepository = request.app.state.ingredients
    options = await services.ingredient_options(ingredients=repo)
    return [o.to_json() for o in options]


@aJSONResponse
async def ingredient_detail(request: Request) -> JSONBody:
    id = request.path_params["id"]
    repo: IngredientRepository = request.app.state.ingredients
    match request.method.lower():
        case "patch":
            body = await read_json(request)
            name = body.get("name") if isinstance(body, dict) else None
            updated = await services.update_ingredient(id, name, ingredients=repo)
            return updated.to_json()
        case "delete":
            await services.delete_ingredient(id, ingredients=repo)
            return {"success": True}
        case _:
            raise ValueError("Unsupported method.")


@aJSONResponse
async def recipes(request: Request) -> JSONBody:
    match request.method.lower():
        case "get":
            found = await services.list_recipes(
                recipes=request.app.state.recipes,
                ingredients=request.app.state.ingredients,
            )
            return [r.to_json() for r in found]
        case "post":
            data = validate(GenerateRequest, await read_json(request))
            candidates = await services.generate_recipes(data, llm=request.app.state.llm)
            return {"recipes": [c.to_json() for c in candidates]}
        case _:
            raise ValueError("Unsupported method.")


@aJSONResponse
async def recipe_detail(request: Request) -> JSONBody:
    recipe = await services.get_recipe(
        request.path_params["id"],
        recipes=request.app.state.recipes,
        ingredients=request.app.state.ingredients,
    )
    return recipe.to_json()


@aJSONResponse
async def save_recipe(request: Request) -> tuple[JSONBody, int]:
    data = validate(SaveRequest, await read_json(request))
    saved = await services.save_recipe(
        data.recipe,
        recipes=request.app.state.recipes,
        ingredients=request.app.state.ingredients,
    )
    return saved.to_json(), 201


@aJSONResponse
async def delete_recipe(request: Request) -> JSONBody:
    data = validate(DeleteRequest, await read_json(request))
    await services.delete_recipe(
        data.recipe_id,
        recipes=request.app.state.recipes,
        cascade=request.app.state.cascade_delete,
    )
    return {"success": True, "message": "Recipe deleted successfully"}


@aJSONResponse
async def analyze_nutrition(request: Request) -> JSONBody:
    data = validate(NutritionRequest, await read_json(request))
    nutrition = await services.analyze_nutrition(data, llm=request.app.state.llm)
    return nutrition.to_json()


async def frigo_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, FrigoError)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)


async def http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


async def server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


ROUTES = [
    Route("/ingredients", ingredients, methods=["GET", "POST"]),
    Route("/ingredients/options", ingredient_options, methods=["GET"]),
    Route("/ingredients/{id}", ingredient_detail, methods=["PATCH", "DELETE"]),
    Route("/recipes", recipes, methods=["GET", "POST"]),
    Route("/recipes/save", save_recipe, methods=["POST"]),
    Route("/recipes/delete", delete_recipe, methods=["DELETE"]),
    Route("/recipes/analyze-nutrition", analyze_nutrition, methods=["POST"]),
    Route("/recipes/{id}", recipe_detail, methods=["GET"]),
]


def create_app(
    cfg: config.Config | None = None,
    *,
    store: RecordStore | None = None,
    llm: LLMService | None = None,
) -> Starlette:
    """Clients not handed in are built, and closed, by the lifespan."""
    cfg = config.Config() if cfg is None else cfg

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        configure_logging(cfg.log_level)
        async with contextlib.AsyncExitStack() as stack:
            record_store = store
            if record_store is None:
                client = airtable_client_factory(
                    cfg.airtable_base_id,
                    cfg.airtable_api_key,
                    base_url=cfg.airtable_url,
                    timeout=cfg.request_timeout,
                )
                await stack.enter_async_context(client)
                record_store = RecordStore(client)

            llm_service = llm
            if llm_service is None:
                openai_client = openai_client_factory(
                    cfg.openai_api_key,
                    base_url=cfg.llm_base_url,
                    timeout=cfg.request_timeout,
                )
                stack.push_async_callback(openai_client.close)
                llm_service = LLMService(
                    openai_client, model=cfg.core_model, temperature=cfg.temperature
                )

            app.state.ingredients = IngredientRepository(record_store)
            app.state.recipes = RecipeRepository(record_store)
            app.state.llm = llm_service
            app.state.cascade_delete = cfg.cascade_delete
            logger.info("Frigo ready (%s)", cfg.env.value)
            yield

    return Starlette(
        routes=ROUTES,
        exception_handlers={
            FrigoError: frigo_error,
            HTTPException: http_error,
            Exception: server_error,
        },
        lifespan=lifespan,
    )


app = create_app()
