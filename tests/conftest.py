import httpx
import openai
import pytest

from fakes import BASE_URL, FakeAirtable, FakeChat
from frigo.airtable import RecordStore, Table
from frigo.llm_service import LLMService
from frigo.repository import IngredientRepository, RecipeRepository


@pytest.fixture
def airtable() -> FakeAirtable:
    fake = FakeAirtable()
    fake.add(Table.ingredients.value, {"Name": "Pomme"}, id="rec1")
    fake.add(Table.ingredients.value, {"Name": "Farine"}, id="rec2")
    return fake


@pytest.fixture
def store(airtable: FakeAirtable) -> RecordStore:
    client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(airtable.handler)
    )
    return RecordStore(client)


@pytest.fixture
def ingredients(store: RecordStore) -> IngredientRepository:
    return IngredientRepository(store)


@pytest.fixture
def recipes(store: RecordStore) -> RecipeRepository:
    return RecipeRepository(store)


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def llm(chat: FakeChat) -> LLMService:
    client = openai.AsyncClient(
        api_key="test",
        base_url="https://llm.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(chat.handler)),
    )
    return LLMService(client)
