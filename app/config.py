from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    log_level: str = "INFO"

    airtable_api_key: str = ""
    airtable_base_id: str = ""
    airtable_url: str = "https://api.airtable.com/v0/"

    # None falls back to OPENAI_API_KEY and the OpenAI endpoint.
    openai_api_key: str | None = None
    llm_base_url: str | None = None
    core_model: str = "gpt-4o-mini"
    temperature: float = 0.1

    request_timeout: float = 60 * 2
    cascade_delete: bool = True
