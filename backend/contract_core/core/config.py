from functools import lru_cache
import json

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_list_value(value: str) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        raw = value.strip()
        if raw == "":
            return []
        try:
            parsed = json.loads(raw)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except ValueError:
            pass
        return [item.strip() for item in raw.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _default_allowed_models() -> dict[str, list[str]]:
    return {
        "openai": ["gpt-4o-mini", "gpt-4o"],
        "claude": ["claude-3-5-haiku-20241022", "claude-3-5-sonnet-20241022"],
        "groq": ["llama-3.3-70b-versatile"],
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        validate_by_name=True,
        populate_by_name=True,
    )

    contract_extraction_strategy: str = Field(
        default="pattern",
        validation_alias=AliasChoices("CONTRACT_EXTRACTION_STRATEGY", "EXTRACTION_STRATEGY"),
    )

    ai_contract_extract_provider: str = "openai"
    ai_contract_extract_model: str = ""
    ai_contract_extract_max_chars: int = 60000

    ai_allowed_providers_raw: str = Field(
        default="mock,openai,claude,groq",
        validation_alias=AliasChoices("AI_ALLOWED_PROVIDERS"),
    )
    ai_allowed_models: dict[str, list[str]] = Field(default_factory=_default_allowed_models)
    ai_max_tokens: int = 2048
    ai_timeout_seconds: float = 30.0
    enable_ai_overrides: bool = False

    openai_api_key: str = ""
    anthropic_api_key: str = ""
    groq_api_key: str = ""

    @field_validator("contract_extraction_strategy", "ai_contract_extract_provider", mode="before")
    @classmethod
    def _lower_strip(cls, value):
        if value is None:
            return ""
        return str(value).strip().lower()

    @field_validator("ai_allowed_models", mode="before")
    @classmethod
    def _parse_models(cls, value):
        if isinstance(value, str):
            if value.strip() == "":
                return {}
            return json.loads(value)
        return value

    @property
    def ai_allowed_providers(self) -> list[str]:
        return [name.lower() for name in _parse_list_value(self.ai_allowed_providers_raw)]


@lru_cache
def get_settings() -> Settings:
    return Settings()
