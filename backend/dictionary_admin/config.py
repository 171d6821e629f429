from typing import Any, List
import json

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_wrapping_quotes(value: str) -> str:
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        return text[1:-1].strip()
    return text


def _unwrap_singleton_brackets(value: str) -> str:
    text = _strip_wrapping_quotes(value)
    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1].strip()
        if inner and "," not in inner:
            return _strip_wrapping_quotes(inner)
    return text


def _parse_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
        if isinstance(parsed, str):
            text = parsed.strip()
        else:
            text = _unwrap_singleton_brackets(text)
        return [part.strip() for part in text.replace(";", ",").split(",") if part.strip()]
    return [str(value).strip()] if str(value).strip() else []


class Settings(BaseSettings):
    database_dsn: str = "sqlite:///./dictionary.db"
    sql_echo: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    # Keep Any here so env parser doesn't force JSON for list fields.
    default_languages: Any = ["en"]
    default_language: str = "en"
    supported_cultures: Any = ["en", "ru", "de"]
    default_culture: str = "en"
    cors_origins: Any = []
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("default_languages", mode="before")
    @classmethod
    def _split_languages(cls, value: Any) -> List[str]:
        langs = _parse_string_list(value)
        return langs or ["en"]

    @field_validator("supported_cultures", mode="before")
    @classmethod
    def _split_cultures(cls, value: Any) -> List[str]:
        cultures = [culture.lower() for culture in _parse_string_list(value)]
        return cultures or ["en"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> List[str]:
        return _parse_string_list(value)

    @field_validator("default_language", "default_culture", mode="before")
    @classmethod
    def _normalize_default_code(cls, value: Any) -> str:
        if value is None:
            return "en"
        text = _unwrap_singleton_brackets(str(value)).strip()
        return text or "en"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        text = _unwrap_singleton_brackets(str(value or "")).strip().upper()
        return text or "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DICTIONARY_",
        extra="ignore",
    )


settings = Settings()
