"""
Configuration utilities.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def read_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON settings file into a dict."""
    path = Path(path)

    if path.suffix in (".yaml", ".yml"):
        with open(path) as f:
            return yaml.safe_load(f) or {}
    elif path.suffix == ".json":
        with open(path) as f:
            return json.load(f)
    else:
        raise ValueError(f"Unsupported config file format: {path.suffix}")


class Settings(BaseSettings):
    """Runtime settings for ingestion and question answering.

    Values come from ``DOCQA_<FIELD>`` environment variables first, then from
    the settings file, then from the defaults below. ``DOCQA_MIN_SCORE=null``
    resets an optional field to None.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCQA_",
        case_sensitive=False,
        env_parse_none_str="null",
        extra="ignore",
    )

    # Collection
    collection_name: str = "documents"
    embedding_dimension: int = Field(default=3072, gt=0)

    # Chunking
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    # Retrieval and answering
    top_k: int = Field(default=5, gt=0)
    max_turns: int = Field(default=5, gt=0)
    min_score: float | None = None
    chat_model: str = "gpt-4o"
    embedding_model: str = "text-embedding-3-large"
    temperature: float = 0.0
    max_tokens: int = 1024

    # OpenAI / Azure OpenAI
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    azure_endpoint: str | None = None
    azure_api_version: str = "2024-06-01"

    # Vector store
    vector_store_url: str | None = None
    vector_store_api_key: str | None = None
    vector_store_path: str | None = None

    # Network
    request_timeout: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=2, ge=0)

    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Keyword arguments carry the file values, so the environment wins
        return env_settings, init_settings

    @model_validator(mode="after")
    def _check_overlap(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be less than chunk_size")
        return self

    @classmethod
    def from_file(cls, path: str | Path) -> "Settings":
        """Load settings from file (YAML or JSON)."""
        return cls(**read_config_file(path))


def load_config(path: str | Path = "docqa.yaml") -> Settings:
    """
    Load settings from file with environment overrides.

    Args:
        path: Path to config file; a missing file means defaults

    Returns:
        Settings instance
    """
    path = Path(path)

    if path.exists():
        return Settings.from_file(path)
    return Settings()
