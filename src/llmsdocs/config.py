"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (LLMSDOCS__SERVER__TRANSPORT=http)
  2. llmsdocs.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = str(Path(platformdirs.user_cache_dir("llmsdocs")) / "docs")


def _find_config_file() -> str | None:
    """Return the path of the first llmsdocs.yaml found, or None."""
    candidates = [
        Path("llmsdocs.yaml"),
        Path(platformdirs.user_config_dir("llmsdocs")) / "llmsdocs.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080
    auth_enabled: bool = True
    auth_key: str = ""


class DocsSettings(BaseModel):
    base_url: str = "https://docs.enso.build"
    product_name: str = "Enso"


class CacheSettings(BaseModel):
    backend: Literal["disk", "memory"] = "disk"
    cache_dir: str = _DEFAULT_CACHE_DIR
    memory_ttl_seconds: int = 3600
    disk_ttl_seconds: int = 24 * 3600
    prune_interval_hours: int = 6


class FetcherSettings(BaseModel):
    timeout_seconds: float = 30.0
    user_agent: str = "llmsdocs/1.0"


class SearchSettings(BaseModel):
    default_limit: int = 5
    context_max_sections: int = 3
    min_section_length: int = 50


class CompletionSettings(BaseModel):
    api_key: str | None = None
    endpoint: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 1000
    top_p: float = 0.9
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    timeout_seconds: float = 60.0


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: LLMSDOCS__CACHE__BACKEND=memory
        env_prefix="LLMSDOCS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    docs: DocsSettings = DocsSettings()
    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    search: SearchSettings = SearchSettings()
    completion: CompletionSettings = CompletionSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
