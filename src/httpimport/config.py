"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (HTTPIMPORT__CACHE__SCOPE=local)
  2. httpimport.yaml        (searched in cwd, then platform config dir)
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

IMPORT_DIR_NAME = ".import"


def _find_config_file() -> str | None:
    """Return the path of the first httpimport.yaml found, or None."""
    candidates = [
        Path("httpimport.yaml"),
        Path(platformdirs.user_config_dir("httpimport")) / "httpimport.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    scope: Literal["local", "global"] = "global"
    local_root: str = str(Path.cwd() / IMPORT_DIR_NAME)
    global_root: str = str(Path.home() / IMPORT_DIR_NAME)
    # Recorded in every metadata record; never used to expire artifacts.
    ttl_hours: int = 24

    @property
    def root_dir(self) -> Path:
        root = self.local_root if self.scope == "local" else self.global_root
        return Path(root).expanduser()

    @property
    def cache_dir(self) -> Path:
        return self.root_dir / "cache"

    @property
    def meta_dir(self) -> Path:
        return self.root_dir / "meta"

    @property
    def status_path(self) -> Path:
        return self.root_dir / "status.json"


class FetcherSettings(BaseModel):
    timeout_seconds: float = 30.0
    max_redirects: int = 10
    user_agent: str = "httpimport/1.0"
    types_header: str = "X-TypeScript-Types"


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: HTTPIMPORT__FETCHER__MAX_REDIRECTS=5
        env_prefix="HTTPIMPORT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
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
