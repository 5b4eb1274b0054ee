"""
Runtime settings and the persisted user preferences.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".aniracetam"
DEFAULT_TRANSLATE_URL = "https://translate.googleapis.com/translate_a/single"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Runtime settings read from ANIRACETAM_* environment variables."""
    model_config = SettingsConfigDict(env_prefix="ANIRACETAM_")

    home: Path = Field(default=DEFAULT_HOME, description="Where sentences and config are kept")
    log_level: str = Field(default="WARNING", description="Logging level name")
    translate_url: str = Field(default=DEFAULT_TRANSLATE_URL, description="Translation endpoint")
    translate_timeout: float = Field(default=10.0, gt=0, description="Translation timeout (s)")

    @field_validator("home")
    @classmethod
    def _expand_home(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_level(cls, value) -> str:
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError("log level must be one of " + ", ".join(LOG_LEVELS))
        return level

    @property
    def data_dir(self) -> Path:
        return self.home

    @property
    def db_path(self) -> Path:
        return self.data_dir / "sentences.db"

    @property
    def config_path(self) -> Path:
        return self.data_dir / "config.json"

    @property
    def legacy_sentences_path(self) -> Path:
        # flat JSON list written by the 1.x releases
        return self.data_dir / "sentences.json"


class UserConfig(BaseModel):
    # 1.x releases wrote "targetLanguage"
    target_language: Optional[str] = Field(
        None, validation_alias=AliasChoices("target_language", "targetLanguage")
    )


def get_settings(data_dir: Optional[str] = None, log_level: Optional[str] = None) -> Settings:
    """Build settings from the environment; explicit arguments win."""
    overrides = {}
    if data_dir:
        overrides["home"] = data_dir
    if log_level:
        overrides["log_level"] = log_level
    return Settings(**overrides)


def load_user_config(path: Path) -> UserConfig:
    """Load preferences; a missing or broken file gives an empty config."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return UserConfig.model_validate(json.load(f))
    except FileNotFoundError:
        return UserConfig()
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return UserConfig()


def save_user_config(path: Path, config: UserConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(config.model_dump_json(indent=2))
    logger.info("Saved config to %s", path)
