# campusdash/config.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import PositiveInt, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigError
from .services.billing import DueDayPolicy

ENV_PREFIX = "CAMPUSDASH_"


class Settings(BaseSettings):
    data_dir: Optional[Path] = None   # None -> resolved by the Qt shell
    db_name: str = "campusdash.db"
    legacy_file: str = "campusdash-db.json"
    log_level: int = logging.INFO
    deduction_interval_min: PositiveInt = 60
    due_day_policy: DueDayPolicy = DueDayPolicy.CLAMP
    default_currency: str = "IDR"

    model_config = {
        "env_prefix": ENV_PREFIX,
        "env_ignore_empty": True,
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("data_dir")
    @classmethod
    def _expand_data_dir(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @field_validator("log_level", mode="before")
    @classmethod
    def _level_from_name(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        name = value.strip().upper()
        if name.isdigit():
            return int(name)
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("due_day_policy", mode="before")
    @classmethod
    def _policy_lowercase(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("default_currency")
    @classmethod
    def _currency_uppercase(cls, value: str) -> str:
        return value.strip().upper()

    def db_path(self, data_dir: Path) -> Path:
        return data_dir / self.db_name


def _from_mapping(environ: Mapping[str, str]) -> dict[str, str]:
    values = {}
    for key, raw in environ.items():
        if not key.startswith(ENV_PREFIX) or not raw.strip():
            continue
        values[key[len(ENV_PREFIX):].lower()] = raw.strip()
    return values


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Reads CAMPUSDASH_* variables from the process environment, or from
    `environ` when given. Invalid values raise ConfigError.
    """
    try:
        if environ is None:
            return Settings()
        return Settings(**_from_mapping(environ))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration:\n{exc}") from exc
