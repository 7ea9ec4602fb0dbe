from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .errors import ConfigError
from .extractors import SourceLanguage

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".live-env-validator.yaml"
DEFAULT_ENV_GLOB = ".env*"
DEFAULT_EXCLUDE: Tuple[str, ...] = (
    ".git",
    "node_modules",
    "vendor",
    "dist",
    "build",
    ".venv",
    "venv",
    "__pycache__",
)


@dataclass(slots=True)
class Config:
    env_glob: str = DEFAULT_ENV_GLOB
    exclude: Tuple[str, ...] = DEFAULT_EXCLUDE
    languages: Tuple[SourceLanguage, ...] = field(default_factory=lambda: tuple(SourceLanguage))

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "Config":
        config = cls()
        if "env_glob" in data:
            if not isinstance(data["env_glob"], str) or not data["env_glob"].strip():
                raise ConfigError("env_glob must be a non-empty string")
            config.env_glob = data["env_glob"].strip()
        if "exclude" in data:
            config.exclude = tuple(_string_list(data["exclude"], "exclude"))
        if "languages" in data:
            names = _string_list(data["languages"], "languages")
            try:
                config.languages = tuple(SourceLanguage(name.lower()) for name in names)
            except ValueError as exc:
                supported = ", ".join(lang.value for lang in SourceLanguage)
                raise ConfigError(f"Unknown language in config ({supported} supported): {exc}") from exc
        return config


def _string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ConfigError(f"{key} must be a string or a list of strings")


def load_config(root: Path) -> Config:
    path = Path(root) / CONFIG_FILENAME
    if not path.exists():
        return Config()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid {CONFIG_FILENAME}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping")
    logger.debug("Loaded config from %s", path)
    return Config.from_mapping(data)
