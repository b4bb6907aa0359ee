"""Application configuration management.

Handles loading and saving the JSON config file shared with the shell wrapper:
    - JSON config file (~/.config/kai/config.json, camelCase keys)
    - Environment variables (KAI_* prefix)
    - Default values

Key components:
    - KaiConfig: Main configuration model
    - RecentDirectory: One entry of the recency list
    - load_config(): Safe config loading with fallback
    - save_config(): Explicit write of the whole config
    - save_recent_dirs(): Rewrite only the recency list, keeping the rest of the file
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping, Sequence
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from unittest.mock import patch

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from kai.core.result import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "KAI_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "kai" / "config.json"
DEFAULT_MAX_RECENTS = 10


class RecentDirectory(BaseModel):
    """A previously selected directory. ``accessed_at`` is in milliseconds."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    path: str
    name: str
    accessed_at: int = 0


class KaiConfig(BaseSettings):
    """Picker configuration: where projects live and what was picked recently."""

    model_config = SettingsConfigDict(
        env_prefix="KAI_",
        extra="ignore",
    )

    projects_dir: Path = Field(
        default_factory=lambda: Path.home() / "Projects",
        serialization_alias="projectsDir",
        description="Root directory scanned for projects.",
    )
    recent_dirs: list[RecentDirectory] = Field(
        default_factory=list,
        serialization_alias="recentDirs",
        description="Most-recent-first list of picked directories.",
    )
    max_recents: int = Field(
        default=DEFAULT_MAX_RECENTS,
        ge=1,
        serialization_alias="maxRecents",
        description="Capacity of the recency list.",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Ensure environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


# JSON spelling -> field name
_FILE_KEYS: dict[str, str] = {
    "projectsDir": "projects_dir",
    "recentDirs": "recent_dirs",
    "maxRecents": "max_recents",
}


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(candidate).expanduser()


def _read_raw_config(path: Path) -> dict[str, Any]:
    """The JSON object stored at ``path`` with its keys as written."""
    if not path.exists():
        return {}

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be an object.")

    return data


def _read_config_file(path: Path) -> dict[str, Any]:
    return {_FILE_KEYS.get(key, key): value for key, value in _read_raw_config(path).items()}


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables (KAI_MAX_RECENTS, ...)."""
    prefix = KaiConfig.model_config.get("env_prefix", "")
    return {field for field in KaiConfig.model_fields if f"{prefix}{field}".upper() in env_vars}


def _write_json(payload: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def save_config(config: KaiConfig, path: Path) -> None:
    """Write ``config`` to ``path`` as indented JSON with camelCase keys."""
    _write_json(config.model_dump(mode="json", by_alias=True), path.expanduser())


def save_recent_dirs(recent_dirs: Sequence[RecentDirectory], path: Path) -> None:
    """Replace ``recentDirs`` in the file at ``path``; every other key is kept as written.

    Raises:
        ConfigurationError: the existing file is not a readable JSON object.
        OSError: the file cannot be written.
    """
    target = path.expanduser()
    if target.exists():
        payload = _read_raw_config(target)
    else:
        payload = KaiConfig.model_construct().model_dump(mode="json", by_alias=True)
    payload["recentDirs"] = [entry.model_dump(mode="json", by_alias=True) for entry in recent_dirs]
    _write_json(payload, target)


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[KaiConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.
    If the file is invalid, returns default config + error message and leaves
    the file alone. A missing file is created with the defaults.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = _resolve_config_path(config_path, env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    file_data: dict[str, Any] = {}

    try:
        file_data = _read_config_file(resolved_path)
        file_loaded = resolved_path.exists()
    except ConfigurationError as exc:
        error = str(exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    with context_manager:
        try:
            config = KaiConfig(**file_data)
        except ValidationError as exc:
            error = str(exc)
            config = KaiConfig.model_construct()

    if error:
        logger.warning("Failed to load config from %s, using defaults", resolved_path)
    elif not file_loaded:
        try:
            # model_construct skips the settings sources, so KAI_* values stay out of the file.
            save_config(KaiConfig.model_construct(), resolved_path)
        except OSError as exc:
            logger.warning("Could not write default config to %s: %s", resolved_path, exc)

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result
