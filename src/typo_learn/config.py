"""Configuration loading and management for typo-learn.

Settings are resolved from, lowest to highest priority:
defaults < settings.json in the data directory < .env files < TYPO_LEARN_* environment variables.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from typo_learn.errors import ConfigurationError

ENV_PREFIX = "TYPO_LEARN_"

# Tokens scoring at least this much are treated as the same slot during alignment
ALIGNMENT_THRESHOLD = 0.5

# Minimum similarity for a pair to be learned as a typo correction
CORRECTION_THRESHOLD = 0.7

# Minimum confidence to auto-apply a correction (reached at ~3 occurrences)
MIN_AUTO_APPLY_CONFIDENCE = 0.55

# Maximum UTF-8 byte length difference between a typo and its correction
MAX_LENGTH_DIFF = 1


class LoadFailurePolicy(str, Enum):
    """What the engine does when its store cannot be read at startup."""

    FALLBACK_EMPTY = "fallback-empty"  # Log and start with an empty cache
    PROPAGATE = "propagate"  # Raise the StorageError to the caller


class EngineSettings(BaseModel):
    """Tunable parameters of the learning engine."""

    alignment_threshold: float = Field(default=ALIGNMENT_THRESHOLD, ge=0.0, le=1.0)
    correction_threshold: float = Field(default=CORRECTION_THRESHOLD, ge=0.0, le=1.0)
    min_confidence: float = Field(default=MIN_AUTO_APPLY_CONFIDENCE, ge=0.0, le=1.0)
    max_length_diff: int = Field(default=MAX_LENGTH_DIFF, ge=0)
    load_failure: LoadFailurePolicy = LoadFailurePolicy.FALLBACK_EMPTY
    # None = <data dir>/corrections.json
    store_path: str | None = None

    def resolved_store_path(self) -> Path:
        """Path of the JSON correction store."""
        if self.store_path:
            return Path(self.store_path).expanduser()
        return get_data_dir() / "corrections.json"


def get_data_dir() -> Path:
    """Get the directory holding settings and the correction store.

    Uses TYPO_LEARN_HOME when set, otherwise ~/.typo-learn.
    """
    home = os.environ.get(f"{ENV_PREFIX}HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".typo-learn"


def get_settings_path() -> Path:
    """Get the path of settings.json."""
    return get_data_dir() / "settings.json"


def _load_env_files() -> None:
    # Priority: local .env > <data dir>/.env; neither overrides real env vars
    load_dotenv()
    user_env = get_data_dir() / ".env"
    if user_env.exists():
        load_dotenv(user_env)


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in EngineSettings.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def load_settings(path: Path | str | None = None, use_env: bool = True) -> EngineSettings:
    """Load engine settings.

    Args:
        path: settings.json to read (defaults to the data directory's)
        use_env: Apply .env files and TYPO_LEARN_* environment variables

    Returns:
        EngineSettings instance

    Raises:
        ConfigurationError: If the settings file or an override is invalid
    """
    settings_path = Path(path) if path else get_settings_path()
    data: dict[str, Any] = {}

    if settings_path.exists():
        try:
            with open(settings_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Could not read settings file: {e}",
                context={"path": str(settings_path)},
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Settings file must contain a JSON object",
                context={"path": str(settings_path)},
            )

    if use_env:
        _load_env_files()
        data.update(_env_overrides())

    try:
        return EngineSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", context={"path": str(settings_path)}) from e


def save_settings(settings: EngineSettings, path: Path | str | None = None) -> Path:
    """Save settings to JSON file with atomic write.

    Args:
        settings: Settings to save
        path: Target file (defaults to the data directory's settings.json)

    Returns:
        Path to the saved settings file
    """
    settings_path = Path(path) if path else get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = settings_path.with_suffix(".json.tmp")

    # Atomic write: write to temp file, then rename
    with open(temp_path, "w", encoding="utf-8") as f:
        json.dump(settings.model_dump(mode="json"), f, indent=2)

    temp_path.replace(settings_path)
    return settings_path
