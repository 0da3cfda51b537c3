from __future__ import annotations
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class SettingsError(ValueError):
    pass


class ValidationSettings(BaseModel):
    """Thresholds used by the rule sets."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_language_models: int = Field(2, ge=1)
    min_system_message_length: int = Field(20, ge=0)
    max_iterations_warning: int = Field(50, ge=1)
    max_topk_warning: int = Field(20, ge=1)
    min_tool_description_length: int = Field(15, ge=0)


DEFAULT_SETTINGS = ValidationSettings()


def load_settings(path: Optional[Path]) -> ValidationSettings:
    """Read settings from a YAML mapping; `None` or an empty file gives the defaults."""
    if path is None:
        return DEFAULT_SETTINGS
    try:
        data = yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Could not read settings from {path}: {e}") from e
    if data is None:
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping.")
    try:
        return ValidationSettings(**data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {path}: {e}") from e
