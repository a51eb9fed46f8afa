"""Configuration models and loading for hookable."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from hookable.logging_utils import configure_logging

CONFIG_FILENAME = ".hookable.yaml"


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = "WARNING"


class DeprecationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    warn_context: bool = True


class InvocationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # False pads missing arguments with None and drops extras.
    strict_arity: bool = True


class HookableConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    deprecations: DeprecationConfig = Field(default_factory=DeprecationConfig)
    invocation: InvocationConfig = Field(default_factory=InvocationConfig)


_active_config = HookableConfig()


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    return data or {}


def load_effective_config(
    path: str | Path | None = None,
    runtime_override: dict[str, Any] | None = None,
) -> HookableConfig:
    """Load config with precedence runtime > .hookable.yaml in ``path`` > defaults."""
    merged: dict[str, Any] = {}
    if path is not None:
        merged = _deep_merge(merged, _load_yaml(Path(path) / CONFIG_FILENAME))
    if runtime_override:
        merged = _deep_merge(merged, runtime_override)
    return HookableConfig.model_validate(merged)


def get_config() -> HookableConfig:
    return _active_config


def apply_config(config: HookableConfig) -> None:
    """Install ``config`` process-wide.

    Compiled invocation functions read ``invocation`` at compile time, so hooks
    compiled before this call keep their previous arity policy until their next
    registration change.
    """
    global _active_config
    _active_config = config
    configure_logging(config.logging.level)
