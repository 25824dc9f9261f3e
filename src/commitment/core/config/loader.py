from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from commitment.core.config.schema import AppConfig

PROJECT_CONFIG_NAME = ".commitment.yaml"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    content = yaml.safe_load(path.read_text(encoding="utf-8"))
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return content


def _resolve_instance_path(instance_path: str | Path | None) -> Path | None:
    explicit = instance_path or os.getenv("COMMITMENT_CONFIG_FILE")
    if explicit:
        return Path(explicit)
    project = Path.cwd() / PROJECT_CONFIG_NAME
    return project if project.exists() else None


def load_app_config(
    defaults_path: str | Path | None = None,
    instance_path: str | Path | None = None,
) -> AppConfig:
    defaults = _load_yaml(Path(defaults_path)) if defaults_path else {}

    resolved = _resolve_instance_path(instance_path)
    instance = _load_yaml(resolved) if resolved else {}

    merged = _deep_merge(defaults, instance)

    env_log_level = os.getenv("COMMITMENT_LOG_LEVEL")
    if env_log_level:
        # A bare `telemetry:` key loads as None; other non-mappings are left for validation to reject.
        telemetry = merged.get("telemetry")
        if telemetry is None:
            telemetry = {}
        if isinstance(telemetry, dict):
            merged["telemetry"] = {**telemetry, "log_level": env_log_level}

    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid commitment configuration: {exc}") from exc
