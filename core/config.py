"""Project and configuration discovery helpers."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from core.errors import ConfigError

DEFAULT_CONFIG_NAME = "trainforge.yaml"
PROJECT_MARKERS = (DEFAULT_CONFIG_NAME, "pyproject.toml", ".git")

DEFAULT_CONFIG: Dict[str, Any] = {
    "owner_id": "local",
    "database": {"path": "trainforge.duckdb"},
    "llm": {
        "timeout": 60,
        "temperature": 0.7,
        "max_tokens": 1000,
    },
    "providers": {
        "openai": {"base_url": "https://api.openai.com/v1"},
        "anthropic": {"base_url": "https://api.anthropic.com", "api_version": "2023-06-01"},
        "google": {},
        "deepseek": {"base_url": "https://api.deepseek.com/v1"},
        "azure": {"endpoint_env": "AZURE_OPENAI_ENDPOINT", "api_version": "2024-02-01"},
    },
    "security": {"encryption_key_env": "TRAINFORGE_ENCRYPTION_KEY"},
}


def find_project_root(start_dir: Optional[Path] = None) -> Path:
    """Find project root by scanning upward for known project markers."""
    current = (start_dir or Path.cwd()).resolve()

    for candidate in (current, *current.parents):
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate

    return current


def resolve_config_path(config_path: Optional[str] = None, start_dir: Optional[Path] = None) -> Optional[Path]:
    """Resolve a config path from explicit input or project root discovery.

    Returns None when no config file was given and none was discovered.
    """
    if config_path:
        provided = Path(config_path).expanduser()
        if not provided.is_absolute():
            provided = (start_dir or Path.cwd()) / provided
        provided = provided.resolve()
        if not provided.exists():
            raise ConfigError(f"Config file not found: {provided}")
        return provided

    config_file = find_project_root(start_dir) / DEFAULT_CONFIG_NAME
    if not config_file.exists():
        return None
    return config_file


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None, start_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML, layered over the built-in defaults."""
    load_dotenv()

    path = resolve_config_path(config_path, start_dir)
    data: Dict[str, Any] = {}
    if path is not None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing configuration file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping")

    config = _deep_merge(DEFAULT_CONFIG, data)

    owner = os.getenv("TRAINFORGE_OWNER")
    if owner:
        config["owner_id"] = owner
    db_path = os.getenv("TRAINFORGE_DB_PATH")
    if db_path:
        config["database"]["path"] = db_path

    return config
