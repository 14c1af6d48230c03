"""Tests for configuration discovery and loading."""

import pytest

from core.config import DEFAULT_CONFIG_NAME, find_project_root, load_config
from core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("TRAINFORGE_OWNER", raising=False)
    monkeypatch.delenv("TRAINFORGE_DB_PATH", raising=False)


def test_defaults_without_config_file(tmp_path):
    config = load_config(start_dir=tmp_path)
    assert config["owner_id"] == "local"
    assert config["database"]["path"] == "trainforge.duckdb"
    assert config["llm"]["timeout"] == 60
    assert config["providers"]["anthropic"]["api_version"] == "2023-06-01"


def test_yaml_is_merged_over_defaults(tmp_path):
    (tmp_path / DEFAULT_CONFIG_NAME).write_text(
        "owner_id: alice\nllm:\n  timeout: 30\nproviders:\n  azure:\n    endpoint: https://res.openai.azure.com\n"
    )
    config = load_config(start_dir=tmp_path)
    assert config["owner_id"] == "alice"
    assert config["llm"]["timeout"] == 30
    assert config["llm"]["temperature"] == 0.7
    assert config["providers"]["azure"]["endpoint"] == "https://res.openai.azure.com"
    assert config["providers"]["azure"]["api_version"] == "2024-02-01"


def test_config_discovered_from_subdirectory(tmp_path):
    (tmp_path / DEFAULT_CONFIG_NAME).write_text("owner_id: bob\n")
    nested = tmp_path / "data" / "raw"
    nested.mkdir(parents=True)

    assert find_project_root(nested) == tmp_path
    assert load_config(start_dir=nested)["owner_id"] == "bob"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("TRAINFORGE_OWNER", "carol")
    monkeypatch.setenv("TRAINFORGE_DB_PATH", str(tmp_path / "x.duckdb"))
    config = load_config(start_dir=tmp_path)
    assert config["owner_id"] == "carol"
    assert config["database"]["path"] == str(tmp_path / "x.duckdb")


def test_missing_explicit_config(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config("does-not-exist.yaml", start_dir=tmp_path)


def test_config_must_be_a_mapping(tmp_path):
    (tmp_path / DEFAULT_CONFIG_NAME).write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(start_dir=tmp_path)


def test_invalid_yaml(tmp_path):
    (tmp_path / DEFAULT_CONFIG_NAME).write_text("llm: [unclosed\n")
    with pytest.raises(ConfigError, match="Error parsing"):
        load_config(start_dir=tmp_path)
