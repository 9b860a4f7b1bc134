# tests/unit/test_config.py
"""Tests for config loading, default creation and path resolution."""

from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from gofast_planner.config import PlannerConfig, get_db_path, load_config


class TestLoadConfig:
    def test_missing_file_creates_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"

        config = load_config(path)

        assert path.exists()
        assert config == PlannerConfig()
        written = yaml.safe_load(path.read_text())
        assert written["provider"] == "ollama"
        assert written["generation"]["timeout"] == 180.0

    def test_loads_yaml_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "provider: lm_studio\n"
            "lm_studio:\n"
            "  model: llama-3.1-8b\n"
            "generation:\n"
            "  timeout: 60\n"
            "  json_mode: false\n"
        )

        config = load_config(path)

        assert config.provider == "lm_studio"
        assert config.lm_studio.model == "llama-3.1-8b"
        assert config.lm_studio.max_tokens == 8000
        assert config.generation.timeout == 60
        assert config.generation.json_mode is False
        assert config.ollama.model == "qwen2.5:14b-instruct"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("agent:\n  enabled: true\nollama:\n  keep_alive: 5m\n")

        config = load_config(path)

        assert config.ollama == PlannerConfig().ollama

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path) == PlannerConfig()

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("provider: openai\n")

        with pytest.raises(ValidationError):
            load_config(path)


class TestDbPath:
    def test_explicit_path(self, tmp_path):
        config = PlannerConfig(storage={"db_path": str(tmp_path / "plans.db")})
        assert get_db_path(config) == str(tmp_path / "plans.db")

    def test_default_in_config_dir(self, tmp_path):
        with patch("gofast_planner.config.loader.get_config_dir", return_value=tmp_path):
            assert get_db_path(PlannerConfig()) == str(tmp_path / "planner.db")
