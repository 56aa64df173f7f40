"""Pin EngineConfig loading and helper behavior."""

import pytest
from pydantic import ValidationError

from corrosionbot import config_loader
from corrosionbot.config_loader import EngineConfig, get_config, load_engine_config, reload_config


@pytest.fixture
def restore_config():
    yield
    config_loader._config = None


class TestConfigLoading:
    def test_load_config_returns_engine_config(self, config):
        assert isinstance(config, EngineConfig)
        assert config.source_path.endswith("config.yaml")

    def test_llm_settings(self, config):
        assert config.llm.classifier_model == "gpt-4o-mini"
        assert config.llm.classifier_temperature == 0.0
        assert config.llm.classifier_max_tokens == 700
        assert config.llm.chat_temperature == 0.2

    def test_disclaimer(self, config):
        assert "TDS/SDS" in config.disclaimer

    def test_environment_rules(self, config):
        assert config.environment.baseline == "C4"
        assert "banchina" in config.environment.port_keywords
        assert "zona industriale" in config.environment.industrial_keywords
        assert "piattaforma" in config.environment.offshore_keywords

    def test_ui_options(self, config):
        assert config.ui.max_images == 5
        assert len(config.ui.areas) == 11
        assert config.ui.environments[0] == "Auto"
        assert config.ui.substrates == ["Steel", "Aluminium"]

    def test_summary_has_no_secrets(self, config):
        summary = config.summary()
        assert summary["environment_baseline"] == "C4"
        assert "key" not in str(summary).lower()


class TestCustomConfig:
    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("llm:\n  classifier_model: gemini-2.0-flash\n", encoding="utf-8")
        config = load_engine_config(str(path))
        assert config.llm.classifier_model == "gemini-2.0-flash"
        assert config.llm.classifier_max_tokens == 700
        assert "Non-binding" in config.disclaimer
        assert config.ui.areas == []

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        config = load_engine_config(str(path))
        assert config.environment.baseline == "C4"

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("disclaimer: Custom notice.\n", encoding="utf-8")
        monkeypatch.setenv("CORROSIONBOT_CONFIG", str(path))
        assert load_engine_config().disclaimer == "Custom notice."

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_engine_config(str(tmp_path / "nope.yaml"))

    def test_bad_section_shape_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("ui:\n  max_images: many\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_engine_config(str(path))


class TestSingleton:
    def test_get_config_is_cached(self, restore_config):
        assert get_config() is get_config()

    def test_reload_replaces_cached_config(self, tmp_path, restore_config):
        first = get_config()
        path = tmp_path / "reload.yaml"
        path.write_text("app:\n  name: Reloaded\n", encoding="utf-8")
        reloaded = reload_config(str(path))
        assert reloaded is not first
        assert get_config().app.name == "Reloaded"
