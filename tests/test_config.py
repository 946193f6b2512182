"""
Unit Tests – Configuration Manager
====================================
"""

from __future__ import annotations

import json

import pytest

from src.config.config_manager import ConfigPaths, ConfigurationManager, get_config_manager
from src.config.settings import EngineSettings
from src.sentiment_engine.errors import ConfigurationError


@pytest.fixture()
def manager():
    return ConfigurationManager(use_env=False)


class TestDefaults:

    def test_default_file_validates(self, manager):
        config = manager.get_config()
        assert config["default_language"] == "en"
        assert config["combiner"]["weights"]["naive_bayes"] == 0.45

    def test_settings_match_model_defaults(self, manager):
        assert manager.get_settings() == EngineSettings()

    def test_singleton(self):
        assert get_config_manager() is get_config_manager()


class TestOverrides:

    def test_deep_merge_keeps_siblings(self, manager):
        settings = manager.get_settings({"cache": {"capacity": 10}, "lexicon": {"negation_window": 2}})
        assert settings.cache.capacity == 10
        assert settings.cache.ttl_seconds == 0
        assert settings.lexicon.negation_window == 2
        assert settings.lexicon.positive_threshold == 0.15

    def test_merge_configs_later_wins(self, manager):
        merged = manager.merge_configs({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}}, {"b": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 4}

    def test_weights_must_sum_to_one(self, manager):
        with pytest.raises(ConfigurationError, match="Invalid engine configuration"):
            manager.get_settings({"combiner": {"weights": {"rule_based": 0.9}}})

    def test_weights_need_a_local_classifier(self, manager):
        with pytest.raises(ConfigurationError):
            manager.get_settings({
                "combiner": {"weights": {"rule_based": 0.0, "naive_bayes": 0.0, "contextual": 1.0}},
            })

    def test_unsupported_language_rejected(self, manager):
        with pytest.raises(ConfigurationError):
            manager.get_settings({"default_language": "xx"})

    def test_thresholds_must_be_ordered(self, manager):
        with pytest.raises(ConfigurationError):
            manager.get_settings({"lexicon": {"positive_threshold": 0.0, "negative_threshold": 0.0}})

    def test_unknown_key_rejected(self, manager):
        with pytest.raises(ConfigurationError):
            manager.get_settings({"cache": {"size": 5}})


class TestEnvironment:

    def test_env_overrides_nested(self, manager):
        overrides = manager.env_overrides({
            "SENTIMENT_CACHE_CAPACITY": "50",
            "SENTIMENT_CONTEXTUAL_ENABLED": "yes",
            "HUGGINGFACE_API_KEY": "hf_abc",
            "SENTIMENT_MODEL_PATH": "",
        })
        assert overrides == {
            "cache": {"capacity": 50},
            "contextual": {"enabled": True, "api_key": "hf_abc"},
        }

    def test_bad_env_value(self, manager):
        with pytest.raises(ConfigurationError):
            manager.env_overrides({"SENTIMENT_BATCH_CONCURRENCY": "lots"})

    def test_env_layer_applied(self, monkeypatch):
        monkeypatch.setenv("SENTIMENT_DEFAULT_LANGUAGE", "de")
        monkeypatch.setenv("SENTIMENT_CONTEXTUAL_TIMEOUT", "0.5")
        settings = ConfigurationManager(use_env=True).get_settings()
        assert settings.default_language == "de"
        assert settings.contextual.timeout_seconds == 0.5

    def test_caller_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("SENTIMENT_DEFAULT_LANGUAGE", "de")
        settings = ConfigurationManager(use_env=True).get_settings({"default_language": "fr"})
        assert settings.default_language == "fr"


class TestFiles:

    def test_missing_default_config(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigurationManager(default_config_path=tmp_path / "absent.json", use_env=False)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigurationManager(default_config_path=path, use_env=False)

    def test_custom_default_file(self, tmp_path):
        with open(ConfigPaths.DEFAULT_CONFIG, encoding="utf-8") as f:
            config = json.load(f)
        config["batch_concurrency"] = 4
        path = tmp_path / "custom.json"
        path.write_text(json.dumps(config), encoding="utf-8")

        settings = ConfigurationManager(default_config_path=path, use_env=False).get_settings()
        assert settings.batch_concurrency == 4
