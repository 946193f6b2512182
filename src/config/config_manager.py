"""
Configuration Manager for the sentiment engine
Handles loading, validation, and merging of engine configurations
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Mapping, Optional

from dotenv import load_dotenv
from jsonschema import validate, ValidationError
from pydantic import ValidationError as SettingsValidationError

from ..sentiment_engine.errors import ConfigurationError
from .settings import EngineSettings

logger = logging.getLogger(__name__)


class ConfigPaths:
    """Configuration file paths"""
    BASE_DIR = Path(__file__).resolve().parent.parent.parent
    CONFIG_DIR = BASE_DIR / "config"
    DEFAULT_CONFIG = CONFIG_DIR / "default_config.json"
    CONFIG_SCHEMA = CONFIG_DIR / "config_schema.json"


_TRUTHY = {"1", "true", "yes", "on"}

# env var → (config path, parser)
ENV_OVERRIDES = {
    "SENTIMENT_DEFAULT_LANGUAGE": (("default_language",), str),
    "SENTIMENT_MODEL_PATH": (("model_path",), str),
    "SENTIMENT_MAX_TEXT_LENGTH": (("max_text_length",), int),
    "SENTIMENT_BATCH_CONCURRENCY": (("batch_concurrency",), int),
    "SENTIMENT_CACHE_CAPACITY": (("cache", "capacity"), int),
    "SENTIMENT_CACHE_TTL": (("cache", "ttl_seconds"), float),
    "SENTIMENT_CONTEXTUAL_ENABLED": (("contextual", "enabled"), lambda v: v.strip().lower() in _TRUTHY),
    "SENTIMENT_CONTEXTUAL_TIMEOUT": (("contextual", "timeout_seconds"), float),
    "SENTIMENT_CONTEXTUAL_ENDPOINT": (("contextual", "endpoint"), str),
    "HUGGINGFACE_API_KEY": (("contextual", "api_key"), str),
}


class ConfigurationManager:
    """
    Manages engine configuration with validation

    Merge order: ``default_config.json`` -> environment -> caller overrides.
    """

    def __init__(
        self,
        default_config_path: Optional[Path] = None,
        schema_path: Optional[Path] = None,
        use_env: bool = True,
    ):
        self.default_config_path = Path(default_config_path or ConfigPaths.DEFAULT_CONFIG)
        self.schema_path = Path(schema_path or ConfigPaths.CONFIG_SCHEMA)
        self.use_env = use_env
        if use_env:
            load_dotenv()
        self.default_config = self._load_json(self.default_config_path, "Default config")
        self.schema = self._load_json(self.schema_path, "Config schema")

    @staticmethod
    def _load_json(path: Path, what: str) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"{what} not found at {path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {what.lower()}: {e}")

    def validate_config(self, config: Dict[str, Any]) -> bool:
        """
        Validate configuration against JSON schema

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            validate(instance=config, schema=self.schema)
        except ValidationError as e:
            location = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigurationError(f"{location}: {e.message}") from None

        # Additional custom validations
        self._validate_combiner_weights(config)
        self._validate_thresholds(config)
        return True

    def _validate_combiner_weights(self, config: Dict[str, Any]) -> None:
        """Validate combiner weights sum to 1"""
        weights = config.get('combiner', {}).get('weights', {})
        total_weight = sum(weights.values())

        if abs(total_weight - 1.0) > 0.01:  # Allow for floating point precision
            raise ConfigurationError(
                f"Combiner weights must sum to 1, got {total_weight:.3f}"
            )

        active = [k for k in ('rule_based', 'naive_bayes') if weights.get(k, 0) > 0]
        if not active:
            raise ConfigurationError(
                "At least one of rule_based / naive_bayes needs a weight > 0"
            )

    def _validate_thresholds(self, config: Dict[str, Any]) -> None:
        lexicon = config.get('lexicon', {})
        pos = lexicon.get('positive_threshold', 0.15)
        neg = lexicon.get('negative_threshold', -0.15)
        if not neg < pos:
            raise ConfigurationError(
                f"negative_threshold ({neg}) must be below positive_threshold ({pos})"
            )

    def merge_configs(self, *configs: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Deep merge multiple configuration dictionaries
        Later configs override earlier ones
        """
        def deep_merge(base: Dict, override: Mapping) -> Dict:
            """Recursively merge two dictionaries"""
            result = base.copy()

            for key, value in override.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, Mapping):
                    result[key] = deep_merge(result[key], value)
                else:
                    result[key] = value

            return result

        result: Dict[str, Any] = {}
        for config in configs:
            result = deep_merge(result, config)

        return result

    def env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Nested override dict built from recognised environment variables"""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for var, (path, parse) in ENV_OVERRIDES.items():
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            try:
                value = parse(raw)
            except ValueError:
                raise ConfigurationError(f"{var}={raw!r} is not a valid value")

            node = overrides
            for key in path[:-1]:
                node = node.setdefault(key, {})
            node[path[-1]] = value
            logger.debug("Config override from %s", var)
        return overrides

    def get_config(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Final merged and validated configuration dict
        Merges: default -> environment -> caller overrides
        """
        layers = [self.default_config]
        if self.use_env:
            layers.append(self.env_overrides())
        if overrides:
            layers.append(overrides)
        config = self.merge_configs(*layers)
        self.validate_config(config)
        return config

    def get_settings(self, overrides: Optional[Mapping[str, Any]] = None) -> EngineSettings:
        """Typed ``EngineSettings`` for the merged configuration"""
        config = self.get_config(overrides)
        try:
            return EngineSettings.model_validate(config)
        except SettingsValidationError as e:
            raise ConfigurationError(str(e)) from None


# Singleton instance
_config_manager = None

def get_config_manager() -> ConfigurationManager:
    """Get singleton ConfigurationManager instance"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigurationManager()
    return _config_manager
