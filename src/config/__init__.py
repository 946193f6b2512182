"""Sentiment Engine Configuration Module"""
from .settings import (
    CacheSettings,
    CombinerSettings,
    ContextualSettings,
    EngineSettings,
    LexiconSettings,
    NaiveBayesSettings,
)
from .config_manager import ConfigurationManager, get_config_manager

__all__ = [
    'CacheSettings',
    'CombinerSettings',
    'ContextualSettings',
    'ConfigurationManager',
    'EngineSettings',
    'LexiconSettings',
    'NaiveBayesSettings',
    'get_config_manager',
]
