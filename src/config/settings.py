"""
Typed engine settings.

``ConfigurationManager`` validates the merged JSON/env configuration and
hands it over as an ``EngineSettings``.  The field defaults mirror
``config/default_config.json`` so ``EngineSettings()`` is usable on its own.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class LexiconSettings(_Section):
    positive_threshold: float = Field(0.15, ge=0.0, le=1.0)
    negative_threshold: float = Field(-0.15, ge=-1.0, le=0.0)
    intensifier_multiplier: float = Field(1.5, gt=1.0)
    diminisher_multiplier: float = Field(0.5, gt=0.0, lt=1.0)
    negation_window: int = Field(3, ge=0)
    exclamation_weight: float = Field(0.3, ge=0.0)
    max_exclamations: int = Field(4, ge=0)
    normalization_alpha: float = Field(4.0, gt=0.0)
    confidence_scale: float = Field(1.2, gt=0.0)
    neutral_confidence: float = Field(0.5, ge=0.0, le=1.0)


class NaiveBayesSettings(_Section):
    smoothing: float = Field(1.0, gt=0.0)
    negation_window: int = Field(3, ge=0)
    enable_stopwords: bool = True
    enable_negation_tokens: bool = True


class ContextualSettings(_Section):
    enabled: bool = False
    api_key: Optional[str] = None
    endpoint: str = (
        "https://api-inference.huggingface.co/models/"
        "finiteautomata/bertweet-base-sentiment-analysis"
    )
    timeout_seconds: float = Field(5.0, gt=0.0)
    request_timeout_seconds: float = Field(10.0, gt=0.0)


class CombinerSettings(_Section):
    weights: Dict[str, float] = Field(
        default_factory=lambda: {"rule_based": 0.3, "naive_bayes": 0.45, "contextual": 0.25}
    )
    agreement_bonus: float = Field(0.1, ge=0.0, le=1.0)


class CacheSettings(_Section):
    capacity: int = Field(2000, ge=1)
    ttl_seconds: float = Field(0, ge=0)


class EngineSettings(_Section):
    """Everything ``SentimentOrchestrator`` needs to build its pipeline."""
    default_language: str = "en"
    auto_detect_language: bool = True
    max_text_length: int = Field(0, ge=0)
    batch_concurrency: int = Field(16, ge=1)
    model_path: Optional[str] = None

    lexicon: LexiconSettings = Field(default_factory=LexiconSettings)
    naive_bayes: NaiveBayesSettings = Field(default_factory=NaiveBayesSettings)
    contextual: ContextualSettings = Field(default_factory=ContextualSettings)
    combiner: CombinerSettings = Field(default_factory=CombinerSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
