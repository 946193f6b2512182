"""
Sentiment Engine – Data Models
===============================
Pydantic models shared by every stage of the hybrid pipeline:
requests, per-classifier outputs, blended results, batch slots and
metrics snapshots.

JSON output uses camelCase aliases (``processingTimeMs``, ``tweetId``)
so the web layer can serialise results unchanged::

    result.model_dump(mode="json", by_alias=True)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ─────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────

class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ClassifierTag(str, Enum):
    """Which classifier(s) produced a result."""
    RULE_BASED = "rule-based"
    NAIVE_BAYES = "naive-bayes"
    CONTEXTUAL = "contextual"
    HYBRID = "hybrid"


ALL_LABELS = (SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE, SentimentLabel.NEUTRAL)


def coerce_label(value: Union[str, SentimentLabel]) -> SentimentLabel:
    """Parse a label string, raising ``ValueError`` for anything outside the set."""
    if isinstance(value, SentimentLabel):
        return value
    return SentimentLabel(str(value).strip().lower())


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ─────────────────────────────────────────────────────────────────
# Inputs
# ─────────────────────────────────────────────────────────────────

class AnalysisRequest(_CamelModel):
    """A single unit of work for the orchestrator."""
    text: str
    language: Optional[str] = None
    id: Optional[str] = None


class TrainingExample(_CamelModel):
    """Labelled example consumed by ``NaiveBayesClassifier.train``."""
    text: str
    label: SentimentLabel

    @field_validator("label", mode="before")
    @classmethod
    def _normalise_label(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


# ─────────────────────────────────────────────────────────────────
# Classifier outputs
# ─────────────────────────────────────────────────────────────────

class ClassifierOutput(_CamelModel):
    """
    Output of one classifier.  ``score`` and ``confidence`` are local to
    the producing classifier; only the combiner puts them on a common footing.
    """
    label: SentimentLabel
    score: float = Field(0.0, ge=-1.0, le=1.0)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    keywords: List[str] = Field(default_factory=list)
    probabilities: Dict[SentimentLabel, float] = Field(default_factory=dict)


class CombinedOutput(_CamelModel):
    """Blend produced by ``HybridCombiner`` before timing/language are attached."""
    label: SentimentLabel
    score: float = Field(0.0, ge=-1.0, le=1.0)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    method: ClassifierTag
    agreement: bool = True
    contributors: List[ClassifierTag] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


# ─────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────

class SentimentResult(_CamelModel):
    """
    Final, caller-owned analysis result.

    ``contributors`` lists the classifiers that made it into the blend;
    ``degraded`` is set when an enabled classifier was dropped for this call.
    """
    label: SentimentLabel
    score: float = Field(0.0, ge=-1.0, le=1.0)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    language: str = "en"
    method: ClassifierTag = ClassifierTag.HYBRID
    agreement: bool = True
    processing_time_ms: float = 0.0
    keywords: List[str] = Field(default_factory=list)
    contributors: List[ClassifierTag] = Field(default_factory=list)
    degraded: bool = False


class TweetSentimentResult(SentimentResult):
    """``SentimentResult`` tagged with the originating tweet id."""
    tweet_id: str


class BatchItemError(_CamelModel):
    """Failure captured in the slot of a batch item that could not be analysed."""
    index: int
    tweet_id: Optional[str] = None
    error_type: str
    message: str


BatchItemResult = Union[TweetSentimentResult, BatchItemError]


# ─────────────────────────────────────────────────────────────────
# Metrics & model metadata
# ─────────────────────────────────────────────────────────────────

class MetricsSnapshot(_CamelModel):
    """Read-only copy of the orchestrator counters."""
    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    error_count: int = 0
    contextual_timeouts: int = 0
    cumulative_processing_time_ms: float = 0.0
    cache_hit_rate: float = 0.0
    average_processing_time_ms: float = 0.0
    cache_size: int = 0


class ModelMetadata(_CamelModel):
    """Sidecar describing a persisted statistical model."""
    version: str
    trained_at: datetime
    dataset_size: int
    vocabulary_size: int
    labels: List[SentimentLabel] = Field(default_factory=list)
    checksum: str = ""
