"""
Hybrid Tweet Sentiment Engine
==============================
Lexicon rules + Naive Bayes (+ optional hosted transformer) blended into
one labelled, confidence-scored result, with an LRU result cache and
per-instance metrics.

Public API
----------
>>> from src.sentiment_engine import SentimentOrchestrator
>>> engine = SentimentOrchestrator()
>>> result = await engine.analyze("I love this product!")
>>> result.label, result.confidence
"""

# ── Models ────────────────────────────────────────────────────────
from .models import (
    AnalysisRequest,
    BatchItemError,
    BatchItemResult,
    ClassifierOutput,
    ClassifierTag,
    CombinedOutput,
    MetricsSnapshot,
    ModelMetadata,
    SentimentLabel,
    SentimentResult,
    TrainingExample,
    TweetSentimentResult,
)
from .errors import (
    ConfigurationError,
    ContextualTimeoutError,
    ContextualUnavailableError,
    DisposedError,
    InvalidInputError,
    ModelNotTrainedError,
    ModelPersistenceError,
    SentimentEngineError,
    TrainingError,
)

# ── Classifiers ───────────────────────────────────────────────────
from .language import LanguageResolver, SUPPORTED_LANGUAGES
from .lexicon import LexiconScorer
from .naive_bayes import NaiveBayesClassifier
from .contextual import ContextualClassifier
from .combiner import HybridCombiner

# ── Support ───────────────────────────────────────────────────────
from .result_cache import ResultCache, fingerprint
from .metrics import MetricsRecorder
from .model_store import load_model, save_model
from .datasets import BOOTSTRAP_EXAMPLES, load_training_file

# ── Orchestrator (main entry point) ──────────────────────────────
from .orchestrator import SentimentOrchestrator

__all__ = [
    # Orchestrator
    "SentimentOrchestrator",
    # Classifiers
    "LanguageResolver",
    "LexiconScorer",
    "NaiveBayesClassifier",
    "ContextualClassifier",
    "HybridCombiner",
    "SUPPORTED_LANGUAGES",
    # Support
    "ResultCache",
    "fingerprint",
    "MetricsRecorder",
    "save_model",
    "load_model",
    "BOOTSTRAP_EXAMPLES",
    "load_training_file",
    # Models
    "AnalysisRequest",
    "BatchItemError",
    "BatchItemResult",
    "ClassifierOutput",
    "ClassifierTag",
    "CombinedOutput",
    "MetricsSnapshot",
    "ModelMetadata",
    "SentimentLabel",
    "SentimentResult",
    "TrainingExample",
    "TweetSentimentResult",
    # Errors
    "SentimentEngineError",
    "InvalidInputError",
    "TrainingError",
    "ModelNotTrainedError",
    "ModelPersistenceError",
    "ContextualTimeoutError",
    "ContextualUnavailableError",
    "DisposedError",
    "ConfigurationError",
]
