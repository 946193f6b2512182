"""
Naive Bayes Classifier
=======================
Multinomial Naive Bayes over tweet tokens with Laplace smoothing.

Training accumulates, per label:
  - document count            → log P(label) = log(count(label) / total)
  - term frequencies          → count(token, label)
  - total term count          → count(*, label)
plus the global vocabulary V.

Prediction scores every label seen in training with

    log P(label) + Σ_token log( (count(token, label) + α) / (count(*, label) + α·|V|) )

Unknown tokens are *not* skipped: they contribute the smoothed zero-count
probability, otherwise labels with larger vocabularies would be favoured.
Log scores go through a max-shifted softmax; ``confidence`` is the top
probability and ``score = P(positive) − P(negative)``.

Features: stopwords are dropped per language and the three tokens that
follow a negation cue are also emitted as ``NOT_<token>``.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import ModelNotTrainedError, TrainingError
from .language import LanguageResolver
from .lexicon import negation_words
from .models import (
    ALL_LABELS,
    ClassifierOutput,
    SentimentLabel,
    TrainingExample,
    coerce_label,
)
from .text_processing import is_emoji, normalize_term, tokenize

logger = logging.getLogger(__name__)

STATE_FORMAT_VERSION = 1
NEGATION_PREFIX = "NOT_"

STOPWORDS: Dict[str, frozenset] = {
    lang: frozenset(normalize_term(w) for w in words)
    for lang, words in {
        "en": (
            "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
            "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
            "to", "was", "were", "will", "with",
        ),
        "es": (
            "el", "la", "de", "que", "y", "a", "en", "un", "es", "se",
            "no", "te", "lo", "le", "da", "su", "por", "son", "con", "para",
        ),
        "fr": (
            "le", "de", "et", "à", "un", "il", "être", "en", "avoir",
            "que", "pour", "dans", "ce", "son", "une", "sur", "avec", "ne", "se",
        ),
        "de": (
            "der", "die", "das", "und", "ist", "mit", "ein", "eine",
            "zu", "auf", "für", "von", "dem", "den", "des", "im", "am", "zum",
        ),
    }.items()
}


# ---------------------------------------------------------------------------
# Count tables
# ---------------------------------------------------------------------------

@dataclass
class _CountTables:
    """Everything a fitted model keeps; raw examples are never retained."""
    doc_counts: Dict[SentimentLabel, int] = field(default_factory=dict)
    term_counts: Dict[SentimentLabel, Counter] = field(default_factory=dict)
    total_terms: Dict[SentimentLabel, int] = field(default_factory=dict)
    vocabulary: set = field(default_factory=set)

    @property
    def total_documents(self) -> int:
        return sum(self.doc_counts.values())

    def add(self, label: SentimentLabel, tokens: Sequence[str]) -> None:
        self.doc_counts[label] = self.doc_counts.get(label, 0) + 1
        counts = self.term_counts.setdefault(label, Counter())
        counts.update(tokens)
        self.total_terms[label] = self.total_terms.get(label, 0) + len(tokens)
        self.vocabulary.update(tokens)

    def absorb(self, other: "_CountTables") -> None:
        for label, n in other.doc_counts.items():
            self.doc_counts[label] = self.doc_counts.get(label, 0) + n
        for label, counts in other.term_counts.items():
            self.term_counts.setdefault(label, Counter()).update(counts)
        for label, n in other.total_terms.items():
            self.total_terms[label] = self.total_terms.get(label, 0) + n
        self.vocabulary |= other.vocabulary

    def copy(self) -> "_CountTables":
        return _CountTables(
            doc_counts=dict(self.doc_counts),
            term_counts={k: Counter(v) for k, v in self.term_counts.items()},
            total_terms=dict(self.total_terms),
            vocabulary=set(self.vocabulary),
        )


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

class NaiveBayesClassifier:
    """
    Trainable statistical sentiment classifier.

    Usage::

        nb = NaiveBayesClassifier()
        nb.train([{"text": "I love this", "label": "positive"}, ...])
        out = nb.predict("love it")
    """

    def __init__(
        self,
        smoothing: float = 1.0,
        negation_window: int = 3,
        enable_stopwords: bool = True,
        enable_negation_tokens: bool = True,
        resolver: Optional[LanguageResolver] = None,
    ):
        if smoothing <= 0:
            raise ValueError("smoothing must be > 0")
        self.smoothing = smoothing
        self.negation_window = negation_window
        self.enable_stopwords = enable_stopwords
        self.enable_negation_tokens = enable_negation_tokens
        self._resolver = resolver or LanguageResolver()
        self._tables = _CountTables()
        self._log_priors: Dict[SentimentLabel, float] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_trained(self) -> bool:
        return self._tables.total_documents > 0

    @property
    def labels(self) -> Tuple[SentimentLabel, ...]:
        """Labels the model can emit, in canonical order."""
        return tuple(l for l in ALL_LABELS if self._tables.doc_counts.get(l, 0) > 0)

    @property
    def vocabulary_size(self) -> int:
        return len(self._tables.vocabulary)

    @property
    def total_documents(self) -> int:
        return self._tables.total_documents

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, examples: Iterable[Any]) -> None:
        """
        Fit from scratch.  The new tables replace the old ones only after
        the whole set validated and fitted, so a failed call leaves any
        previously trained model untouched.
        """
        pairs = self._validate(examples)
        tables = _CountTables()
        for text, label in pairs:
            tables.add(label, self.features(text))
        self._install(tables)
        logger.info(
            "Naive Bayes trained  docs=%d  vocab=%d  per_label=%s",
            tables.total_documents, len(tables.vocabulary),
            {l.value: n for l, n in tables.doc_counts.items()},
        )

    def partial_train(self, examples: Iterable[Any]) -> None:
        """Add examples on top of the current counts without resetting."""
        pairs = self._validate(examples)
        tables = self._tables.copy()
        for text, label in pairs:
            tables.add(label, self.features(text))
        self._install(tables)
        logger.info(
            "Naive Bayes incrementally trained  +docs=%d  total=%d  vocab=%d",
            len(pairs), tables.total_documents, len(tables.vocabulary),
        )

    def merge(self, other: "NaiveBayesClassifier") -> None:
        """Sum another model's counts into this one."""
        if not other.is_trained:
            raise TrainingError("cannot merge an untrained model")
        tables = self._tables.copy()
        tables.absorb(other._tables)
        self._install(tables)
        logger.info(
            "Naive Bayes merged  total=%d  vocab=%d",
            tables.total_documents, len(tables.vocabulary),
        )

    def _install(self, tables: _CountTables) -> None:
        total = tables.total_documents
        self._log_priors = {
            label: math.log(n / total)
            for label, n in tables.doc_counts.items() if n > 0
        }
        self._tables = tables

    @staticmethod
    def _validate(examples: Iterable[Any]) -> List[Tuple[str, SentimentLabel]]:
        if examples is None:
            raise TrainingError("training set is empty")
        pairs: List[Tuple[str, SentimentLabel]] = []
        for i, example in enumerate(examples):
            if isinstance(example, TrainingExample):
                text, raw_label = example.text, example.label
            elif isinstance(example, Mapping):
                text, raw_label = example.get("text"), example.get("label")
            elif isinstance(example, (tuple, list)) and len(example) == 2:
                text, raw_label = example
            else:
                raise TrainingError(f"example {i} is not a (text, label) pair")

            if not isinstance(text, str):
                raise TrainingError(f"example {i} has non-string text")
            try:
                label = coerce_label(raw_label)
            except ValueError:
                raise TrainingError(
                    f"example {i} has unknown label {raw_label!r}; "
                    f"expected one of {[l.value for l in ALL_LABELS]}"
                ) from None
            pairs.append((text, label))

        if not pairs:
            raise TrainingError("training set is empty")
        return pairs

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    def features(self, text: str, language: Optional[str] = None) -> List[str]:
        """Token features for *text*: stopwords removed, negation-marked."""
        tokens = tokenize(text)
        if not tokens:
            return []
        lang = language or self._resolver.detect(text)
        stopwords = STOPWORDS.get(lang, STOPWORDS["en"]) if self.enable_stopwords else frozenset()
        negations = negation_words(lang)

        out: List[str] = []
        negated_left = 0
        for tok in tokens:
            is_negation = tok in negations or tok.endswith("n't")
            if negated_left > 0 and not is_negation:
                if self.enable_negation_tokens:
                    out.append(NEGATION_PREFIX + tok)
                negated_left -= 1
            if is_negation:
                negated_left = self.negation_window
            if tok in stopwords:
                continue
            if len(tok) < 2 and not is_emoji(tok):
                continue
            out.append(tok)
        return out

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def predict_log_scores(
        self, text: str, language: Optional[str] = None,
    ) -> Dict[SentimentLabel, float]:
        if not self.is_trained:
            raise ModelNotTrainedError()

        tokens = self.features(text, language) if text else []
        vocab_size = len(self._tables.vocabulary)
        alpha = self.smoothing

        scores: Dict[SentimentLabel, float] = {}
        for label in self.labels:
            counts = self._tables.term_counts.get(label, Counter())
            denom = self._tables.total_terms.get(label, 0) + alpha * vocab_size
            log_prob = self._log_priors[label]
            for tok in tokens:
                log_prob += math.log((counts.get(tok, 0) + alpha) / denom)
            scores[label] = log_prob
        return scores

    def predict_proba(
        self, text: str, language: Optional[str] = None,
    ) -> Dict[SentimentLabel, float]:
        """Normalised probability per trained label."""
        log_scores = self.predict_log_scores(text, language)
        peak = max(log_scores.values())
        exps = {label: math.exp(s - peak) for label, s in log_scores.items()}
        total = sum(exps.values())
        return {label: v / total for label, v in exps.items()}

    def predict(self, text: str, language: Optional[str] = None) -> ClassifierOutput:
        probs = self.predict_proba(text, language)

        label = max(self.labels, key=lambda l: probs[l])
        score = probs.get(SentimentLabel.POSITIVE, 0.0) - probs.get(SentimentLabel.NEGATIVE, 0.0)

        return ClassifierOutput(
            label=label,
            score=max(-1.0, min(1.0, score)),
            confidence=min(1.0, probs[label]),
            keywords=self._keywords(text, label, language),
            probabilities=probs,
        )

    def _keywords(
        self, text: str, label: SentimentLabel, language: Optional[str], limit: int = 5,
    ) -> List[str]:
        """Known tokens that favour *label* most strongly over the other labels."""
        if not text or len(self.labels) < 2:
            return []
        vocab_size = len(self._tables.vocabulary)
        alpha = self.smoothing

        def log_p(tok: str, lbl: SentimentLabel) -> float:
            counts = self._tables.term_counts.get(lbl, Counter())
            denom = self._tables.total_terms.get(lbl, 0) + alpha * vocab_size
            return math.log((counts.get(tok, 0) + alpha) / denom)

        ranked: List[Tuple[float, str]] = []
        seen = set()
        for tok in self.features(text, language):
            if tok in seen or tok.startswith(NEGATION_PREFIX) or tok not in self._tables.vocabulary:
                continue
            seen.add(tok)
            others = [log_p(tok, l) for l in self.labels if l != label]
            margin = log_p(tok, label) - max(others)
            if margin > 0:
                ranked.append((margin, tok))
        ranked.sort(key=lambda item: (-item[0], item[1]))
        return [tok for _, tok in ranked[:limit]]

    # ------------------------------------------------------------------
    # Introspection & serialisation
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        return {
            "trained": self.is_trained,
            "vocabulary_size": self.vocabulary_size,
            "total_documents": self.total_documents,
            "doc_counts": {l.value: n for l, n in self._tables.doc_counts.items()},
            "total_terms": {l.value: n for l, n in self._tables.total_terms.items()},
            "smoothing": self.smoothing,
        }

    def to_state(self) -> Dict[str, Any]:
        """Plain-data snapshot of the fitted tables and options."""
        t = self._tables
        return {
            "format_version": STATE_FORMAT_VERSION,
            "options": {
                "smoothing": self.smoothing,
                "negation_window": self.negation_window,
                "enable_stopwords": self.enable_stopwords,
                "enable_negation_tokens": self.enable_negation_tokens,
            },
            "doc_counts": {l.value: n for l, n in t.doc_counts.items()},
            "term_counts": {l.value: dict(c) for l, c in t.term_counts.items()},
            "total_terms": {l.value: n for l, n in t.total_terms.items()},
            "vocabulary": sorted(t.vocabulary),
        }

    @classmethod
    def from_state(
        cls, state: Mapping[str, Any], resolver: Optional[LanguageResolver] = None,
    ) -> "NaiveBayesClassifier":
        version = state.get("format_version")
        if version != STATE_FORMAT_VERSION:
            raise ValueError(f"unsupported model format version: {version!r}")

        opts = state.get("options", {})
        model = cls(
            smoothing=opts.get("smoothing", 1.0),
            negation_window=opts.get("negation_window", 3),
            enable_stopwords=opts.get("enable_stopwords", True),
            enable_negation_tokens=opts.get("enable_negation_tokens", True),
            resolver=resolver,
        )
        tables = _CountTables(
            doc_counts={SentimentLabel(k): int(v) for k, v in state["doc_counts"].items()},
            term_counts={SentimentLabel(k): Counter(v) for k, v in state["term_counts"].items()},
            total_terms={SentimentLabel(k): int(v) for k, v in state["total_terms"].items()},
            vocabulary=set(state["vocabulary"]),
        )
        if tables.total_documents > 0:
            model._install(tables)
        return model
