"""
Sentiment Orchestrator
=======================
Serving entry point for the hybrid sentiment pipeline.

  ┌────────────┐   ┌─────────────┐   ┌──────────────┐
  │ 1. Resolve │──▶│ 2. Cache    │──▶│ 3. Classify  │
  │   language │   │   lookup    │   │  rule + NB   │
  └────────────┘   └─────────────┘   │ (+contextual)│
                                     └──────┬───────┘
  ┌────────────┐   ┌─────────────┐   ┌──────▼───────┐
  │ 6. Return  │◀──│ 5. Cache &  │◀──│ 4. Combine   │
  │   result   │   │   metrics   │   │              │
  └────────────┘   └─────────────┘   └──────────────┘

Rule-based and Naive Bayes classification are in-memory and run inline.
The contextual classifier, when enabled, is started as a task before
them and awaited with a deadline; on timeout or failure it is left out
of the blend and the call still succeeds.

Lifecycle:  Ready ──dispose()──▶ Disposed  (every call then raises
``DisposedError``).
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from ..config.settings import EngineSettings
from .combiner import HybridCombiner
from .contextual import ContextualClassifier
from .datasets import bootstrap_examples
from .errors import (
    ContextualTimeoutError,
    ContextualUnavailableError,
    DisposedError,
    InvalidInputError,
    ModelPersistenceError,
    SentimentEngineError,
)
from .language import LanguageResolver
from .lexicon import LexiconScorer
from .metrics import MetricsRecorder
from .model_store import load_model, save_model
from .models import (
    AnalysisRequest,
    BatchItemError,
    BatchItemResult,
    ClassifierOutput,
    ClassifierTag,
    CombinedOutput,
    MetricsSnapshot,
    ModelMetadata,
    SentimentResult,
    TweetSentimentResult,
)
from .naive_bayes import NaiveBayesClassifier
from .result_cache import ResultCache, fingerprint

logger = logging.getLogger(__name__)

_WEIGHT_KEYS = {
    ClassifierTag.RULE_BASED: "rule_based",
    ClassifierTag.NAIVE_BAYES: "naive_bayes",
    ClassifierTag.CONTEXTUAL: "contextual",
}


@dataclass(frozen=True)
class ClassifierSlot:
    """One entry of the fixed classifier line-up."""
    tag: ClassifierTag
    enabled: bool
    weight: float
    classifier: Any
    suspends: bool = False


class SentimentOrchestrator:
    """
    Usage::

        async with SentimentOrchestrator(settings) as engine:
            result = await engine.analyze("I love this product!")
            batch = await engine.analyze_batch(tweets)
            print(engine.get_metrics())

    ``classifier`` injects an already trained Naive Bayes model and
    ``contextual`` a ready contextual client (enables it regardless of
    settings).
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        classifier: Optional[NaiveBayesClassifier] = None,
        contextual: Optional[ContextualClassifier] = None,
    ):
        self.settings = settings or EngineSettings()
        s = self.settings

        self._resolver = LanguageResolver(
            default_language=s.default_language,
            auto_detect=s.auto_detect_language,
        )
        self._lexicon = LexiconScorer(**s.lexicon.model_dump())
        self._combiner = HybridCombiner(
            weights={tag: s.combiner.weights.get(key, 0.0) for tag, key in _WEIGHT_KEYS.items()},
            agreement_bonus=s.combiner.agreement_bonus,
        )
        self._cache = ResultCache(capacity=s.cache.capacity, ttl_seconds=s.cache.ttl_seconds)
        self._metrics = MetricsRecorder()
        self._model_metadata: Optional[ModelMetadata] = None
        self._disposed = False

        if contextual is None and s.contextual.enabled:
            contextual = ContextualClassifier(
                api_key=s.contextual.api_key,
                endpoint=s.contextual.endpoint,
                request_timeout=s.contextual.request_timeout_seconds,
            )
            if not contextual.available:
                logger.warning(
                    "Contextual classifier enabled but no API key set – "
                    "results will fall back to rule-based + Naive Bayes"
                )
        self._contextual = contextual

        self._nb = classifier if classifier is not None else self._initial_model()
        self._slots = self._build_slots()

        logger.info(
            "Sentiment orchestrator ready  language=%s  contextual=%s  cache=%d  vocab=%d",
            s.default_language,
            "on" if self._contextual is not None else "off",
            s.cache.capacity,
            self._nb.vocabulary_size,
        )

    # ── construction helpers ──────────────────────────────────────

    def _new_classifier(self) -> NaiveBayesClassifier:
        return NaiveBayesClassifier(
            resolver=self._resolver,
            **self.settings.naive_bayes.model_dump(),
        )

    def _initial_model(self) -> NaiveBayesClassifier:
        path = self.settings.model_path
        if path and Path(path).exists():
            model, meta = load_model(path, resolver=self._resolver)
            self._model_metadata = meta
            return model

        if path:
            logger.info("No persisted model at %s – training on bootstrap set", path)
        model = self._new_classifier()
        model.train(bootstrap_examples())
        return model

    def _build_slots(self) -> Tuple[ClassifierSlot, ...]:
        weights = self._combiner.weights
        return (
            ClassifierSlot(
                tag=ClassifierTag.RULE_BASED,
                enabled=weights[ClassifierTag.RULE_BASED] > 0,
                weight=weights[ClassifierTag.RULE_BASED],
                classifier=self._lexicon,
            ),
            ClassifierSlot(
                tag=ClassifierTag.NAIVE_BAYES,
                enabled=weights[ClassifierTag.NAIVE_BAYES] > 0,
                weight=weights[ClassifierTag.NAIVE_BAYES],
                classifier=self._nb,
            ),
            ClassifierSlot(
                tag=ClassifierTag.CONTEXTUAL,
                enabled=self._contextual is not None and weights[ClassifierTag.CONTEXTUAL] > 0,
                weight=weights[ClassifierTag.CONTEXTUAL],
                classifier=self._contextual,
                suspends=True,
            ),
        )

    # ── state ─────────────────────────────────────────────────────

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def classifier(self) -> NaiveBayesClassifier:
        return self._nb

    @property
    def model_metadata(self) -> Optional[ModelMetadata]:
        return self._model_metadata

    def _ensure_active(self, operation: str) -> None:
        if self._disposed:
            raise DisposedError(operation)

    # ══════════════════════════════════════════════════════════════
    # Serving
    # ══════════════════════════════════════════════════════════════

    async def analyze(
        self,
        request: Union[AnalysisRequest, str, Mapping[str, Any]],
        language: Optional[str] = None,
    ) -> SentimentResult:
        """Classify one text.  Only fails for non-text input or after dispose."""
        self._ensure_active("analyze")
        self._metrics.record_request()
        start = time.perf_counter()

        try:
            req = self._coerce_request(request, language)
            text = self._truncate(req.text)
            lang = self._resolver.resolve(text, req.language)
            fp = fingerprint(text, lang)

            cached = self._cache.get(fp)
            if cached is not None:
                elapsed = (time.perf_counter() - start) * 1000
                self._metrics.record_completion(elapsed, cache_hit=True)
                logger.debug("Sentiment cache HIT %s", fp[:12])
                return cached.model_copy(deep=True, update={"processing_time_ms": elapsed})

            logger.debug("Sentiment cache MISS %s", fp[:12])
            combined, degraded = await self._classify(text, lang)
            elapsed = (time.perf_counter() - start) * 1000
            result = self._to_result(combined, lang, elapsed, degraded)

            # A reduced blend only stands for this call
            if not degraded:
                self._cache.put(fp, result.model_copy(deep=True))
            self._metrics.record_completion(elapsed, cache_hit=False)
            return result

        except InvalidInputError:
            self._metrics.record_error()
            raise
        except Exception:
            self._metrics.record_error()
            logger.error("Sentiment analysis failed", exc_info=True)
            raise

    async def analyze_tweet(self, tweet: Any) -> TweetSentimentResult:
        """Analyse a tweet-shaped mapping/object and tag the result with its id."""
        self._ensure_active("analyze_tweet")
        tweet_id, text, lang = self._tweet_fields(tweet)
        result = await self.analyze({"text": text, "language": lang})
        return TweetSentimentResult(**result.model_dump(), tweet_id=tweet_id)

    async def analyze_batch(self, items: Iterable[Any]) -> List[BatchItemResult]:
        """
        Analyse every item; output has the same length and order as *items*.
        A failing item yields a ``BatchItemError`` in its slot.
        """
        self._ensure_active("analyze_batch")
        items = list(items)
        semaphore = asyncio.Semaphore(self.settings.batch_concurrency)

        async def run_one(index: int, item: Any) -> BatchItemResult:
            async with semaphore:
                try:
                    return await self.analyze_tweet(item)
                except Exception as e:
                    logger.warning("Batch item %d failed: %s", index, e)
                    return BatchItemError(
                        index=index,
                        tweet_id=self._safe_tweet_id(item),
                        error_type=type(e).__name__,
                        message=self._error_message(e),
                    )

        started = time.perf_counter()
        results = await asyncio.gather(*(run_one(i, item) for i, item in enumerate(items)))
        failed = sum(1 for r in results if isinstance(r, BatchItemError))
        logger.info(
            "Batch analysed  items=%d  failed=%d  %.1fms",
            len(items), failed, (time.perf_counter() - started) * 1000,
        )
        return list(results)

    # ── classification ────────────────────────────────────────────

    async def _classify(self, text: str, language: str) -> Tuple[CombinedOutput, bool]:
        """Blend of every enabled slot, plus whether one of them was dropped."""
        outputs: Dict[ClassifierTag, Tuple[ClassifierOutput, float]] = {}
        pending: Optional[Tuple[ClassifierSlot, "asyncio.Task[Optional[ClassifierOutput]]"]] = None

        for slot in self._slots:
            if slot.enabled and slot.suspends:
                pending = (slot, asyncio.create_task(self._contextual_output(slot, text, language)))

        try:
            for slot in self._slots:
                if slot.enabled and not slot.suspends:
                    outputs[slot.tag] = (slot.classifier.predict(text, language), slot.weight)
            if pending is not None:
                slot, task = pending
                out = await task
                if out is not None:
                    outputs[slot.tag] = (out, slot.weight)
        finally:
            if pending is not None and not pending[1].done():
                pending[1].cancel()

        ordered = [
            (slot.tag, outputs[slot.tag][0], outputs[slot.tag][1])
            for slot in self._slots if slot.tag in outputs
        ]
        degraded = any(slot.enabled and slot.tag not in outputs for slot in self._slots)
        return self._combiner.combine(ordered), degraded

    async def _contextual_output(
        self, slot: ClassifierSlot, text: str, language: str,
    ) -> Optional[ClassifierOutput]:
        timeout = self.settings.contextual.timeout_seconds
        try:
            try:
                return await asyncio.wait_for(slot.classifier.predict(text, language), timeout)
            except asyncio.TimeoutError:
                raise ContextualTimeoutError(timeout) from None
        except (ContextualTimeoutError, ContextualUnavailableError) as e:
            self._metrics.record_contextual_timeout()
            logger.warning("Contextual classifier dropped from blend: %s (%s)", e.message, e.detail)
            return None

    @staticmethod
    def _to_result(
        combined: CombinedOutput, language: str, elapsed_ms: float, degraded: bool = False,
    ) -> SentimentResult:
        return SentimentResult(
            label=combined.label,
            score=combined.score,
            confidence=combined.confidence,
            language=language,
            method=combined.method,
            agreement=combined.agreement,
            processing_time_ms=elapsed_ms,
            keywords=list(combined.keywords),
            contributors=list(combined.contributors),
            degraded=degraded,
        )

    # ── input adaptation ──────────────────────────────────────────

    def _truncate(self, text: str) -> str:
        limit = self.settings.max_text_length
        return text[:limit] if limit and len(text) > limit else text

    @staticmethod
    def _coerce_request(request: Any, language: Optional[str]) -> AnalysisRequest:
        if isinstance(request, AnalysisRequest) and not language:
            return request
        if isinstance(request, bytes):
            try:
                request = request.decode("utf-8")
            except UnicodeDecodeError:
                raise InvalidInputError("text bytes are not valid UTF-8") from None

        if isinstance(request, AnalysisRequest):
            fields = {"text": request.text, "language": language, "id": request.id}
        elif isinstance(request, str):
            fields = {"text": request, "language": language}
        elif isinstance(request, Mapping):
            text = request.get("text")
            if not isinstance(text, str):
                raise InvalidInputError(f"text must be a string, got {type(text).__name__}")
            fields = {
                "text": text,
                "language": language or request.get("language"),
                "id": None if request.get("id") is None else str(request.get("id")),
            }
        else:
            raise InvalidInputError(f"text must be a string, got {type(request).__name__}")

        try:
            return AnalysisRequest(**fields)
        except ValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(p) for p in error["loc"]) or "request"
            raise InvalidInputError(f"{location}: {error['msg']}") from None

    @staticmethod
    def _field(tweet: Any, *names: str) -> Any:
        for name in names:
            value = tweet.get(name) if isinstance(tweet, Mapping) else getattr(tweet, name, None)
            if value is not None:
                return value
        return None

    def _tweet_fields(self, tweet: Any) -> Tuple[str, Any, Optional[str]]:
        if tweet is None:
            raise InvalidInputError("tweet is None")
        tweet_id = self._field(tweet, "id", "tweet_id")
        if tweet_id is None or str(tweet_id) == "":
            raise InvalidInputError("tweet has no id")
        text = self._field(tweet, "text", "content")
        if text is None:
            raise InvalidInputError(f"tweet {tweet_id} has no text")
        return str(tweet_id), text, self._field(tweet, "language", "lang")

    def _safe_tweet_id(self, item: Any) -> Optional[str]:
        if item is None:
            return None
        value = self._field(item, "id", "tweet_id")
        return None if value is None else str(value)

    @staticmethod
    def _error_message(e: Exception) -> str:
        if isinstance(e, SentimentEngineError):
            return f"{e.message}: {e.detail}" if e.detail else e.message
        return str(e) or type(e).__name__

    # ══════════════════════════════════════════════════════════════
    # Metrics & cache
    # ══════════════════════════════════════════════════════════════

    def get_metrics(self) -> MetricsSnapshot:
        self._ensure_active("get_metrics")
        return self._metrics.snapshot(cache_size=len(self._cache))

    def reset_metrics(self) -> None:
        self._ensure_active("reset_metrics")
        self._metrics.reset()
        logger.info("Sentiment metrics reset")

    def cache_stats(self) -> Dict[str, Any]:
        self._ensure_active("cache_stats")
        return self._cache.stats

    def clear_cache(self) -> None:
        self._ensure_active("clear_cache")
        self._cache.clear()

    # ══════════════════════════════════════════════════════════════
    # Administration
    # ══════════════════════════════════════════════════════════════

    def train(self, examples: Sequence[Any]) -> Dict[str, Any]:
        """Retrain the Naive Bayes model from scratch; cached results are dropped."""
        self._ensure_active("train")
        self._nb.train(examples)
        self._model_metadata = None
        self._cache.clear()
        return self._nb.stats()

    def partial_train(self, examples: Sequence[Any]) -> Dict[str, Any]:
        self._ensure_active("partial_train")
        self._nb.partial_train(examples)
        self._model_metadata = None
        self._cache.clear()
        return self._nb.stats()

    def save_model(self, path: Optional[Union[str, Path]] = None) -> ModelMetadata:
        self._ensure_active("save_model")
        target = path or self.settings.model_path
        if not target:
            raise ModelPersistenceError("<unset>", "no model path given or configured")
        self._model_metadata = save_model(self._nb, target)
        return self._model_metadata

    def load_model(self, path: Optional[Union[str, Path]] = None) -> ModelMetadata:
        """Replace the Naive Bayes model with a persisted one."""
        self._ensure_active("load_model")
        target = path or self.settings.model_path
        if not target:
            raise ModelPersistenceError("<unset>", "no model path given or configured")
        model, meta = load_model(target, resolver=self._resolver)
        self._nb = model
        self._slots = self._build_slots()
        self._model_metadata = meta
        self._cache.clear()
        return meta

    def model_info(self) -> Dict[str, Any]:
        self._ensure_active("model_info")
        info = self._nb.stats()
        if self._model_metadata is not None:
            info["metadata"] = self._model_metadata.model_dump(mode="json", by_alias=True)
        return info

    async def dispose(self) -> None:
        """Release the contextual client and drop cached results.  Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        if self._contextual is not None:
            await self._contextual.aclose()
        self._cache.clear()
        logger.info("Sentiment orchestrator disposed")

    async def __aenter__(self) -> "SentimentOrchestrator":
        self._ensure_active("__aenter__")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()
