"""
Contextual Classifier
======================
Async client for a hosted transformer sentiment model using the
Hugging Face inference API shape::

    POST {endpoint}
    Authorization: Bearer <token>
    {"inputs": "<text>"}

    → [[{"label": "POS", "score": 0.93}, {"label": "NEU", ...}, ...]]

Default model : finiteautomata/bertweet-base-sentiment-analysis
Get API key   : https://huggingface.co/settings/tokens

The orchestrator bounds every call with its own deadline; this client
only raises ``ContextualUnavailableError`` for configuration or HTTP
failures and never retries.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from .errors import ContextualUnavailableError
from .models import ClassifierOutput, SentimentLabel

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = (
    "https://api-inference.huggingface.co/models/"
    "finiteautomata/bertweet-base-sentiment-analysis"
)

_LABEL_MAP: Dict[str, SentimentLabel] = {
    "pos": SentimentLabel.POSITIVE,
    "positive": SentimentLabel.POSITIVE,
    "label_2": SentimentLabel.POSITIVE,
    "neu": SentimentLabel.NEUTRAL,
    "neutral": SentimentLabel.NEUTRAL,
    "label_1": SentimentLabel.NEUTRAL,
    "neg": SentimentLabel.NEGATIVE,
    "negative": SentimentLabel.NEGATIVE,
    "label_0": SentimentLabel.NEGATIVE,
}


def map_label(raw: str) -> Optional[SentimentLabel]:
    return _LABEL_MAP.get(str(raw).strip().lower())


class ContextualClassifier:
    """
    Usage::

        clf = ContextualClassifier(api_key="hf_...")
        out = await clf.predict("not bad at all tbh")
        await clf.aclose()

    ``transport`` is handed to ``httpx.AsyncClient`` and lets tests plug
    in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        request_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.getenv("HUGGINGFACE_API_KEY", "")
        self.endpoint = endpoint
        self.request_timeout = request_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._closed = False

    @property
    def available(self) -> bool:
        return bool(self.api_key) and not self._closed

    # ── http ──────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        """Return a long-lived httpx client (connection pooling)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.request_timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying httpx client.  Safe to call repeatedly."""
        self._closed = True
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    # ── public API ────────────────────────────────────────────────

    async def predict(self, text: str, language: Optional[str] = None) -> ClassifierOutput:
        """Classify *text*.  The hosted model is multilingual; *language* is unused."""
        if self._closed:
            raise ContextualUnavailableError("client has been closed")
        if not self.api_key:
            raise ContextualUnavailableError("HUGGINGFACE_API_KEY not set")
        if not text or not text.strip():
            return ClassifierOutput(label=SentimentLabel.NEUTRAL, score=0.0, confidence=0.5)

        client = self._get_client()
        try:
            resp = await client.post(
                self.endpoint,
                json={"inputs": text},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Accept": "application/json",
                },
            )
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise ContextualUnavailableError(
                f"inference returned HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ContextualUnavailableError(f"inference request failed: {e}") from e

        return self.parse_response(payload)

    # ── parsing ───────────────────────────────────────────────────

    @staticmethod
    def parse_response(payload: Any) -> ClassifierOutput:
        """Turn an inference payload into a ``ClassifierOutput``."""
        if isinstance(payload, dict) and "error" in payload:
            raise ContextualUnavailableError(str(payload["error"]))

        # Single-input calls come back as [[...]]; unwrap one level
        items: List[Any] = payload if isinstance(payload, list) else []
        if items and isinstance(items[0], list):
            items = items[0]

        probs: Dict[SentimentLabel, float] = {}
        for item in items:
            if not isinstance(item, dict):
                continue
            label = map_label(item.get("label", ""))
            if label is None:
                logger.debug("Ignoring unknown contextual label %r", item.get("label"))
                continue
            try:
                probs[label] = probs.get(label, 0.0) + float(item.get("score", 0.0))
            except (TypeError, ValueError):
                continue

        if not probs:
            raise ContextualUnavailableError("inference payload carried no usable labels")

        label = max(probs, key=lambda l: probs[l])
        confidence = max(0.0, min(1.0, probs[label]))
        if SentimentLabel.POSITIVE in probs and SentimentLabel.NEGATIVE in probs:
            score = probs[SentimentLabel.POSITIVE] - probs[SentimentLabel.NEGATIVE]
        elif label == SentimentLabel.POSITIVE:
            score = confidence
        elif label == SentimentLabel.NEGATIVE:
            score = -confidence
        else:
            score = 0.0

        return ClassifierOutput(
            label=label,
            score=max(-1.0, min(1.0, score)),
            confidence=confidence,
            probabilities=probs,
        )
