"""
Shared Test Fixtures & Configuration
=======================================
Pytest conftest with reusable fixtures for the sentiment engine suite.
"""

from __future__ import annotations

import os
import sys

import pytest

# ── Ensure project root is on sys.path ────────────────────────────
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ══════════════════════════════════════════════════════════════════
# Training data
# ══════════════════════════════════════════════════════════════════

@pytest.fixture()
def tiny_training_set():
    return [
        {"text": "I love this", "label": "positive"},
        {"text": "I hate this", "label": "negative"},
        {"text": "This exists", "label": "neutral"},
    ]


@pytest.fixture()
def probe_texts():
    return [
        "I love this product! It's fantastic and amazing!",
        "This is terrible. I hate it and it's the worst!",
        "",
        "The meeting is at 3pm tomorrow",
        "not bad at all 👍",
        "Me encanta este producto",
        "Das ist wirklich schrecklich",
    ]


# ══════════════════════════════════════════════════════════════════
# Engine components
# ══════════════════════════════════════════════════════════════════

@pytest.fixture()
def trained_nb():
    from src.sentiment_engine.datasets import bootstrap_examples
    from src.sentiment_engine.naive_bayes import NaiveBayesClassifier
    nb = NaiveBayesClassifier()
    nb.train(bootstrap_examples())
    return nb


@pytest.fixture()
def settings():
    from src.config.settings import EngineSettings
    return EngineSettings()


@pytest.fixture()
def engine(settings):
    from src.sentiment_engine.orchestrator import SentimentOrchestrator
    return SentimentOrchestrator(settings)


@pytest.fixture()
def sample_tweets():
    return [
        {"id": "t1", "text": "I love this product! It's fantastic and amazing!"},
        {"id": "t2", "text": "This is terrible. I hate it and it's the worst!"},
        {"id": "t3", "content": "The package arrived today", "lang": "en"},
    ]
