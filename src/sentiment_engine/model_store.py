"""
Model persistence for the Naive Bayes classifier.

Layout on disk::

    models/sentiment_nb.joblib            ← classifier state (joblib)
    models/sentiment_nb.joblib.meta.json  ← ModelMetadata incl. sha256

The checksum covers the joblib file bytes; ``load_model`` refuses a
state file whose digest does not match its sidecar.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple, Union

import joblib

from .errors import ModelPersistenceError
from .language import LanguageResolver
from .models import ModelMetadata
from .naive_bayes import NaiveBayesClassifier

logger = logging.getLogger(__name__)

MODEL_VERSION = "1.0.0"
METADATA_SUFFIX = ".meta.json"

PathLike = Union[str, Path]


def metadata_path(path: PathLike) -> Path:
    path = Path(path)
    return path.with_name(path.name + METADATA_SUFFIX)


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def save_model(
    model: NaiveBayesClassifier,
    path: PathLike,
    version: str = MODEL_VERSION,
) -> ModelMetadata:
    """Persist *model* and its metadata sidecar.  Returns the metadata written."""
    if not model.is_trained:
        raise ModelPersistenceError(str(path), "refusing to save an untrained model")

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(model.to_state(), path)
        meta = ModelMetadata(
            version=version,
            trained_at=datetime.now(timezone.utc),
            dataset_size=model.total_documents,
            vocabulary_size=model.vocabulary_size,
            labels=list(model.labels),
            checksum=_sha256(path),
        )
        with open(metadata_path(path), "w", encoding="utf-8") as f:
            json.dump(meta.model_dump(mode="json"), f, indent=2)
    except OSError as e:
        raise ModelPersistenceError(str(path), str(e)) from e

    logger.info(
        "Saved sentiment model to %s (docs=%d, vocab=%d)",
        path, meta.dataset_size, meta.vocabulary_size,
    )
    return meta


def read_metadata(path: PathLike) -> ModelMetadata:
    meta_file = metadata_path(path)
    if not meta_file.exists():
        raise ModelPersistenceError(str(path), f"metadata sidecar not found: {meta_file}")
    try:
        with open(meta_file, "r", encoding="utf-8") as f:
            return ModelMetadata.model_validate(json.load(f))
    except (OSError, ValueError) as e:
        raise ModelPersistenceError(str(path), f"unreadable metadata: {e}") from e


def load_model(
    path: PathLike,
    resolver: Optional[LanguageResolver] = None,
) -> Tuple[NaiveBayesClassifier, ModelMetadata]:
    """Load a model saved by :func:`save_model`, verifying its checksum."""
    path = Path(path)
    if not path.exists():
        raise ModelPersistenceError(str(path), "model file not found")

    meta = read_metadata(path)
    actual = _sha256(path)
    if meta.checksum and actual != meta.checksum:
        raise ModelPersistenceError(
            str(path), f"checksum mismatch (expected {meta.checksum[:12]}…, got {actual[:12]}…)"
        )

    try:
        state = joblib.load(path)
        model = NaiveBayesClassifier.from_state(state, resolver=resolver)
    except Exception as e:
        raise ModelPersistenceError(str(path), f"corrupt model state: {e}") from e

    logger.info(
        "Loaded sentiment model v%s from %s (docs=%d, vocab=%d)",
        meta.version, path, meta.dataset_size, meta.vocabulary_size,
    )
    return model, meta
