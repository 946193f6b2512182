"""
Sentiment Engine – Errors
==========================
Exception taxonomy for the hybrid sentiment pipeline.

Propagation:
  - Invalid input        → fatal to that call only
  - Training failure     → fatal to ``train``; the previous model is kept
  - Model not trained    → fatal to ``predict``
  - Contextual timeout   → internal; the contextual classifier is dropped
                           from the blend and the call still succeeds
  - Disposed             → every call after ``dispose()``
  - Batch item failure   → captured in the item's output slot
"""

from __future__ import annotations

from typing import Optional


class SentimentEngineError(Exception):
    """Base exception for all sentiment engine errors."""

    def __init__(
        self,
        message: str = "An error occurred",
        code: int = 500,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)


class InvalidInputError(SentimentEngineError):
    """Raised when a request is not shaped like text at all."""

    def __init__(self, reason: str):
        super().__init__(
            message="Invalid analysis input",
            code=422,
            detail=reason,
        )


class TrainingError(SentimentEngineError):
    """Raised when a training set is empty or carries an unknown label."""

    def __init__(self, reason: str):
        super().__init__(
            message="Model training failed",
            code=422,
            detail=reason,
        )


class ModelNotTrainedError(SentimentEngineError):
    """Raised when ``predict`` is called before ``train`` or a model load."""

    def __init__(self):
        super().__init__(
            message="Statistical model is not trained",
            code=503,
            detail="Call train() or load a persisted model before predicting.",
        )


class ModelPersistenceError(SentimentEngineError):
    """Raised when a persisted model cannot be written, read or verified."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        super().__init__(
            message=f"Model persistence failed for '{path}'",
            code=500,
            detail=reason,
        )


class ContextualTimeoutError(SentimentEngineError):
    """
    Raised when the contextual classifier misses its deadline.
    Never leaves the orchestrator – handled by degrading the blend.
    """

    def __init__(self, timeout_s: float):
        self.timeout_s = timeout_s
        super().__init__(
            message="Contextual classifier timed out",
            code=504,
            detail=f"No answer within {timeout_s:.2f}s",
        )


class ContextualUnavailableError(SentimentEngineError):
    """
    Raised when the contextual classifier cannot initialise or its
    inference call fails.  Handled like a timeout.
    """

    def __init__(self, reason: str = ""):
        super().__init__(
            message="Contextual classifier unavailable",
            code=503,
            detail=reason,
        )


class DisposedError(SentimentEngineError):
    """Raised by any orchestrator operation after ``dispose()``."""

    def __init__(self, operation: str = ""):
        super().__init__(
            message="Orchestrator has been disposed",
            code=410,
            detail=f"'{operation}' called after dispose()" if operation else None,
        )


class ConfigurationError(SentimentEngineError):
    """Raised when engine configuration fails validation."""

    def __init__(self, reason: str):
        super().__init__(
            message="Invalid engine configuration",
            code=500,
            detail=reason,
        )
