"""Services - fallback resolution, history and the generation entry point."""

from .fallback import (
    AllProvidersExhausted,
    FallbackOrchestrator,
    GenerationOutcome,
    ProviderAttempt,
)
from .generation import AnalysisResult, GenerationService, ImageResult, TextResult
from .history import HistoryRecorder, PersistenceError, UsageRecord

__all__ = [
    "AllProvidersExhausted",
    "FallbackOrchestrator",
    "GenerationOutcome",
    "ProviderAttempt",
    "AnalysisResult",
    "GenerationService",
    "ImageResult",
    "TextResult",
    "HistoryRecorder",
    "PersistenceError",
    "UsageRecord",
]
