"""
translate-docs-sync: incremental translation of documentation files.

This package provides tools for:
- Splitting documents into paragraph segments keyed by content hash
- Caching segment translations between runs
- Re-translating only new or changed paragraphs through an external command
"""

__version__ = "0.1.0"

from translate_docs_sync.cache import ReuseMap, TranslationCache, TranslationEntry
from translate_docs_sync.config import Settings, load_config
from translate_docs_sync.errors import (
    ConfigurationError,
    InvokerError,
    TranslateDocsError,
    UnusableTranslationError,
)
from translate_docs_sync.invoker import TranslationInvoker, TranslationRequest, create_invoker
from translate_docs_sync.pipeline import (
    PairState,
    PipelineConfig,
    RunSummary,
    TranslationPipeline,
)
from translate_docs_sync.sanitizer import sanitize_translation
from translate_docs_sync.segments import Segment, reconstruct, split_into_segments

__all__ = [
    # Config
    "Settings",
    "load_config",
    # Errors
    "TranslateDocsError",
    "ConfigurationError",
    "InvokerError",
    "UnusableTranslationError",
    # Segments
    "Segment",
    "split_into_segments",
    "reconstruct",
    "sanitize_translation",
    # Cache
    "TranslationCache",
    "TranslationEntry",
    "ReuseMap",
    # Invoker
    "TranslationInvoker",
    "TranslationRequest",
    "create_invoker",
    # Pipeline
    "PairState",
    "PipelineConfig",
    "RunSummary",
    "TranslationPipeline",
]
