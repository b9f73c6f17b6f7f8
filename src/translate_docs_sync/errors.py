"""
Exception hierarchy for translate-docs-sync.

Configuration and invoker errors abort the whole run; row-level problems are
reported as warnings by the pipeline and never raised.
"""

from __future__ import annotations


class TranslateDocsError(Exception):
    """Base exception for all pipeline errors."""


class ConfigurationError(TranslateDocsError):
    """Raised when settings or the invoker command template are invalid."""


class CacheStoreError(ConfigurationError):
    """Raised when the translation cache store cannot be parsed."""


class InvokerError(TranslateDocsError):
    """Raised when the external translation command fails."""


class UnusableTranslationError(InvokerError):
    """Raised when a translation is empty or a refusal after sanitizing."""


class SegmentConsistencyError(TranslateDocsError):
    """Raised when a segment slot is still empty at reconstruction time."""
