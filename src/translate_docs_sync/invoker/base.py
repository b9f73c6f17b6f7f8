"""
Base classes for translation invokers.

Defines the interface the pipeline uses to obtain translations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class TranslationRequest:
    """A single piece of text to translate."""

    text: str
    source_lang: str
    target_lang: str
    source_label: str
    target_label: str


class TranslationInvoker(ABC):
    """
    Abstract base class for translation invokers.

    Implementations return the raw translated text and raise
    ``InvokerError`` when the underlying tool fails. Sanitizing the output is
    the caller's job.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Invoker name for status output."""
        ...

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> str:
        """
        Translate one request.

        Args:
            request: Text and language pair to translate.

        Returns:
            Raw translated text.
        """
        ...

    async def translate_many(self, requests: Sequence[TranslationRequest]) -> list[str]:
        """
        Translate several requests, returning results in request order.

        Requests are issued one at a time. Subclasses may override this with
        a bounded concurrent strategy; the first failure must propagate.
        """
        results: list[str] = []
        for request in requests:
            results.append(await self.translate(request))
        return results
