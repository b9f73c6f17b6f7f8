"""
Echo invoker.

Returns the source text unchanged. Useful for checking a manifest and cache
setup end to end without calling a real translator.
"""

from __future__ import annotations

from translate_docs_sync.invoker.base import TranslationInvoker, TranslationRequest


class EchoInvoker(TranslationInvoker):
    """Invoker that returns the original text."""

    @property
    def name(self) -> str:
        return "echo"

    async def translate(self, request: TranslationRequest) -> str:
        return request.text
