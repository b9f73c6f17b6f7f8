"""
Translation invoker abstraction layer.

Supports multiple invokers:
- Command (default): Shells out to a user-configurable text-generation CLI
- Echo: Returns the source text unchanged, for smoke runs and tests
"""

from translate_docs_sync.invoker.base import TranslationInvoker, TranslationRequest
from translate_docs_sync.invoker.command import CommandInvoker, parse_command_spec, render_command
from translate_docs_sync.invoker.factory import InvokerType, create_invoker

__all__ = [
    "TranslationInvoker",
    "TranslationRequest",
    "CommandInvoker",
    "parse_command_spec",
    "render_command",
    "InvokerType",
    "create_invoker",
]
