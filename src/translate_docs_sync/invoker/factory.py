"""
Translation invoker factory.

Creates the appropriate invoker based on configuration.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from translate_docs_sync.errors import ConfigurationError
from translate_docs_sync.invoker.base import TranslationInvoker


class InvokerType(str, Enum):
    """Available invoker types."""

    COMMAND = "command"
    ECHO = "echo"


def create_invoker(
    invoker_type: InvokerType | str,
    *,
    command: Sequence[str] | str | None = None,
    timeout: float | None = None,
) -> TranslationInvoker:
    """
    Create a translation invoker.

    Args:
        invoker_type: Type of invoker to create (command or echo).
        command: Command template, only used by the command invoker.
        timeout: Per-call timeout in seconds, only used by the command invoker.

    Returns:
        TranslationInvoker instance.

    Raises:
        ConfigurationError: If the type is unknown or the command is invalid.

    Examples:
        invoker = create_invoker(
            "command",
            command=["my-llm", "--in", "{PROMPT_FILE}", "--out", "{OUTPUT_FILE}"],
        )
    """
    if isinstance(invoker_type, str):
        normalized = invoker_type.strip().lower().replace("_", "-")
        try:
            invoker_type = InvokerType(normalized)
        except ValueError:
            valid = [t.value for t in InvokerType]
            raise ConfigurationError(
                f"Invalid invoker type: {normalized}. Valid options: {valid}"
            ) from None

    if invoker_type == InvokerType.ECHO:
        from translate_docs_sync.invoker.echo import EchoInvoker

        return EchoInvoker()

    from translate_docs_sync.invoker.command import CommandInvoker

    return CommandInvoker(command=command, timeout=timeout)
