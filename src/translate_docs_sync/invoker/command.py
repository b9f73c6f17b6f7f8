"""
Command-line translation invoker.

Runs an external text-generation command once per request. The prompt is
written to a temporary file, the command is expected to write its answer to a
second temporary file and exit 0. Both files live in a temporary directory
that is removed however the call ends.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import re
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from translate_docs_sync.errors import ConfigurationError, InvokerError
from translate_docs_sync.invoker.base import TranslationInvoker, TranslationRequest
from translate_docs_sync.invoker.prompt import build_translation_prompt
from translate_docs_sync.segments import normalize_line_endings

PROMPT_PLACEHOLDER = "{PROMPT_FILE}"
OUTPUT_PLACEHOLDER = "{OUTPUT_FILE}"
REQUIRED_PLACEHOLDERS = (PROMPT_PLACEHOLDER, OUTPUT_PLACEHOLDER)
PLACEHOLDER_PATTERN = re.compile(r"\{([A-Z_]+)\}")

DEFAULT_COMMAND = [
    "bash",
    "-lc",
    "gemini text --model ${GEMINI_TRANSLATION_MODEL:-gemini-1.5-pro} "
    '--input-file "{PROMPT_FILE}" --output-file "{OUTPUT_FILE}"',
]


def parse_command_spec(spec: Any) -> list[str]:
    """
    Validate a command template.

    Args:
        spec: A JSON array string or an already decoded list of strings.

    Returns:
        The template as a list of strings.

    Raises:
        ConfigurationError: If the template is not a non-empty list of strings
            or does not reference both the prompt and output files.
    """
    if isinstance(spec, str):
        try:
            spec = json.loads(spec)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse translation command: {e}") from None

    if (
        not isinstance(spec, list)
        or not spec
        or any(not isinstance(part, str) for part in spec)
    ):
        raise ConfigurationError("Translation command must be a non-empty JSON array of strings.")

    joined = "\n".join(spec)
    missing = [name for name in REQUIRED_PLACEHOLDERS if name not in joined]
    if missing:
        raise ConfigurationError(
            f"Translation command is missing placeholder(s): {', '.join(missing)}"
        )

    return list(spec)


def render_command(template: Sequence[str], bindings: Mapping[str, str]) -> list[str]:
    """
    Substitute ``{NAME}`` placeholders in every argument of a command template.

    Args:
        template: Command and arguments.
        bindings: Placeholder name (without braces) to value.

    Returns:
        The argv list to execute.
    """
    # Single pass: placeholders inside substituted values are left as they are
    return [
        PLACEHOLDER_PATTERN.sub(lambda match: bindings.get(match[1], match[0]), part)
        for part in template
    ]


class CommandInvoker(TranslationInvoker):
    """
    Invoker that shells out to a configurable command.

    The default template calls the ``gemini`` CLI; any command honoring the
    prompt-file / output-file contract works.
    """

    def __init__(
        self,
        command: Sequence[str] | str | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize command invoker.

        Args:
            command: Command template. Defaults to the gemini CLI template.
            timeout: Seconds to wait for the command. None waits forever.
        """
        if command is None:
            command = DEFAULT_COMMAND
        elif not isinstance(command, str):
            command = list(command)
        self._command = parse_command_spec(command)
        self._timeout = timeout

        # Usage statistics
        self.calls = 0

    @property
    def name(self) -> str:
        return f"command:{Path(self._command[0]).name}"

    @property
    def command(self) -> list[str]:
        return list(self._command)

    async def translate(self, request: TranslationRequest) -> str:
        """
        Run the command for one request.

        Raises:
            InvokerError: If the command cannot start, times out, exits
                non-zero, or leaves no usable output.
        """
        prompt = build_translation_prompt(request)
        describe = f"{request.source_label} ({request.source_lang}→{request.target_lang})"

        with tempfile.TemporaryDirectory(prefix="translate-docs-") as tmp:
            prompt_path = Path(tmp) / "request.prompt"
            output_path = Path(tmp) / "response.out"
            prompt_path.write_text(prompt, encoding="utf-8")

            argv = render_command(
                self._command,
                {
                    "PROMPT_FILE": str(prompt_path),
                    "OUTPUT_FILE": str(output_path),
                    "SOURCE_LANG": request.source_lang,
                    "TARGET_LANG": request.target_lang,
                    "SOURCE_PATH": request.source_label,
                    "TARGET_PATH": request.target_label,
                },
            )

            await self._execute(argv)
            self.calls += 1

            if not output_path.exists():
                raise InvokerError(f"Translation command produced no output file for {describe}.")
            try:
                translation = output_path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise InvokerError(
                    f"Translation command wrote invalid UTF-8 for {describe}: {e}"
                ) from e

        if not translation.strip():
            raise InvokerError(f"Translation command returned an empty result for {describe}.")

        return normalize_line_endings(translation.rstrip())

    async def _execute(self, argv: list[str]) -> None:
        """Run a command to completion, inheriting stdout and stderr."""
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise InvokerError(f"Could not start translation command {argv[0]!r}: {e}") from e

        try:
            return_code = await asyncio.wait_for(process.wait(), timeout=self._timeout)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise InvokerError(
                f"Translation command {argv[0]!r} timed out after {self._timeout} seconds."
            ) from None

        if return_code != 0:
            raise InvokerError(
                f'Command "{" ".join(argv)}" exited with code {return_code}.'
            )
