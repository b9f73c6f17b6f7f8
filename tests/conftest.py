"""Shared fixtures for translate-docs-sync tests."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from translate_docs_sync.invoker.base import TranslationInvoker, TranslationRequest
from translate_docs_sync.pipeline import PipelineConfig, TranslationPipeline


class FakeInvoker(TranslationInvoker):
    """Invoker returning canned translations and recording every request."""

    def __init__(self, responses: dict[str, str] | Callable[[str], str] | None = None):
        self.responses = responses if responses is not None else {}
        self.requests: list[TranslationRequest] = []

    @property
    def name(self) -> str:
        return "fake"

    async def translate(self, request: TranslationRequest) -> str:
        self.requests.append(request)
        if callable(self.responses):
            return self.responses(request.text)
        return self.responses.get(request.text, f"[{request.target_lang}] {request.text}")

    @property
    def texts(self) -> list[str]:
        return [request.text for request in self.requests]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project root with a manifest directory."""
    (tmp_path / "translations").mkdir()
    (tmp_path / "docs").mkdir()
    return tmp_path


@pytest.fixture
def write_manifest(project: Path):
    """Writer for the project manifest; each argument is one CSV row."""

    def writer(*rows: str) -> Path:
        path = project / "translations" / "targets.csv"
        path.write_text(
            "\n".join(["relative_path,src_lang,target_langs", *rows]) + "\n", encoding="utf-8"
        )
        return path

    return writer


@pytest.fixture
def make_pipeline(project: Path):
    """Factory building a pipeline rooted at the project directory."""

    def factory(
        invoker: TranslationInvoker,
        *,
        allowed: set[str] | None = None,
        dry_run: bool = False,
        log: list | None = None,
    ) -> TranslationPipeline:
        config = PipelineConfig(
            root=project,
            manifest_path=project / "translations" / "targets.csv",
            metadata_path=project / ".translations.json",
            allowed_languages=frozenset(allowed or {"en", "ja"}),
            dry_run=dry_run,
        )
        callback = None
        if log is not None:

            def callback(level, message, context):
                log.append((level, message))

        return TranslationPipeline(
            config,
            invoker,
            console=Console(file=io.StringIO(), width=200),
            log_callback=callback,
        )

    return factory
