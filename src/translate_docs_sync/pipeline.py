"""
Incremental translation pipeline.

Walks the manifest one document and one target language at a time and keeps
each translated document in step with its source:

- unchanged sources are skipped using the whole-document hash
- first translations send the whole document in one call
- later updates translate only the segments whose hash has no cached
  translation left to reuse
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from translate_docs_sync.cache import (
    ReuseMap,
    StoredSegment,
    TranslationCache,
    TranslationEntry,
    cache_key,
    utc_timestamp,
)
from translate_docs_sync.config import LOG_LEVELS, Settings
from translate_docs_sync.errors import UnusableTranslationError
from translate_docs_sync.invoker.base import TranslationInvoker, TranslationRequest
from translate_docs_sync.manifest import ManifestRow, derive_target_path, load_manifest
from translate_docs_sync.sanitizer import is_unusable, sanitize_translation
from translate_docs_sync.segments import (
    Segment,
    SegmentResult,
    ensure_complete,
    ensure_trailing_newline,
    hash_of,
    reconstruct,
    split_into_segments,
)

LOG_PREFIX = "[translate]"

LEVEL_STYLES = {
    "DEBUG": "dim",
    "INFO": "",
    "WARNING": "yellow",
    "ERROR": "red",
}

# Callback receiving (level, message, context) for every status line
LogCallback = Callable[[str, str, dict[str, Any]], None] | None


class PairState(str, Enum):
    """Outcome of processing one (document, target language) pair."""

    SKIP_DISALLOWED = "skip_disallowed"
    SKIP_SAME_LANG = "skip_same_lang"
    UP_TO_DATE = "up_to_date"
    FRESH = "fresh"
    INCREMENTAL = "incremental"
    DRY_RUN_NOTED = "dry_run_noted"


@dataclass
class PairResult:
    """Result of processing one document pair."""

    source: str
    source_lang: str
    target_lang: str
    state: PairState
    target: str | None = None
    translated_segments: int = 0
    reused_segments: int = 0
    detail: str | None = None

    @property
    def wrote_target(self) -> bool:
        return self.state in (PairState.FRESH, PairState.INCREMENTAL)


@dataclass
class RunSummary:
    """Summary of a pipeline run."""

    manifest_found: bool = True
    results: list[PairResult] = field(default_factory=list)
    skipped_rows: list[str] = field(default_factory=list)
    metadata_written: bool = False
    dry_run: bool = False

    @property
    def translated_count(self) -> int:
        """Pairs that required at least one translator call."""
        return sum(
            1 for result in self.results if result.wrote_target and result.translated_segments
        )

    def count(self, state: PairState) -> int:
        return sum(1 for result in self.results if result.state == state)


@dataclass
class PipelineConfig:
    """Configuration for the translation pipeline."""

    root: Path
    manifest_path: Path
    metadata_path: Path
    allowed_languages: frozenset[str] = frozenset({"en", "ja"})
    dry_run: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            root=settings.paths.root,
            manifest_path=settings.paths.manifest,
            metadata_path=settings.paths.metadata,
            allowed_languages=frozenset(settings.languages.allowed),
            dry_run=settings.dry_run,
            log_level=settings.logging.level,
        )


class TranslationPipeline:
    """
    Keeps translated documents in sync with their sources.

    Pairs are processed strictly in manifest order. Target files are written
    as soon as a pair finishes; the cache store is written once at the end of
    a successful run.
    """

    def __init__(
        self,
        config: PipelineConfig,
        invoker: TranslationInvoker,
        *,
        cache: TranslationCache | None = None,
        console: Console | None = None,
        log_callback: LogCallback = None,
    ):
        """
        Initialize translation pipeline.

        Args:
            config: Pipeline configuration.
            invoker: Translator used for every cache miss.
            cache: Preloaded cache. Loaded from ``config.metadata_path`` if None.
            console: Rich console for status output. If None, creates a new one.
            log_callback: Optional callback receiving every status line.
        """
        self.config = config
        self.invoker = invoker
        self.cache = cache if cache is not None else TranslationCache.load(config.metadata_path)
        self.console = console or Console()
        self._log_callback = log_callback
        self._min_level = LOG_LEVELS.index(config.log_level)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> RunSummary:
        """
        Process every row of the configured manifest.

        A missing manifest is not an error: nothing is done.

        Raises:
            InvokerError: If the translator fails; the cache is not written.
        """
        rows = load_manifest(self.config.manifest_path)
        if rows is None:
            self._log("WARNING", f"Manifest not found at {self._display(self.config.manifest_path)}.")
            return RunSummary(manifest_found=False, dry_run=self.config.dry_run)
        return await self.run_rows(rows)

    async def run_rows(self, rows: Sequence[ManifestRow]) -> RunSummary:
        """Process manifest rows in order, then flush the cache if it changed."""
        summary = RunSummary(dry_run=self.config.dry_run)

        if not rows:
            self._log("INFO", "No translation targets found in manifest.")
            return summary

        for row in rows:
            summary.results.extend(await self.process_row(row, summary))

        if self.cache.dirty and not self.config.dry_run:
            self.cache.save()
            summary.metadata_written = True
            self._log("INFO", f"Updated metadata: {self._display(self.cache.path)}")

        if summary.translated_count == 0:
            suffix = " (dry-run)" if self.config.dry_run else ""
            self._log("INFO", f"No translations required{suffix}.")
        else:
            self._log("INFO", f"Completed {summary.translated_count} translation(s).")

        return summary

    async def process_row(
        self, row: ManifestRow, summary: RunSummary | None = None
    ) -> list[PairResult]:
        """Process every target language of one manifest row."""
        if not row.is_valid:
            self._skip_row(summary, f"Skipping row with missing path or src_lang: {row.raw}")
            return []

        if row.source_lang not in self.config.allowed_languages:
            self._log(
                "WARNING",
                f'Source language "{row.source_lang}" is not allowed. '
                f"Skipping {row.relative_path}.",
            )
            return [
                PairResult(
                    source=row.relative_path,
                    source_lang=row.source_lang,
                    target_lang=target_lang,
                    state=PairState.SKIP_DISALLOWED,
                    detail="source language not allowed",
                )
                for target_lang in row.target_langs
            ]

        if not row.target_langs:
            self._skip_row(summary, f"No target languages specified for {row.relative_path}.")
            return []

        source_path = self.config.root / row.relative_path
        if not source_path.is_file():
            self._skip_row(summary, f"Source file not found: {row.relative_path}")
            return []

        # Bytes keep CRLF intact so the document hash matches the file on disk;
        # undecodable bytes become U+FFFD
        content = source_path.read_bytes().decode("utf-8", errors="replace")

        results = []
        for target_lang in row.target_langs:
            results.append(await self.process_pair(row, content, target_lang))
        return results

    # ------------------------------------------------------------------
    # Pair state machine
    # ------------------------------------------------------------------

    async def process_pair(self, row: ManifestRow, content: str, target_lang: str) -> PairResult:
        """
        Bring one translated document up to date.

        Args:
            row: Manifest row of the source document.
            content: Raw source document text.
            target_lang: Language to translate into.

        Returns:
            PairResult describing what was done.
        """
        source = row.relative_path
        source_lang = row.source_lang
        pair = f"{source} ({source_lang}→{target_lang})"
        result = PairResult(
            source=source,
            source_lang=source_lang,
            target_lang=target_lang,
            state=PairState.SKIP_DISALLOWED,
        )

        allowed = self.config.allowed_languages
        for kind, language in (("Source", source_lang), ("Target", target_lang)):
            if language not in allowed:
                self._log("WARNING", f'{kind} language "{language}" is not allowed for {source}.')
                result.detail = f"{kind.lower()} language not allowed"
                return result

        if target_lang == source_lang:
            result.state = PairState.SKIP_SAME_LANG
            return result

        target = derive_target_path(source, source_lang, target_lang)
        result.target = target
        key = cache_key(source, source_lang, target_lang)
        entry = self.cache.get(key)
        source_hash = hash_of(content)

        if entry is not None and entry.source_hash == source_hash:
            self._log("INFO", f"Up-to-date: {pair}.", key=key)
            result.state = PairState.UP_TO_DATE
            return result

        segments = split_into_segments(content)
        has_text = any(not segment.is_blank for segment in segments)

        if has_text and (entry is None or not entry.segments):
            if self.config.dry_run:
                self._log("INFO", f"(dry-run) Would translate entire file {pair}.")
                result.state = PairState.DRY_RUN_NOTED
                result.detail = "would translate entire file"
                return result

            request = TranslationRequest(
                text=content,
                source_lang=source_lang,
                target_lang=target_lang,
                source_label=source,
                target_label=target,
            )
            raw_translation = await self.invoker.translate(request)
            aligned = align_whole_translation(segments, raw_translation)
            if aligned is not None:
                self._commit(key, row, target_lang, target, source_hash, aligned)
                self._log("INFO", f"Translated entire file {pair}.", key=key)
                result.state = PairState.FRESH
                result.translated_segments = len(segments)
                return result

            self._log(
                "WARNING",
                f"Unable to align segments for {pair}; falling back to per-segment translation.",
            )
            entry = None

        return await self._process_incremental(
            row, target_lang, target, key, source_hash, segments, entry, result
        )

    async def _process_incremental(
        self,
        row: ManifestRow,
        target_lang: str,
        target: str,
        key: str,
        source_hash: str,
        segments: list[Segment],
        entry: TranslationEntry | None,
        result: PairResult,
    ) -> PairResult:
        """Reuse cached segment translations and translate the rest."""
        source = row.relative_path
        pair = f"{source} ({row.source_lang}→{target_lang})"
        reuse = ReuseMap(entry.segments if entry else ())

        slots: list[SegmentResult | None] = [None] * len(segments)
        pending: list[int] = []

        for index, segment in enumerate(segments):
            segment_hash = segment.hash
            if segment.is_blank:
                slots[index] = SegmentResult(segment_hash, "", segment.separator)
                continue

            reused = reuse.take(segment_hash)
            if reused is not None:
                slots[index] = SegmentResult(segment_hash, reused, segment.separator)
                result.reused_segments += 1
                continue

            pending.append(index)

        if self.config.dry_run:
            if pending:
                self._log("INFO", f"(dry-run) Would translate {len(pending)} segment(s) for {pair}.")
                result.detail = f"would translate {len(pending)} segment(s)"
            else:
                self._log("INFO", f"(dry-run) No segment changes detected for {pair}.")
                result.detail = "no segment changes"
            result.state = PairState.DRY_RUN_NOTED
            return result

        total = len(segments)
        requests = [
            TranslationRequest(
                text=segments[index].body,
                source_lang=row.source_lang,
                target_lang=target_lang,
                source_label=f"{source} (segment {index + 1}/{total})",
                target_label=f"{target} (segment {index + 1}/{total})",
            )
            for index in pending
        ]
        raw_translations = await self.invoker.translate_many(requests) if requests else []

        for index, raw in zip(pending, raw_translations):
            translation = sanitize_translation(raw)
            if is_unusable(translation):
                raise UnusableTranslationError(
                    f"Translator returned an unusable result for {source} "
                    f"segment {index + 1}/{total}."
                )
            segment = segments[index]
            slots[index] = SegmentResult(segment.hash, translation, segment.separator)
            self._log("DEBUG", f"Translated segment {index + 1}/{total} for {pair}.")

        self._commit(key, row, target_lang, target, source_hash, ensure_complete(slots))

        result.state = PairState.INCREMENTAL
        result.translated_segments = len(pending)
        if pending:
            self._log(
                "INFO",
                f"Updated {target} ({row.source_lang}→{target_lang}) "
                f"with {len(pending)} new segment(s).",
                key=key,
            )
        else:
            self._log("INFO", f"Reused existing translations for {pair}.", key=key)
        return result

    def _commit(
        self,
        key: str,
        row: ManifestRow,
        target_lang: str,
        target: str,
        source_hash: str,
        results: list[SegmentResult],
    ) -> None:
        """Write the rebuilt target document and record it in the cache."""
        target_path = self.config.root / target
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_text(
            ensure_trailing_newline(reconstruct(results)), encoding="utf-8", newline=""
        )

        self.cache.put(
            key,
            TranslationEntry(
                source=row.relative_path,
                target=target,
                source_lang=row.source_lang,
                target_lang=target_lang,
                source_hash=source_hash,
                translated_at=utc_timestamp(),
                segments=[
                    StoredSegment(hash=result.hash, translation=result.translation)
                    for result in results
                ],
            ),
        )

    # ------------------------------------------------------------------
    # Status output
    # ------------------------------------------------------------------

    def _skip_row(self, summary: RunSummary | None, message: str) -> None:
        self._log("WARNING", message)
        if summary is not None:
            summary.skipped_rows.append(message)

    def _display(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.config.root))
        except ValueError:
            return str(path)

    def _log(self, level: str, message: str, **context: Any) -> None:
        """Emit a status line and forward it to the log callback."""
        if self._log_callback:
            self._log_callback(level, message, context)

        if LOG_LEVELS.index(level) < self._min_level:
            return

        style = LEVEL_STYLES.get(level, "")
        text = escape(f"{LOG_PREFIX} {message}")
        self.console.print(f"[{style}]{text}[/{style}]" if style else text)


def align_whole_translation(
    segments: list[Segment], raw_translation: str
) -> list[SegmentResult] | None:
    """
    Pair a whole-document translation with the source segments.

    Translation segments are matched to source segments by position. Returns
    None when the counts differ or a non-blank source segment ends up without
    a usable translation; the caller then translates segment by segment.
    """
    translated = split_into_segments(ensure_trailing_newline(raw_translation))
    if len(translated) != len(segments):
        return None

    results: list[SegmentResult] = []
    for segment, translated_segment in zip(segments, translated):
        if segment.is_blank:
            results.append(SegmentResult(segment.hash, "", segment.separator))
            continue
        translation = sanitize_translation(translated_segment.body)
        if is_unusable(translation):
            return None
        results.append(SegmentResult(segment.hash, translation, segment.separator))
    return results
