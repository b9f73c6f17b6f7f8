"""
Content-addressed translation cache.

The cache store is a single JSON document mapping
``"{path}::{source_lang}->{target_lang}"`` to the last successful translation
of that document pair, including the per-segment translations keyed by body
hash. It is loaded once per run and written back once, only when changed.
"""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from translate_docs_sync.errors import CacheStoreError
from translate_docs_sync.sanitizer import sanitize_translation


class StoredSegment(BaseModel):
    """A segment translation recorded at translation time."""

    model_config = ConfigDict(strict=True, extra="forbid")

    hash: str
    translation: str = ""


class TranslationEntry(BaseModel):
    """Cache record for one (document, language pair)."""

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    source: str
    target: str
    source_lang: str
    target_lang: str
    source_hash: str
    translated_at: str
    segments: list[StoredSegment] = Field(default_factory=list)


_STORE_ADAPTER = TypeAdapter(dict[str, TranslationEntry])


def cache_key(source: str, source_lang: str, target_lang: str) -> str:
    """Build the store key for a document pair."""
    return f"{source}::{source_lang}->{target_lang}"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TranslationCache:
    """In-memory view of the cache store with a dirty flag."""

    def __init__(self, path: Path, entries: dict[str, TranslationEntry] | None = None):
        """
        Initialize cache.

        Args:
            path: Location of the JSON store.
            entries: Already loaded entries. Empty when omitted.
        """
        self.path = Path(path)
        self._entries: dict[str, TranslationEntry] = dict(entries or {})
        self._dirty = False

    @classmethod
    def load(cls, path: Path | str) -> TranslationCache:
        """
        Load the cache store.

        A missing or empty file yields an empty cache. Anything that is not a
        JSON object of well-formed entries is rejected.

        Raises:
            CacheStoreError: If the store cannot be parsed or validated.
        """
        path = Path(path)
        if not path.exists():
            return cls(path)

        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CacheStoreError(f"Translation cache ({path}) is not valid UTF-8: {e}") from e
        if not content.strip():
            return cls(path)

        try:
            entries = _STORE_ADAPTER.validate_json(content)
        except ValidationError as e:
            raise CacheStoreError(f"Failed to parse translation cache ({path}): {e}") from e

        return cls(path, entries)

    @property
    def dirty(self) -> bool:
        """Whether any entry changed since loading."""
        return self._dirty

    def get(self, key: str) -> TranslationEntry | None:
        return self._entries.get(key)

    def put(self, key: str, entry: TranslationEntry) -> None:
        self._entries[key] = entry
        self._dirty = True

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self) -> Iterator[tuple[str, TranslationEntry]]:
        yield from self._entries.items()

    def dumps(self) -> str:
        """Serialize the store: two-space indent, literal UTF-8, trailing newline."""
        data = {key: entry.model_dump(by_alias=True) for key, entry in self._entries.items()}
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    def save(self) -> None:
        """Rewrite the whole store and clear the dirty flag."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.dumps(), encoding="utf-8", newline="")
        self._dirty = False


class ReuseMap:
    """
    Queues of previously stored translations, keyed by segment hash.

    Identical paragraphs share a hash, so a document that repeats a paragraph
    consumes the stored translations for that hash in storage order. Once a
    queue is exhausted the paragraph has to be translated again.
    """

    def __init__(self, stored: Iterable[StoredSegment] = ()):
        self._queues: dict[str, deque[str]] = {}
        for segment in stored:
            if not segment.hash:
                continue
            queue = self._queues.setdefault(segment.hash, deque())
            cleaned = sanitize_translation(segment.translation)
            if cleaned:
                queue.append(cleaned)

    def take(self, segment_hash: str) -> str | None:
        """Pop the oldest unused translation for a hash, if any."""
        queue = self._queues.get(segment_hash)
        if not queue:
            return None
        return queue.popleft()

    def remaining(self, segment_hash: str) -> int:
        return len(self._queues.get(segment_hash, ()))
