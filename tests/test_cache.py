"""
Tests for the translation cache store and reuse map.
"""

import json

import pytest

from translate_docs_sync.cache import (
    ReuseMap,
    StoredSegment,
    TranslationCache,
    TranslationEntry,
    cache_key,
    utc_timestamp,
)
from translate_docs_sync.errors import CacheStoreError, ConfigurationError


@pytest.fixture
def entry():
    return TranslationEntry(
        source="docs/a_original.md",
        target="docs/a_ja.md",
        source_lang="en",
        target_lang="ja",
        source_hash="abc",
        translated_at="2026-01-01T00:00:00.000Z",
        segments=[StoredSegment(hash="h1", translation="こんにちは")],
    )


# =============================================================================
# ReuseMap Tests
# =============================================================================


class TestReuseMap:
    def test_take_in_storage_order(self):
        reuse = ReuseMap(
            [
                StoredSegment(hash="dup", translation="first"),
                StoredSegment(hash="other", translation="x"),
                StoredSegment(hash="dup", translation="second"),
            ]
        )

        assert reuse.take("dup") == "first"
        assert reuse.take("dup") == "second"
        assert reuse.take("dup") is None

    def test_unknown_hash(self):
        assert ReuseMap().take("missing") is None

    def test_empty_translations_not_queued(self):
        reuse = ReuseMap(
            [
                StoredSegment(hash="h", translation=""),
                StoredSegment(hash="h", translation="I apologize, no."),
                StoredSegment(hash="h", translation="real"),
            ]
        )

        assert reuse.remaining("h") == 1
        assert reuse.take("h") == "real"

    def test_cached_values_are_sanitized(self):
        reuse = ReuseMap([StoredSegment(hash="h", translation="```\nBonjour\n```")])

        assert reuse.take("h") == "Bonjour"

    def test_segments_without_hash_ignored(self):
        reuse = ReuseMap([StoredSegment(hash="", translation="orphan")])

        assert reuse.take("") is None


# =============================================================================
# TranslationCache Tests
# =============================================================================


class TestTranslationCache:
    def test_key_format(self):
        assert cache_key("docs/a.md", "en", "ja") == "docs/a.md::en->ja"

    def test_missing_store_is_empty(self, tmp_path):
        cache = TranslationCache.load(tmp_path / "missing.json")

        assert len(cache) == 0
        assert not cache.dirty

    def test_blank_store_is_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("\n", encoding="utf-8")

        assert len(TranslationCache.load(path)) == 0

    def test_invalid_json_rejected(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CacheStoreError):
            TranslationCache.load(path)

    def test_invalid_utf8_rejected(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b'{"k": "\xff"}')

        with pytest.raises(CacheStoreError, match="not valid UTF-8"):
            TranslationCache.load(path)

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            TranslationCache.load(path)

    def test_entry_shape_mismatch_rejected(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(
            json.dumps({"docs/a.md::en->ja": {"source": "docs/a.md", "sourceHash": 42}}),
            encoding="utf-8",
        )

        with pytest.raises(CacheStoreError):
            TranslationCache.load(path)

    def test_entry_without_segments_loads(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(
            json.dumps(
                {
                    "docs/a.md::en->ja": {
                        "source": "docs/a.md",
                        "target": "docs/a_ja.md",
                        "sourceLang": "en",
                        "targetLang": "ja",
                        "sourceHash": "abc",
                        "translatedAt": "2026-01-01T00:00:00.000Z",
                    }
                }
            ),
            encoding="utf-8",
        )

        entry = TranslationCache.load(path).get("docs/a.md::en->ja")

        assert entry is not None
        assert entry.segments == []
        assert entry.source_hash == "abc"

    def test_put_marks_dirty(self, tmp_path, entry):
        cache = TranslationCache(tmp_path / "store.json")
        cache.put("k", entry)

        assert cache.dirty
        assert "k" in cache
        assert cache.get("k") is entry

    def test_save_format(self, tmp_path, entry):
        path = tmp_path / "nested" / "store.json"
        cache = TranslationCache(path)
        cache.put("docs/a_original.md::en->ja", entry)
        cache.save()

        text = path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert "こんにちは" in text
        assert '  "docs/a_original.md::en->ja": {' in text
        data = json.loads(text)
        assert data["docs/a_original.md::en->ja"]["sourceLang"] == "en"
        assert data["docs/a_original.md::en->ja"]["segments"] == [
            {"hash": "h1", "translation": "こんにちは"}
        ]
        assert not cache.dirty

    def test_save_then_load(self, tmp_path, entry):
        path = tmp_path / "store.json"
        cache = TranslationCache(path)
        cache.put("k", entry)
        cache.save()

        loaded = TranslationCache.load(path)

        assert loaded.get("k") == entry
        assert loaded.dumps() == path.read_text(encoding="utf-8")


def test_utc_timestamp_format():
    stamp = utc_timestamp()

    assert stamp.endswith("Z")
    assert len(stamp) == len("2026-01-01T00:00:00.000Z")
