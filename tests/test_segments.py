"""
Tests for segmentation and reconstruction.
"""

import pytest

from translate_docs_sync.errors import SegmentConsistencyError
from translate_docs_sync.segments import (
    Segment,
    SegmentResult,
    ensure_complete,
    ensure_trailing_newline,
    hash_of,
    normalize_line_endings,
    reconstruct,
    split_into_segments,
)


def identity(segments):
    return [SegmentResult(s.hash, s.body, s.separator) for s in segments]


# =============================================================================
# Segmentation
# =============================================================================


class TestSplitIntoSegments:
    def test_empty_document(self):
        assert split_into_segments("") == []

    def test_single_paragraph(self):
        assert split_into_segments("Hello") == [Segment("Hello", "")]

    def test_separators_attach_to_preceding_body(self):
        segments = split_into_segments("Hello\n\nWorld\n\n\nAgain")

        assert segments == [
            Segment("Hello", "\n\n"),
            Segment("World", "\n\n\n"),
            Segment("Again", ""),
        ]

    def test_single_newlines_stay_inside_body(self):
        segments = split_into_segments("- one\n- two\n\nnext")

        assert segments[0].body == "- one\n- two"
        assert len(segments) == 2

    def test_crlf_is_normalized(self):
        assert split_into_segments("Hello\r\n\r\nWorld") == split_into_segments("Hello\n\nWorld")

    def test_leading_blank_run_keeps_empty_segment(self):
        segments = split_into_segments("\n\nHello")

        assert segments[0] == Segment("", "\n\n")
        assert segments[0].is_blank
        assert segments[1] == Segment("Hello", "")

    def test_trailing_blank_run_has_no_empty_tail(self):
        segments = split_into_segments("Hello\n\n")

        assert segments == [Segment("Hello", "\n\n")]

    def test_deterministic(self):
        content = "# Title\n\nBody text\n\n- item\n"
        first = split_into_segments(content)
        second = split_into_segments(content)

        assert first == second
        assert [s.hash for s in first] == [s.hash for s in second]


class TestHashes:
    def test_hash_is_sha256_hex(self):
        assert hash_of("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_same_body_same_hash_anywhere(self):
        a = split_into_segments("Intro\n\nShared paragraph")
        b = split_into_segments("Shared paragraph\n\nOther\n\nMore")

        assert a[1].hash == b[0].hash
        assert a[0].hash != b[1].hash


# =============================================================================
# Reconstruction
# =============================================================================


class TestReconstruct:
    @pytest.mark.parametrize(
        "document",
        [
            "Hello",
            "Hello\n\nWorld",
            "# Title\n\nPara one\nline two\n\n\n\nPara three",
            "\n\nLeading blank",
            "Trailing separator\n\n",
            "a\r\n\r\nb",
        ],
    )
    def test_identity_round_trip(self, document):
        segments = split_into_segments(document)

        assert reconstruct(identity(segments)) == normalize_line_endings(document)

    def test_document_with_trailing_newline_round_trips_with_ensure(self):
        document = "Hello\n\nWorld\n"
        rebuilt = reconstruct(identity(split_into_segments(document)))

        assert ensure_trailing_newline(rebuilt) == document

    def test_translation_trailing_whitespace_is_trimmed(self):
        results = [
            SegmentResult("h1", "Bonjour  \n", "\n\n"),
            SegmentResult("h2", "Monde\r\n", ""),
        ]

        assert reconstruct(results) == "Bonjour\n\nMonde"

    def test_ensure_complete_rejects_holes(self):
        with pytest.raises(SegmentConsistencyError, match="index 1"):
            ensure_complete([SegmentResult("h", "x", ""), None])

    def test_ensure_complete_passes_full_list(self):
        results = [SegmentResult("h", "x", "")]

        assert ensure_complete(results) == results


class TestTrailingNewline:
    def test_adds_newline(self):
        assert ensure_trailing_newline("text") == "text\n"

    def test_keeps_existing_newline(self):
        assert ensure_trailing_newline("text\n") == "text\n"
