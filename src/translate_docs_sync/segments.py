"""
Paragraph segmentation and reconstruction.

Documents are split at runs of blank lines. Each segment keeps the exact
separator that followed it so a translated document can be rebuilt with the
same paragraph layout as its source.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Sequence
from dataclasses import dataclass

from translate_docs_sync.errors import SegmentConsistencyError

# Two or more newlines; captured so the separator survives the split
SEPARATOR_PATTERN = re.compile(r"(\n{2,})")


@dataclass(frozen=True)
class Segment:
    """A paragraph body and the blank-line run that followed it."""

    body: str
    separator: str = ""

    @property
    def hash(self) -> str:
        return hash_of(self.body)

    @property
    def is_blank(self) -> bool:
        return self.body.strip() == ""


@dataclass
class SegmentResult:
    """Translated text for one segment, ready for reconstruction."""

    hash: str
    translation: str
    separator: str = ""


def normalize_line_endings(text: str) -> str:
    """Convert CRLF line endings to LF."""
    return text.replace("\r\n", "\n")


def hash_of(content: str) -> str:
    """SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def ensure_trailing_newline(text: str) -> str:
    return text if text.endswith("\n") else f"{text}\n"


def split_into_segments(content: str) -> list[Segment]:
    """
    Split a document into ordered segments at blank-line boundaries.

    Args:
        content: Raw document text. CRLF line endings are normalized first.

    Returns:
        Segments in document order. An empty document yields no segments.
    """
    normalized = normalize_line_endings(content)
    if normalized == "":
        return []

    parts = SEPARATOR_PATTERN.split(normalized)
    segments: list[Segment] = []

    for index in range(0, len(parts), 2):
        body = parts[index]
        separator = parts[index + 1] if index + 1 < len(parts) else ""

        # Trailing blank-line run leaves an empty tail behind
        if body == "" and separator == "" and index > 0:
            continue

        segments.append(Segment(body=body, separator=separator))

    return segments


def ensure_complete(results: Sequence[SegmentResult | None]) -> list[SegmentResult]:
    """Return the results unchanged, failing if any slot was never filled."""
    completed: list[SegmentResult] = []
    for index, result in enumerate(results):
        if result is None:
            raise SegmentConsistencyError(f"Missing translated segment at index {index}.")
        completed.append(result)
    return completed


def reconstruct(results: Sequence[SegmentResult]) -> str:
    """Join segment translations with their original separators."""
    return "".join(
        normalize_line_endings(result.translation).rstrip() + result.separator
        for result in results
    )
