"""
Clean-up of raw translator output.

The external command occasionally wraps its answer in a code fence, prefixes
it with an apology or repeats a paragraph. These helpers strip that noise
before a translation is written or cached.
"""

from __future__ import annotations

import re

from translate_docs_sync.segments import normalize_line_endings

OUTER_FENCE_PATTERN = re.compile(r"```[\w-]*\n(.*?)\n```", re.DOTALL)
FENCE_LINE_PATTERN = re.compile(r"^\s*```", re.MULTILINE)
PARAGRAPH_BREAK_PATTERN = re.compile(r"\n{2,}")

DISCLAIMER_PATTERNS = [
    re.compile(r"^ok\.(?:\s|$)", re.IGNORECASE),
    re.compile(r"^i\s+apologi[sz]e", re.IGNORECASE),
    re.compile(r"^my\s+apologies", re.IGNORECASE),
    re.compile(r"^i\s+cannot", re.IGNORECASE),
    re.compile(r"^please\s+manually", re.IGNORECASE),
]

# Sentinel the prompt asks for when the translator cannot comply
ERROR_SENTINEL = "ERROR"


def is_disclaimer(line: str) -> bool:
    """Check whether a line is a refusal or hedge rather than content."""
    stripped = line.strip()
    if not stripped:
        return False
    return any(pattern.match(stripped) for pattern in DISCLAIMER_PATTERNS)


def unwrap_outer_fence(text: str) -> str:
    """Remove a code fence that encloses the whole text and nothing else."""
    match = OUTER_FENCE_PATTERN.fullmatch(text)
    if not match:
        return text
    inner = match.group(1)
    # Two separate blocks also start and end with fences; leave those alone
    if FENCE_LINE_PATTERN.search(inner):
        return text
    return inner.strip()


def deduplicate_paragraphs(text: str) -> str:
    """Drop repeated paragraphs, keeping the first occurrence."""
    seen: set[str] = set()
    kept: list[str] = []
    for part in PARAGRAPH_BREAK_PATTERN.split(text):
        key = part.strip()
        if not key or key in seen:
            continue
        seen.add(key)
        kept.append(part)
    return "\n\n".join(kept)


def _sanitize_once(text: str) -> str:
    text = normalize_line_endings(text).strip()
    if text == "":
        return ""

    text = unwrap_outer_fence(text)

    lines = [line for line in text.split("\n") if not is_disclaimer(line)]
    text = "\n".join(lines).strip()
    if text == "":
        return ""

    return deduplicate_paragraphs(text).strip()


def sanitize_translation(raw_text: str | None) -> str:
    """
    Clean a raw translation.

    Each pass can expose something the previous one could not see (a fence
    that only encloses the text once an apology line is gone), so passes are
    repeated until the text is stable.

    Args:
        raw_text: Output of the translation command, or a cached value.

    Returns:
        The cleaned translation. May be empty when the response was nothing
        but disclaimers.
    """
    text = raw_text or ""
    while True:
        cleaned = _sanitize_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def is_unusable(translation: str) -> bool:
    """True for sanitized output that must not be written as a translation."""
    return not translation or translation == ERROR_SENTINEL
