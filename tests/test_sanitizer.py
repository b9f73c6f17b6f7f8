"""
Tests for translator output sanitizing.
"""

import pytest

from translate_docs_sync.sanitizer import (
    deduplicate_paragraphs,
    is_disclaimer,
    is_unusable,
    sanitize_translation,
    unwrap_outer_fence,
)

SAMPLES = [
    "",
    "   ",
    "Hello",
    "```\nHello\n```",
    "```markdown\n# Title\n\nBody\n```",
    "```\na\n```\n\ntext\n\n```\nb\n```",
    "I apologize, I cannot translate this.\n\nActual content.",
    "I cannot do that\n```\nfenced\n```",
    "I cannot\n```\nI apologize\n```",
    "Para\n\nPara\n\nOther\n\n\n\nPara",
    "Ok. Here you go\nTranslated line",
    "ERROR",
    "  leading and trailing  \r\n",
]


class TestSanitizeTranslation:
    def test_empty_input(self):
        assert sanitize_translation("") == ""
        assert sanitize_translation(None) == ""
        assert sanitize_translation(" \n\t ") == ""

    def test_trims_and_normalizes(self):
        assert sanitize_translation("  Hola\r\nMundo  \r\n") == "Hola\nMundo"

    def test_unwraps_fully_fenced_response(self):
        assert sanitize_translation("```\nHello\n```") == "Hello"

    def test_unwraps_fence_with_language_tag(self):
        assert sanitize_translation("```markdown\n# Titre\n\nCorps\n```") == "# Titre\n\nCorps"

    def test_embedded_fences_untouched(self):
        text = "Intro\n\n```python\nprint(1)\n```\n\nOutro"

        assert sanitize_translation(text) == text

    def test_two_fenced_blocks_not_unwrapped(self):
        text = "```\na\n```\n\ntext\n\n```\nb\n```"

        assert sanitize_translation(text) == text

    def test_strips_disclaimers(self):
        raw = "I apologize, I cannot translate this.\n\nActual content."

        assert sanitize_translation(raw) == "Actual content."

    @pytest.mark.parametrize(
        "line",
        [
            "Ok. Here is the translation",
            "I apologize for the confusion",
            "My apologies, the text is long",
            "I cannot access the file",
            "Please manually review this",
            "i CANNOT comply",
        ],
    )
    def test_disclaimer_lines_removed(self, line):
        assert sanitize_translation(f"{line}\nこんにちは") == "こんにちは"

    def test_fully_disclaimed_response_is_empty(self):
        assert sanitize_translation("I cannot translate this.\nPlease manually translate.") == ""

    def test_fence_exposed_after_disclaimer_removal(self):
        assert sanitize_translation("I cannot do that\n```\nfenced\n```") == "fenced"

    def test_duplicate_paragraphs_removed(self):
        assert sanitize_translation("Para\n\nPara\n\nOther\n\n\n\nPara") == "Para\n\nOther"

    def test_error_sentinel_kept(self):
        assert sanitize_translation("ERROR") == "ERROR"

    @pytest.mark.parametrize("sample", SAMPLES)
    def test_idempotent(self, sample):
        once = sanitize_translation(sample)

        assert sanitize_translation(once) == once


class TestHelpers:
    def test_is_disclaimer_ignores_blank_lines(self):
        assert not is_disclaimer("")
        assert not is_disclaimer("   ")

    def test_is_disclaimer_requires_line_start(self):
        assert not is_disclaimer("Then I cannot stop")
        assert is_disclaimer("   I cannot stop")

    def test_unwrap_requires_whole_text(self):
        assert unwrap_outer_fence("before\n```\nx\n```") == "before\n```\nx\n```"

    def test_deduplicate_keeps_first_occurrence(self):
        assert deduplicate_paragraphs("b\n\na\n\nb\n\nc") == "b\n\na\n\nc"

    @pytest.mark.parametrize("value", ["", "ERROR"])
    def test_unusable(self, value):
        assert is_unusable(value)

    def test_usable(self):
        assert not is_unusable("Bonjour")
