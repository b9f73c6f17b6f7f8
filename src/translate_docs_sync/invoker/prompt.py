"""
Prompt construction for command-line translators.
"""

from __future__ import annotations

from translate_docs_sync.invoker.base import TranslationRequest

LANGUAGE_NAMES = {
    "en": "English",
    "ja": "Japanese",
    "zh": "Chinese",
    "ko": "Korean",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "ar": "Arabic",
}

GUIDELINES = [
    "- Preserve Markdown structure, lists, tables, code blocks, inline formatting, and URLs.",
    "- Keep front matter and raw HTML untouched unless the text inside needs translating.",
    "- Do not add commentary, apologies, explanations, or diff markers.",
    "- Do not wrap the response in a code fence unless the source is itself a single fenced block.",
    "- Output the translation only. Do not mention tools, limitations, or the translation process.",
    "- Keep the existing spacing and blank lines where possible.",
]


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code.upper())


def build_translation_prompt(request: TranslationRequest) -> str:
    """
    Build the prompt handed to the translation command.

    Args:
        request: Text, languages and source label to translate.

    Returns:
        Complete prompt string.
    """
    source_name = language_name(request.source_lang)
    target_name = language_name(request.target_lang)

    prompt_parts = [
        f"You are a professional technical translator. Convert the following "
        f"{source_name} Markdown content into {target_name}.",
        "",
        "Guidelines:",
        *GUIDELINES,
        "",
        'If you cannot comply, respond with the single word "ERROR".',
        "",
        f"Source file: {request.source_label}",
        "",
        "----- BEGIN SOURCE -----",
        request.text,
        "----- END SOURCE -----",
    ]
    return "\n".join(prompt_parts)
