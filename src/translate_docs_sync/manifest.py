"""
Translation manifest parsing.

The manifest is a CSV file listing source documents and the languages they
should be translated into::

    # relative_path,src_lang,target_langs
    relative_path,src_lang,target_langs
    docs/guide_original.md,en,ja
    docs/faq_en.md,en,"ja;fr"
"""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

TARGET_LANGUAGE_SPLIT = re.compile(r"[;,]")
ORIGINAL_SUFFIX = "_original"


@dataclass
class ManifestRow:
    """A single manifest row."""

    relative_path: str = ""
    source_lang: str = ""
    target_langs: list[str] = field(default_factory=list)
    line_number: int = 0
    raw: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return bool(self.relative_path and self.source_lang)


def parse_target_languages(raw: str | None) -> list[str]:
    """Split a comma or semicolon separated language list."""
    if not raw:
        return []
    return [value.strip() for value in TARGET_LANGUAGE_SPLIT.split(raw) if value.strip()]


def parse_manifest(text: str) -> list[ManifestRow]:
    """
    Parse manifest CSV text.

    Blank lines and lines starting with ``#`` are ignored. The first remaining
    line is the header. Rows are returned even when incomplete; callers decide
    whether to skip them.
    """
    numbered = [
        (number, line)
        for number, line in enumerate(text.splitlines(), start=1)
        if line.strip() and not line.strip().startswith("#")
    ]
    if not numbered:
        return []

    reader = csv.reader(line for _, line in numbered)
    headers = [header.strip() for header in next(reader)]

    rows: list[ManifestRow] = []
    for (number, _), cells in zip(numbered[1:], reader):
        raw = {
            header: cells[index].strip() if index < len(cells) else ""
            for index, header in enumerate(headers)
        }
        rows.append(
            ManifestRow(
                relative_path=raw.get("relative_path", ""),
                source_lang=raw.get("src_lang", ""),
                target_langs=parse_target_languages(raw.get("target_langs")),
                line_number=number,
                raw=raw,
            )
        )
    return rows


def load_manifest(path: Path) -> list[ManifestRow] | None:
    """Read and parse a manifest file. Returns None when the file is absent."""
    if not path.exists():
        return None
    return parse_manifest(path.read_text(encoding="utf-8"))


def derive_target_path(relative_path: str, source_lang: str, target_lang: str) -> str:
    """
    Derive the translated document path for a source document.

    ``docs/a_original.md`` and ``docs/a_en.md`` both become ``docs/a_ja.md``
    for Japanese; any other stem simply gets ``_ja`` appended.
    """
    path = PurePosixPath(relative_path)
    stem = path.stem

    source_suffix = f"_{source_lang}"
    if stem.endswith(ORIGINAL_SUFFIX):
        stem = stem[: -len(ORIGINAL_SUFFIX)]
    elif stem.endswith(source_suffix):
        stem = stem[: -len(source_suffix)]

    return str(path.with_name(f"{stem}_{target_lang}{path.suffix}"))
