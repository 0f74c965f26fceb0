"""Cosmetic Markdown cleanup for generated prose.

Models often decorate plain prose with headings, emphasis and code fences.
``clean_generated_text`` strips that decoration from a *final* text. It is
never applied to individual stream fragments: a marker split across two
fragments would be mangled.
"""

from __future__ import annotations

import re

_FENCE_LINE = re.compile(r"^\s*(```|~~~)[^\n]*$", re.MULTILINE)
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+", re.MULTILINE)
_BLOCKQUOTE = re.compile(r"^\s{0,3}>\s?", re.MULTILINE)
_STRONG = re.compile(r"\*\*|__(?=\S)|(?<=\S)__")
_EM_STAR = re.compile(r"(?<![*\w])\*(?=\S)([^*\n]+?)(?<=\S)\*(?![*\w])")
_EM_UNDERSCORE = re.compile(r"(?<![_\w])_(?=\S)([^_\n]+?)(?<=\S)_(?![_\w])")
_INLINE_CODE = re.compile(r"`([^`\n]*)`")
_BLANK_RUNS = re.compile(r"\n\s*\n\s*\n+")


def clean_generated_text(text: str) -> str:
    """Return ``text`` without cosmetic Markdown.

    Removes code fence lines, heading and blockquote markers, bold/italic
    markers around words and inline code backticks; trims every line and
    collapses runs of blank lines into one. Identifiers such as
    ``snake_case`` and list bullets (``* item``) are left alone.
    """
    if not text:
        return text
    text = text.replace("\r\n", "\n")
    text = _FENCE_LINE.sub("", text)
    text = _HEADING.sub("", text)
    text = _BLOCKQUOTE.sub("", text)
    text = _STRONG.sub("", text)
    text = _EM_STAR.sub(r"\1", text)
    text = _EM_UNDERSCORE.sub(r"\1", text)
    text = _INLINE_CODE.sub(r"\1", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


__all__ = ["clean_generated_text"]
