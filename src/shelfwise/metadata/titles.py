# ABOUTME: Turns mangled embedded titles ("TheTemplarLegacy") into usable search queries.
# ABOUTME: Only feeds enrichment lookups; stored records keep the title the user curated.

import re

import wordninja

# Spaceless strings shorter than this ("Dune", "1984") are left alone.
_MIN_CONCAT_LENGTH = 8

_CAMEL_CASE_RE = re.compile(r"[a-z][A-Z]")
_CAMEL_LOWER_UPPER_RE = re.compile(r"([a-z\d])([A-Z])")
_CAMEL_UPPER_SEQUENCE_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_LETTER_DIGIT_RE = re.compile(r"([a-zA-Z])(\d)")
_SEPARATOR_RE = re.compile(r"[-_]")


def needs_splitting(text: str) -> bool:
    """CamelCase, underscore-joined, or long spaceless (all-lowercase) runs."""
    text = text.strip()
    if not text:
        return False
    if "_" in text or _CAMEL_CASE_RE.search(text):
        return True
    return any(
        " " not in seg and seg.islower() and len(seg) >= _MIN_CONCAT_LENGTH
        for seg in text.split("-")
    )


def _split_camel_case(segment: str) -> list[str]:
    marked = _CAMEL_LOWER_UPPER_RE.sub(r"\1 \2", segment)
    marked = _CAMEL_UPPER_SEQUENCE_RE.sub(r"\1 \2", marked)
    marked = _LETTER_DIGIT_RE.sub(r"\1 \2", marked)
    return marked.split() or [segment]


def split_concatenated(text: str) -> str:
    """Split a concatenated title into space-separated words.

    Hyphens and underscores separate segments, CamelCase boundaries split
    each segment, and long all-lowercase parts go through wordninja.
    """
    if not needs_splitting(text):
        return text

    words: list[str] = []
    for segment in _SEPARATOR_RE.split(text):
        for part in _split_camel_case(segment.strip()):
            if part.islower() and len(part) >= _MIN_CONCAT_LENGTH:
                words.extend(wordninja.split(part) or [part])
            elif part:
                words.append(part)
    return " ".join(words)


def search_title(title: str) -> str:
    """Title to send to an enrichment search."""
    return split_concatenated(title.strip())
