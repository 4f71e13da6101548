"""Search pattern generation for natural-language queries.

Everything here is a pure function of its input. Patterns are plain strings;
they only become safe to hand to the record store after ``escape_pattern``.
"""

from __future__ import annotations

import re
from typing import Iterable

# Characters with special meaning in the store's regular-expression matching
_SPECIAL_CHARS = re.compile(r"[.*+?^${}()|\[\]\\]")
_WHITESPACE = re.compile(r"\s+")

# Single words must be longer than this to become patterns on their own
MIN_WORD_LENGTH = 2
# Joined phrases must be longer than this to become patterns
MIN_PHRASE_LENGTH = 3
# Phrases are only enumerated over this many leading words; later words
# still contribute single-word patterns
MAX_PHRASE_WORDS = 10


def escape_pattern(term: str) -> str:
    """Escape a term so the store matches it as a literal substring.

    Args:
        term: A user- or oracle-supplied search term.

    Returns:
        The term with every matching-syntax control character backslash-escaped.
    """
    return _SPECIAL_CHARS.sub(lambda m: "\\" + m.group(0), term)


def escape_all(patterns: Iterable[str]) -> set[str]:
    """Escape every pattern in a collection."""
    return {escape_pattern(p) for p in patterns}


def strip_whitespace(text: str) -> str:
    """Remove all whitespace from text."""
    return _WHITESPACE.sub("", text)


def has_whitespace(text: str) -> bool:
    return _WHITESPACE.search(text) is not None


def generate_all_patterns(query: str) -> set[str]:
    """Generate every candidate search term for a raw query.

    Produces the original query, its lowercase form, whitespace-stripped
    variants (when the query has spaces), every lowercased word longer than
    two characters, and every contiguous word phrase longer than three
    characters together with its whitespace-stripped form.

    Phrase enumeration is quadratic in the word count, so it only covers the
    first MAX_PHRASE_WORDS words; the set stays bounded for any query length.

    Args:
        query: The raw query. Callers reject empty queries beforehand.

    Returns:
        Deduplicated set of unescaped patterns.
    """
    lowered = query.lower()
    patterns = {query, lowered}

    if has_whitespace(query):
        patterns.add(strip_whitespace(query))
        patterns.add(strip_whitespace(lowered))

    words = lowered.split()

    for word in words:
        if len(word) > MIN_WORD_LENGTH:
            patterns.add(word)

    phrase_words = words[:MAX_PHRASE_WORDS]
    for i in range(len(phrase_words)):
        for j in range(i + 1, len(phrase_words) + 1):
            phrase = " ".join(phrase_words[i:j])
            if len(phrase) > MIN_PHRASE_LENGTH:
                patterns.add(phrase)
                patterns.add(strip_whitespace(phrase))

    patterns.discard("")
    return patterns


def expand_keyword(keyword: str) -> set[str]:
    """Expand one oracle keyword into its partial-match variants.

    "keepson structure" -> {"keepson structure", "keepsonstructure",
    "keepson", "structure"}.
    """
    keyword = keyword.strip()
    if not keyword:
        return set()

    expanded = {keyword}
    if has_whitespace(keyword):
        expanded.add(strip_whitespace(keyword))
        expanded.update(keyword.split())
    return expanded
