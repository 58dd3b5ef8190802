"""
Name normalization and phrase matching utilities.

Item names arrive in many spellings ("Anti-venom(4)", "anti venom",
"Inquisitor's mace"). These helpers produce the canonical forms used by the
catalog indices and the word-boundary patterns used by the lexical matcher.
"""

import re
from functools import lru_cache
from typing import FrozenSet, List

from constants import TRAILING_PARENTHETICAL_PATTERN, WORD_PATTERN


def collapse_whitespace(value: str) -> str:
    return " ".join(value.split())


def strip_parenthetical(name: str) -> str:
    """Remove a trailing variant marker such as "(4)" or "(p++)"."""
    return TRAILING_PARENTHETICAL_PATTERN.sub("", name).strip()


def normalize_name(name: str) -> str:
    """Lowercase, drop the trailing parenthetical, fold hyphens into spaces."""
    if not name:
        return ""
    lowered = strip_parenthetical(name.lower())
    return collapse_whitespace(lowered.replace("-", " "))


def name_variants(name: str) -> List[str]:
    """Spelling variants of a name, deduplicated, in a stable order."""
    base = name.lower().strip()
    variants = [base]

    if "-" in base:
        variants.append(base.replace("-", " "))
        variants.append(base.replace("-", ""))
    if " " in base:
        variants.append(base.replace(" ", "-"))
        variants.append(base.replace(" ", ""))
    if "'" in base:
        variants.append(base.replace("'", ""))

    no_parens = strip_parenthetical(base)
    if no_parens != base:
        variants.append(no_parens)

    return list(dict.fromkeys(v for v in variants if v))


def significant_words(name: str, stop_words: FrozenSet[str]) -> List[str]:
    words = WORD_PATTERN.findall(strip_parenthetical(name.lower()))
    return [w for w in words if w not in stop_words]


def strip_possessive(word: str) -> str:
    return word[:-2] if word.endswith("'s") else word


@lru_cache(maxsize=8192)
def word_boundary_pattern(phrase: str) -> re.Pattern:
    """Case-insensitive pattern matching `phrase` only as a whole word sequence.

    Alphanumerics may not touch either end, so "gold" does not fire inside
    "marigold" and "anti-venom(4)" still matches before a full stop.
    """
    body = r"\s+".join(re.escape(part) for part in phrase.split())
    return re.compile(rf"(?<![a-z0-9]){body}(?![a-z0-9])", re.IGNORECASE)


def contains_phrase(text: str, text_lower: str, phrase: str) -> bool:
    """Substring fast path, confirmed by the word-boundary pattern."""
    if not phrase:
        return False
    if collapse_whitespace(phrase) not in text_lower:
        return False
    return word_boundary_pattern(phrase).search(text) is not None


def extract_snippet(text: str, phrase: str, context_chars: int = 120) -> str:
    """A window of text around the first whole-word occurrence of `phrase`."""
    match = word_boundary_pattern(phrase).search(text) if phrase else None
    if match is None:
        return ""
    start = max(0, match.start() - context_chars)
    end = min(len(text), match.end() + context_chars)
    snippet = collapse_whitespace(text[start:end])
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet
