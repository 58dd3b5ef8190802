"""
Deterministic lexical scan of article text against the item catalog.

The matcher is a pure function: no I/O, no shared state, identical output for
identical input. Each catalog entry is visited once, so the result map holds
at most one LexicalMatch per item id.
"""

import logging
from typing import Dict, Iterable, List, Optional

from models.domain import MatchType
from services.item_recognition.config import ExtractionConfig
from services.item_recognition.models import ItemCatalogEntry, LexicalMatch
from services.item_recognition.text_utils import (
    collapse_whitespace,
    contains_phrase,
    significant_words,
    strip_parenthetical,
    strip_possessive,
)

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ExtractionConfig()


def match_items(
    text: str,
    catalog: Iterable[ItemCatalogEntry],
    greedy: Optional[bool] = None,
    config: Optional[ExtractionConfig] = None,
) -> Dict[int, LexicalMatch]:
    """Scan `text` for catalog item names.

    Exact matches require the whole normalized name to appear on word
    boundaries. With `greedy`, an item that did not match exactly may still
    match through its longest in-text word prefix (N-1 words down to 1).
    """
    cfg = config or _DEFAULT_CONFIG
    use_greedy = cfg.greedy if greedy is None else greedy
    found: Dict[int, LexicalMatch] = {}
    if not text:
        return found

    text_lower = collapse_whitespace(text.lower())

    for entry in catalog:
        name = collapse_whitespace(entry.name.lower()) if entry.name else ""
        if not _is_searchable(name, cfg):
            continue
        if use_greedy and _is_blocked_single_word(name, cfg):
            continue

        if contains_phrase(text, text_lower, name):
            found[entry.id] = LexicalMatch(item_id=entry.id, match_type=MatchType.EXACT)
            continue

        if use_greedy:
            phrase = _longest_matching_prefix(text, text_lower, name, cfg)
            if phrase:
                found[entry.id] = LexicalMatch(
                    item_id=entry.id, match_type=MatchType.GREEDY, matched_phrase=phrase
                )

    logger.debug(f"Lexical scan matched {len(found)} items (greedy={use_greedy})")
    return found


def _is_searchable(name: str, cfg: ExtractionConfig) -> bool:
    if len(name) < cfg.min_name_length:
        return False
    if name in cfg.name_blocklist or strip_parenthetical(name) in cfg.name_blocklist:
        return False
    return bool(significant_words(name, cfg.stop_words))


def _is_blocked_single_word(name: str, cfg: ExtractionConfig) -> bool:
    """One-word names on the single-word blocklist are too ambiguous for a greedy scan."""
    for form in (name, strip_parenthetical(name)):
        words = form.split()
        if len(words) == 1 and strip_possessive(words[0]) in cfg.single_word_prefix_blocklist:
            return True
    return False


def _longest_matching_prefix(
    text: str,
    text_lower: str,
    name: str,
    cfg: ExtractionConfig,
) -> Optional[str]:
    for prefix in candidate_prefixes(name, cfg):
        if contains_phrase(text, text_lower, prefix):
            return prefix
    return None


def candidate_prefixes(name: str, cfg: ExtractionConfig) -> List[str]:
    """Allowed greedy prefixes of an item name, longest first.

    The full name is never included; it is the exact-match case. A detached
    variant marker counts as a word, so "dragon platebody (g)" can still
    match through "dragon platebody".
    """
    words = name.lower().split()
    prefixes: List[str] = []
    for count in range(len(words) - 1, 0, -1):
        head = words[:count]
        if head[-1] in cfg.stop_words:
            continue
        if count == 1:
            prefix = strip_possessive(head[0])
            blocklist = cfg.single_word_prefix_blocklist
        else:
            prefix = " ".join(head)
            blocklist = cfg.multi_word_prefix_blocklist
        if len(prefix) < cfg.min_prefix_length:
            continue
        if prefix in blocklist or prefix in cfg.name_blocklist:
            continue
        prefixes.append(prefix)
    return prefixes
