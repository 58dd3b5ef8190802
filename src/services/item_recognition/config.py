"""
Configuration for item recognition.

The engine never reads module-level blocklists directly: every constant it
needs is carried by an immutable ExtractionConfig handed in by the caller, so
tests can swap in small deterministic lists.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet

from config import Settings, settings as default_settings
from constants import (
    ITEM_NAME_BLOCKLIST,
    MULTI_WORD_PREFIX_BLOCKLIST,
    SINGLE_WORD_PREFIX_BLOCKLIST,
    STOP_WORDS,
)
from models.domain import MentionSource


@dataclass(frozen=True)
class ExtractionConfig:
    name_blocklist: FrozenSet[str] = ITEM_NAME_BLOCKLIST
    single_word_prefix_blocklist: FrozenSet[str] = SINGLE_WORD_PREFIX_BLOCKLIST
    multi_word_prefix_blocklist: FrozenSet[str] = MULTI_WORD_PREFIX_BLOCKLIST
    stop_words: FrozenSet[str] = STOP_WORDS

    greedy: bool = False
    min_name_length: int = 4
    min_prefix_length: int = 4
    fuzzy_max_distance: int = 2

    confidence_confirmed: float = 1.0
    confidence_llm_only: float = 0.8
    confidence_algo_validated: float = 0.7
    default_llm_confidence: float = 0.9

    max_hints_per_trigger: int = 5

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "ExtractionConfig":
        return cls(
            greedy=settings.greedy_matching,
            min_name_length=settings.min_algo_search_length,
            min_prefix_length=settings.greedy_min_prefix_length,
            fuzzy_max_distance=settings.fuzzy_max_distance,
            confidence_confirmed=settings.confidence_confirmed,
            confidence_llm_only=settings.confidence_llm_only,
            confidence_algo_validated=settings.confidence_algo_validated,
            default_llm_confidence=settings.default_llm_confidence,
        )

    def with_greedy(self, greedy: bool = True) -> "ExtractionConfig":
        return replace(self, greedy=greedy)

    def band_for(self, source: MentionSource) -> float:
        """Confidence band constant for a mention source."""
        bands = {
            MentionSource.BOTH: self.confidence_confirmed,
            MentionSource.LLM_ONLY: self.confidence_llm_only,
            MentionSource.ALGO_VALIDATED: self.confidence_algo_validated,
        }
        return bands[source]
