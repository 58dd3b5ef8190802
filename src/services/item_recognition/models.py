"""
Data models for item recognition.

This module contains the value types that flow through the extraction engine:
catalog entries, raw oracle candidates, lexical matches, validated candidates,
per-run scored mentions and the final voted mentions.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.domain import MatchedBy, MatchType, MentionContext, MentionSource, MentionType


@dataclass(frozen=True)
class ItemCatalogEntry:
    """A tradeable item as known to the catalog. `name` is the canonical name."""
    id: int
    name: str
    value: Optional[int] = None
    buy_limit: Optional[int] = None

    @property
    def margin(self) -> int:
        return (self.value or 0) * (self.buy_limit or 0)


@dataclass(frozen=True)
class RawCandidate:
    """A free-form item mention as returned by the oracle."""
    name: str
    snippet: str = ""
    context: MentionContext = MentionContext.MENTION_ONLY
    confidence: Optional[float] = None
    mention_type: MentionType = MentionType.DIRECT
    variant_category: Optional[str] = None


@dataclass(frozen=True)
class LexicalMatch:
    item_id: int
    match_type: MatchType
    matched_phrase: Optional[str] = None


@dataclass(frozen=True)
class ValidatedCandidate:
    """A raw candidate joined to the catalog entry it resolved to."""
    item_id: int
    canonical_name: str
    candidate_name: str
    snippet: str
    context: MentionContext
    matched_by: MatchedBy
    confidence: Optional[float] = None


@dataclass(frozen=True)
class ScoredMention:
    item_id: int
    canonical_name: str
    snippet: str
    context: MentionContext
    confidence: float
    source: MentionSource


@dataclass(frozen=True)
class VotedMention(ScoredMention):
    appearances: int
    total_runs: int
    appearance_ratio: float
    avg_confidence: float
    source_consistency: float


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    reasoning_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            reasoning_tokens=self.reasoning_tokens + other.reasoning_tokens,
        )

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class ModelConfig:
    """Per-call oracle settings; None falls back to the configured defaults."""
    model: Optional[str] = None
    reasoning_effort: Optional[str] = None


@dataclass(frozen=True)
class OracleExtraction:
    candidates: List[RawCandidate]
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class ConfirmedCandidate:
    name: str
    snippet: str = ""


@dataclass(frozen=True)
class OracleConfirmation:
    confirmed: List[ConfirmedCandidate]
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass
class ExtractionResult:
    """Output of one extraction pass (hybrid, single-pass or inline)."""
    mentions: List[ScoredMention]
    stats: Dict[str, int]
    usage: TokenUsage
    latency: float


@dataclass
class VotingStats:
    runs_requested: int
    runs_executed: int
    runs_failed: int
    voting_threshold: float
    unique_items_seen: int
    items_after_voting: int

    @property
    def items_filtered(self) -> int:
        return self.unique_items_seen - self.items_after_voting


@dataclass
class VotingResult:
    mentions: List[VotedMention]
    voting_stats: VotingStats
    usage: TokenUsage
    latency: float
