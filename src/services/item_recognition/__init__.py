"""
Item recognition engine.

This module identifies which catalog items a news article mentions by
combining a deterministic lexical scan with a text-generation oracle, and
stabilizes the oracle's answers by voting over repeated runs.
"""

from services.item_recognition.models import (
    ExtractionResult,
    ItemCatalogEntry,
    LexicalMatch,
    ModelConfig,
    RawCandidate,
    ScoredMention,
    TokenUsage,
    ValidatedCandidate,
    VotedMention,
    VotingResult,
    VotingStats,
)
from services.item_recognition.errors import (
    OracleError,
    OracleResponseError,
    OracleTransportError,
    VotingFailedError,
)
from services.item_recognition.config import ExtractionConfig
from services.item_recognition.catalog_index import CatalogIndex
from services.item_recognition.lexical_matcher import match_items
from services.item_recognition.candidate_validator import validate_candidates
from services.item_recognition.hybrid_combiner import (
    combine,
    extract_inline,
    extract_single_pass,
    filter_by_confidence,
)
from services.item_recognition.voting import aggregate_votes, single_pass_vote, vote

__all__ = [
    "ExtractionResult",
    "ItemCatalogEntry",
    "LexicalMatch",
    "ModelConfig",
    "RawCandidate",
    "ScoredMention",
    "TokenUsage",
    "ValidatedCandidate",
    "VotedMention",
    "VotingResult",
    "VotingStats",
    "OracleError",
    "OracleResponseError",
    "OracleTransportError",
    "VotingFailedError",
    "ExtractionConfig",
    "CatalogIndex",
    "match_items",
    "validate_candidates",
    "combine",
    "extract_inline",
    "extract_single_pass",
    "filter_by_confidence",
    "aggregate_votes",
    "single_pass_vote",
    "vote",
]
