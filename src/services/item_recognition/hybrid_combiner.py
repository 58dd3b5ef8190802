"""
Hybrid item extraction.

An oracle extraction call and the lexical matcher look at the same article
independently. Their agreement decides the confidence band of each mention:

- both: found by the oracle and lexically
- llm_only: found by the oracle alone
- algo_validated: found lexically alone and confirmed by a second oracle call

Two cheaper modes reuse the same pieces: single-pass extraction hands the
economically significant lexical hits to one oracle call as hints, and inline
extraction writes those hints into the article text next to their trigger
words.
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union

from config import settings
from models.domain import MentionContext, MentionSource
from services.item_recognition.candidate_validator import validate_candidates
from services.item_recognition.catalog_index import CatalogIndex
from services.item_recognition.config import ExtractionConfig
from services.item_recognition.lexical_matcher import match_items
from services.item_recognition.models import (
    ExtractionResult,
    ItemCatalogEntry,
    LexicalMatch,
    ModelConfig,
    ScoredMention,
    TokenUsage,
    ValidatedCandidate,
)
from services.item_recognition.text_utils import extract_snippet, strip_possessive, word_boundary_pattern

if TYPE_CHECKING:
    from services.item_oracle import ItemOracle

logger = logging.getLogger(__name__)

Catalog = Union[CatalogIndex, Sequence[ItemCatalogEntry]]


def default_oracle() -> "ItemOracle":
    from services.item_oracle import get_oracle

    return get_oracle()


def _by_confidence(mentions: List[ScoredMention]) -> List[ScoredMention]:
    return sorted(mentions, key=lambda m: m.confidence, reverse=True)


def _score_llm_candidate(
    candidate: ValidatedCandidate,
    lexical: Dict[int, LexicalMatch],
    cfg: ExtractionConfig,
) -> ScoredMention:
    llm_confidence = (
        candidate.confidence if candidate.confidence is not None else cfg.default_llm_confidence
    )
    if candidate.item_id in lexical:
        source = MentionSource.BOTH
        confidence = max(llm_confidence, cfg.band_for(source))
    else:
        source = MentionSource.LLM_ONLY
        confidence = min(llm_confidence, cfg.band_for(source))
    return _mention(candidate, confidence, source)


def _score_fixed_band(
    candidate: ValidatedCandidate,
    lexical: Dict[int, LexicalMatch],
    cfg: ExtractionConfig,
) -> ScoredMention:
    source = MentionSource.BOTH if candidate.item_id in lexical else MentionSource.LLM_ONLY
    return _mention(candidate, cfg.band_for(source), source)


def _matched_phrase(entry: ItemCatalogEntry, lexical: Dict[int, LexicalMatch]) -> str:
    match = lexical.get(entry.id)
    if match is not None and match.matched_phrase:
        return match.matched_phrase
    return entry.name


def _mention(candidate: ValidatedCandidate, confidence: float, source: MentionSource) -> ScoredMention:
    return ScoredMention(
        item_id=candidate.item_id,
        canonical_name=candidate.canonical_name,
        snippet=candidate.snippet,
        context=candidate.context,
        confidence=confidence,
        source=source,
    )


async def combine(
    title: str,
    text: str,
    catalog: Catalog,
    model_config: Optional[ModelConfig] = None,
    oracle: Optional["ItemOracle"] = None,
    config: Optional[ExtractionConfig] = None,
) -> ExtractionResult:
    """One hybrid extraction run over an article."""
    cfg = config or ExtractionConfig.from_settings()
    model_config = model_config or ModelConfig()
    oracle = oracle or default_oracle()
    index = CatalogIndex.of(catalog)
    start_time = time.time()

    oracle_task = asyncio.ensure_future(oracle.extract_candidates(title, text, model_config))
    # Let the oracle request go out before the CPU-bound scan.
    await asyncio.sleep(0)
    try:
        lexical = match_items(text, index, config=cfg)
    except Exception:
        oracle_task.cancel()
        raise
    extraction = await oracle_task
    usage = extraction.usage

    validated = validate_candidates(extraction.candidates, index, cfg)
    llm_ids = {c.item_id for c in validated}

    confirmed: List[ScoredMention] = []
    llm_only: List[ScoredMention] = []
    for candidate in validated:
        mention = _score_llm_candidate(candidate, lexical, cfg)
        (confirmed if mention.source == MentionSource.BOTH else llm_only).append(mention)

    algo_only = [index.get(item_id) for item_id in lexical if item_id not in llm_ids]
    algo_validated: List[ScoredMention] = []
    if algo_only:
        algo_validated, confirm_usage = await validate_algo_candidates(
            title, text, algo_only, model_config, oracle, cfg, lexical=lexical
        )
        usage = usage + confirm_usage

    mentions = _by_confidence(confirmed + llm_only + algo_validated)
    stats = {
        "llm_candidates": len(extraction.candidates),
        "llm_validated": len(validated),
        "algo_matches": len(lexical),
        "confirmed": len(confirmed),
        "llm_only": len(llm_only),
        "algo_validated": len(algo_validated),
        "total": len(mentions),
    }
    latency = time.time() - start_time
    logger.debug(f"Hybrid extraction for {title!r}: {stats}")
    return ExtractionResult(mentions=mentions, stats=stats, usage=usage, latency=latency)


async def validate_algo_candidates(
    title: str,
    text: str,
    candidates: Sequence[ItemCatalogEntry],
    model_config: ModelConfig,
    oracle: "ItemOracle",
    config: Optional[ExtractionConfig] = None,
    lexical: Optional[Dict[int, LexicalMatch]] = None,
) -> Tuple[List[ScoredMention], TokenUsage]:
    """Ask the oracle which lexical-only hits are really item mentions.

    A failed confirmation call yields no mentions rather than failing the run.
    When the oracle gives no snippet, one is cut around the phrase the lexical
    scan matched, which for a greedy hit is a prefix of the name.
    """
    lexical = lexical or {}
    cfg = config or ExtractionConfig.from_settings()
    if not candidates:
        return [], TokenUsage()

    try:
        confirmation = await oracle.confirm_candidates(
            title, text, [c.name for c in candidates], model_config
        )
    except Exception as e:
        logger.error(f"Algo candidate validation failed for {title!r}: {e}")
        return [], TokenUsage()

    by_name = {c.name.lower(): c for c in candidates}
    mentions: List[ScoredMention] = []
    seen = set()
    for confirmed in confirmation.confirmed:
        entry = by_name.get(confirmed.name.lower())
        if entry is None or entry.id in seen:
            continue
        seen.add(entry.id)
        mentions.append(
            ScoredMention(
                item_id=entry.id,
                canonical_name=entry.name,
                snippet=confirmed.snippet or extract_snippet(text, _matched_phrase(entry, lexical)),
                context=MentionContext.MENTION_ONLY,
                confidence=cfg.band_for(MentionSource.ALGO_VALIDATED),
                source=MentionSource.ALGO_VALIDATED,
            )
        )

    logger.debug(
        f"Validated algo candidates for {title!r}: {len(candidates)} candidates, "
        f"{len(mentions)} confirmed"
    )
    return mentions, confirmation.usage


async def extract_single_pass(
    title: str,
    text: str,
    catalog: Catalog,
    model_config: Optional[ModelConfig] = None,
    margin_threshold: Optional[int] = None,
    oracle: Optional["ItemOracle"] = None,
    config: Optional[ExtractionConfig] = None,
) -> ExtractionResult:
    """Greedy lexical scan, then a single oracle call primed with significant hits."""
    cfg = config or ExtractionConfig.from_settings()
    threshold = settings.margin_threshold if margin_threshold is None else margin_threshold
    model_config = model_config or ModelConfig()
    oracle = oracle or default_oracle()
    index = CatalogIndex.of(catalog)
    start_time = time.time()

    lexical = match_items(text, index, greedy=True, config=cfg)
    hints = [
        entry.name
        for entry in (index.get(item_id) for item_id in lexical)
        if entry.margin >= threshold
    ]
    logger.debug(
        f"Single-pass scan for {title!r}: {len(lexical)} matches, {len(hints)} significant hints"
    )

    extraction = await oracle.extract_candidates(title, text, model_config, hints=hints)
    validated = validate_candidates(extraction.candidates, index, cfg)
    mentions = [_score_fixed_band(c, lexical, cfg) for c in validated]

    stats = {
        "algo_candidates": len(hints),
        "llm_extracted": len(extraction.candidates),
        "validated": len(mentions),
        "confirmed": sum(1 for m in mentions if m.source == MentionSource.BOTH),
    }
    latency = time.time() - start_time
    logger.debug(f"Single-pass extraction for {title!r}: {stats}")
    return ExtractionResult(mentions=mentions, stats=stats, usage=extraction.usage, latency=latency)


def annotate_inline_hints(
    text: str,
    lexical: Dict[int, LexicalMatch],
    index: CatalogIndex,
    max_hints_per_trigger: int = 5,
) -> Tuple[str, Dict[str, List[str]]]:
    """Write matched item names next to the first occurrence of their trigger word.

    The trigger is the first word of the item name with any possessive
    removed, so "Virtus mask" and "Virtus robe top" share the trigger
    "virtus" and the text becomes "Virtus «Virtus mask, Virtus robe top»".
    """
    triggers: Dict[str, List[str]] = {}
    for item_id in lexical:
        entry = index.get(item_id)
        if entry is None or not entry.name.split():
            continue
        trigger = strip_possessive(entry.name.split()[0].lower())
        triggers.setdefault(trigger, []).append(entry.name)

    # Positions come from the original text so no trigger lands inside another's hints.
    insertions: List[Tuple[int, str]] = []
    for trigger, names in triggers.items():
        match = word_boundary_pattern(trigger).search(text)
        if match is not None:
            insertions.append((match.end(), f" «{', '.join(names[:max_hints_per_trigger])}»"))

    parts: List[str] = []
    cursor = 0
    for position, hint in sorted(insertions):
        parts.append(text[cursor:position])
        parts.append(hint)
        cursor = position
    parts.append(text[cursor:])
    return "".join(parts), triggers


async def extract_inline(
    title: str,
    text: str,
    significant_items: Catalog,
    model_config: Optional[ModelConfig] = None,
    oracle: Optional["ItemOracle"] = None,
    config: Optional[ExtractionConfig] = None,
) -> ExtractionResult:
    """Single oracle call over text annotated with inline item hints.

    `significant_items` should already be filtered to economically relevant
    entries; oracle candidates are validated against that list only.
    """
    cfg = config or ExtractionConfig.from_settings()
    model_config = model_config or ModelConfig()
    oracle = oracle or default_oracle()
    index = CatalogIndex.of(significant_items)
    start_time = time.time()

    lexical = match_items(text, index, greedy=True, config=cfg)
    annotated, triggers = annotate_inline_hints(text, lexical, index, cfg.max_hints_per_trigger)

    try:
        extraction = await oracle.extract_annotated(title, annotated, model_config)
    except Exception as e:
        logger.error(f"Inline extraction failed for {title!r}: {e}")
        raise

    validated = validate_candidates(extraction.candidates, index, cfg)
    mentions = [_score_fixed_band(c, lexical, cfg) for c in validated]

    stats = {
        "triggers": len(triggers),
        "total_hints": sum(len(names) for names in triggers.values()),
        "llm_extracted": len(extraction.candidates),
        "validated": len(mentions),
    }
    latency = time.time() - start_time
    logger.debug(f"Inline extraction for {title!r}: {stats}")
    return ExtractionResult(mentions=mentions, stats=stats, usage=extraction.usage, latency=latency)


def filter_by_confidence(
    mentions: Sequence[ScoredMention], min_confidence: Optional[float] = None
) -> List[ScoredMention]:
    floor = settings.min_mention_confidence if min_confidence is None else min_confidence
    return [m for m in mentions if m.confidence >= floor]
