"""
Voting consensus over repeated hybrid extraction runs.

The same article is extracted several times in parallel; natural model
variance is what the vote measures. An item survives only if it appears in at
least `threshold` of the requested runs. A failed run counts as a run in
which nothing appeared.
"""

import logging
import math
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from config import settings
from services.item_recognition.catalog_index import CatalogIndex
from services.item_recognition.config import ExtractionConfig
from services.item_recognition.errors import VotingFailedError
from services.item_recognition.hybrid_combiner import Catalog, combine, default_oracle
from services.item_recognition.models import (
    ModelConfig,
    ScoredMention,
    TokenUsage,
    VotedMention,
    VotingResult,
    VotingStats,
)
from workers.llm_parallel import run_parallel

if TYPE_CHECKING:
    from services.item_oracle import ItemOracle

logger = logging.getLogger(__name__)


@dataclass
class _Tally:
    mentions: List[ScoredMention] = field(default_factory=list)

    @property
    def appearances(self) -> int:
        return len(self.mentions)

    @property
    def sources(self) -> set:
        return {m.source for m in self.mentions}

    def best(self) -> ScoredMention:
        best = self.mentions[0]
        for mention in self.mentions[1:]:
            if mention.confidence > best.confidence:
                best = mention
        return best


def meets_threshold(ratio: float, threshold: float) -> bool:
    """Inclusive comparison that tolerates float error (3/5 meets 0.6)."""
    return ratio >= threshold or math.isclose(ratio, threshold, rel_tol=1e-9, abs_tol=1e-12)


def voting_confidence(appearance_ratio: float, avg_confidence: float, source_consistency: float) -> float:
    # Tunable blend; the max keeps rare high-confidence items from being dragged down.
    blended = 0.5 * appearance_ratio + 0.3 * avg_confidence + 0.2 * source_consistency
    return max(avg_confidence, blended)


def aggregate_votes(
    run_mentions: Sequence[Sequence[ScoredMention]],
    num_runs: int,
    threshold: float,
) -> Tuple[List[VotedMention], int]:
    """Merge per-run mentions by item id and keep those meeting the threshold.

    `num_runs` is the number of runs requested, so missing or failed runs
    lower every item's appearance ratio. Returns the voted mentions sorted by
    confidence and the number of distinct items seen in any run.
    """
    if num_runs < 1:
        raise ValueError("num_runs must be at least 1")

    tallies: Dict[int, _Tally] = {}
    for mentions in run_mentions:
        for mention in mentions:
            tallies.setdefault(mention.item_id, _Tally()).mentions.append(mention)

    voted: List[VotedMention] = []
    for item_id, tally in tallies.items():
        ratio = tally.appearances / num_runs
        if not meets_threshold(ratio, threshold):
            continue

        avg_confidence = sum(m.confidence for m in tally.mentions) / tally.appearances
        source_consistency = 1.0 / len(tally.sources)
        best = tally.best()
        voted.append(
            VotedMention(
                item_id=item_id,
                canonical_name=best.canonical_name,
                snippet=best.snippet,
                context=best.context,
                confidence=voting_confidence(ratio, avg_confidence, source_consistency),
                source=best.source,
                appearances=tally.appearances,
                total_runs=num_runs,
                appearance_ratio=ratio,
                avg_confidence=avg_confidence,
                source_consistency=source_consistency,
            )
        )

    voted.sort(key=lambda m: m.confidence, reverse=True)
    return voted, len(tallies)


async def vote(
    title: str,
    text: str,
    catalog: Catalog,
    model_config: Optional[ModelConfig] = None,
    num_runs: Optional[int] = None,
    threshold: Optional[float] = None,
    oracle: Optional["ItemOracle"] = None,
    config: Optional[ExtractionConfig] = None,
    concurrency: Optional[int] = None,
) -> VotingResult:
    """Run `num_runs` hybrid extractions in parallel and keep the consensus.

    Raises VotingFailedError only when every run fails. Cancellation
    propagates and discards any partial tally.
    """
    runs = settings.voting_runs if num_runs is None else num_runs
    voting_threshold = settings.voting_threshold if threshold is None else threshold
    if runs < 1:
        raise ValueError("num_runs must be at least 1")

    cfg = config or ExtractionConfig.from_settings()
    model_config = model_config or ModelConfig()
    oracle = oracle or default_oracle()
    index = CatalogIndex.of(catalog)
    limit = settings.voting_max_concurrency if concurrency is None else concurrency

    logger.debug(f"Starting voting extraction for {title!r}: {runs} runs, threshold {voting_threshold}")

    run_once = partial(combine, title, text, index, model_config, oracle, cfg)
    outcomes = await run_parallel([run_once] * runs, concurrency=limit)

    results = [o.value for o in outcomes if o.ok]
    errors = [o.error for o in outcomes if not o.ok]
    for outcome in outcomes:
        if not outcome.ok:
            logger.warning(f"Voting run {outcome.index + 1}/{runs} failed for {title!r}: {outcome.error}")

    if not results:
        raise VotingFailedError(errors)

    mentions, unique_seen = aggregate_votes([r.mentions for r in results], runs, voting_threshold)

    usage = TokenUsage()
    for result in results:
        usage = usage + result.usage

    stats = VotingStats(
        runs_requested=runs,
        runs_executed=len(results),
        runs_failed=len(errors),
        voting_threshold=voting_threshold,
        unique_items_seen=unique_seen,
        items_after_voting=len(mentions),
    )
    logger.debug(
        f"Voting extraction complete for {title!r}: {stats.runs_executed}/{runs} runs, "
        f"{stats.unique_items_seen} seen, {stats.items_after_voting} kept"
    )
    return VotingResult(
        mentions=mentions,
        voting_stats=stats,
        usage=usage,
        latency=sum(r.latency for r in results),
    )


async def single_pass_vote(
    title: str,
    text: str,
    catalog: Catalog,
    model_config: Optional[ModelConfig] = None,
    oracle: Optional["ItemOracle"] = None,
    config: Optional[ExtractionConfig] = None,
) -> VotingResult:
    """One run, no threshold: every mention of the run is kept."""
    return await vote(
        title, text, catalog, model_config, num_runs=1, threshold=0.0, oracle=oracle, config=config
    )

