"""
Reconciliation of free-form oracle candidates with the item catalog.

Each candidate goes through a cascade of increasingly lenient lookups and
stops at the first hit. Candidates that resolve to nothing are dropped without
error: hallucinated names are expected oracle output.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from rapidfuzz.distance import Levenshtein

from models.domain import MatchedBy
from services.item_recognition.catalog_index import CatalogIndex
from services.item_recognition.config import ExtractionConfig
from services.item_recognition.models import ItemCatalogEntry, RawCandidate, ValidatedCandidate

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ExtractionConfig()


def validate_candidates(
    candidates: Iterable[RawCandidate],
    catalog: Union[CatalogIndex, Sequence[ItemCatalogEntry]],
    config: Optional[ExtractionConfig] = None,
) -> List[ValidatedCandidate]:
    """Resolve candidates to catalog ids; first accepted candidate per id wins."""
    cfg = config or _DEFAULT_CONFIG
    index = CatalogIndex.of(catalog)
    validated: List[ValidatedCandidate] = []
    seen_ids: Set[int] = set()

    for candidate in candidates:
        resolved = resolve_name(candidate.name, index, cfg.fuzzy_max_distance)
        if resolved is None:
            logger.debug(f"Item candidate not found in catalog: {candidate.name!r}")
            continue

        entry, matched_by = resolved
        if entry.id in seen_ids:
            continue
        seen_ids.add(entry.id)
        validated.append(
            ValidatedCandidate(
                item_id=entry.id,
                canonical_name=entry.name,
                candidate_name=candidate.name,
                snippet=candidate.snippet,
                context=candidate.context,
                matched_by=matched_by,
                confidence=candidate.confidence,
            )
        )
        logger.debug(
            f"Validated item candidate {candidate.name!r} -> {entry.name!r} "
            f"(id={entry.id}, via {matched_by.value})"
        )

    return validated


def resolve_name(
    name: str,
    index: CatalogIndex,
    max_distance: int = 2,
) -> Optional[Tuple[ItemCatalogEntry, MatchedBy]]:
    if not name or not name.strip():
        return None

    entry = index.lookup_exact(name.strip())
    if entry is not None:
        return entry, MatchedBy.EXACT

    entry = index.lookup_normalized(name)
    if entry is not None:
        return entry, MatchedBy.NORMALIZED

    entry = index.lookup_variant(name)
    if entry is not None:
        return entry, MatchedBy.VARIANT

    entry = find_closest_match(name, index.entries, max_distance)
    if entry is not None:
        return entry, MatchedBy.FUZZY

    return None


def find_closest_match(
    name: str,
    entries: Iterable[ItemCatalogEntry],
    max_distance: int = 2,
) -> Optional[ItemCatalogEntry]:
    """Closest catalog entry by Levenshtein distance, or None beyond `max_distance`.

    Ties keep the entry listed first.
    """
    target = name.lower().strip()
    best: Optional[ItemCatalogEntry] = None
    best_distance = max_distance + 1

    for entry in entries:
        distance = Levenshtein.distance(target, entry.name.lower(), score_cutoff=max_distance)
        if distance < best_distance:
            best, best_distance = entry, distance
            if distance == 0:
                break

    return best
