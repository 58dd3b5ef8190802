"""API router for item extraction."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from config import settings
from models import get_db
from models.schemas import (
    ExtractionRequest,
    ExtractionResponse,
    TokenUsageResponse,
    VotedMentionResponse,
    VotingStatsResponse,
)
from services.catalog_loader import filter_significant_items, load_catalog
from services.content_cleaner import clean_article_content
from services.item_oracle import ItemOracle, get_oracle
from services.item_recognition import ExtractionConfig, VotingFailedError, VotingResult, vote

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/vote", response_model=ExtractionResponse)
async def vote_on_article(
    request: ExtractionRequest,
    db: Session = Depends(get_db),
    oracle: ItemOracle = Depends(get_oracle),
) -> ExtractionResponse:
    """
    Extract the items an article mentions by voting over repeated runs.

    Args:
        request: Article title and content plus voting options
        db: Database session
        oracle: Text-generation oracle

    Returns:
        Voted mentions with voting statistics

    Raises:
        HTTPException: If every voting run failed
    """
    content = clean_article_content(request.content) if request.clean_content else request.content
    catalog = load_catalog(db)
    if request.significant_only:
        catalog = filter_significant_items(catalog, settings.margin_threshold)

    try:
        result = await vote(
            request.title,
            content,
            catalog,
            num_runs=request.num_runs,
            threshold=request.threshold,
            oracle=oracle,
            config=ExtractionConfig.from_settings(settings),
        )
    except VotingFailedError as e:
        logger.error(f"Voting failed for {request.title!r}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return _to_response(result)


def _to_response(result: VotingResult) -> ExtractionResponse:
    stats = result.voting_stats
    return ExtractionResponse(
        mentions=[
            VotedMentionResponse(
                item_id=m.item_id,
                name=m.canonical_name,
                snippet=m.snippet,
                context=m.context,
                confidence=m.confidence,
                source=m.source,
                appearances=m.appearances,
                total_runs=m.total_runs,
                appearance_ratio=m.appearance_ratio,
                avg_confidence=m.avg_confidence,
                source_consistency=m.source_consistency,
            )
            for m in result.mentions
        ],
        voting_stats=VotingStatsResponse(
            runs_requested=stats.runs_requested,
            runs_executed=stats.runs_executed,
            runs_failed=stats.runs_failed,
            voting_threshold=stats.voting_threshold,
            unique_items_seen=stats.unique_items_seen,
            items_after_voting=stats.items_after_voting,
            items_filtered=stats.items_filtered,
        ),
        usage=TokenUsageResponse(
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
            reasoning_tokens=result.usage.reasoning_tokens,
        ),
        latency=result.latency,
    )
