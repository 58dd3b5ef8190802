from typing import List, Optional

from pydantic import BaseModel, Field

from models.domain import MentionContext, MentionSource, MentionType


class ExtractedItem(BaseModel):
    name: str = Field(
        ...,
        description="The item name exactly as it appears in-game, including variant notation like (4) or (p++)",
    )
    snippet: str = Field(..., description="The exact sentence(s) where this item is mentioned, max 400 chars")
    context: MentionContext = Field(..., description="Why the item is mentioned")
    confidence: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="How confident you are this is a tradeable item (0.0-1.0)"
    )
    mention_type: MentionType = Field(
        MentionType.DIRECT,
        description="Direct mention, implied from context, or expanded from a category",
    )
    variant_category: Optional[str] = Field(
        None, description="The category name when this item is part of a category expansion"
    )


class ItemExtractionResponse(BaseModel):
    items: List[ExtractedItem] = Field(default_factory=list)


class AlgoValidationItem(BaseModel):
    name: str = Field(..., description="The item name exactly as provided")
    is_relevant: bool = Field(
        ..., description="Whether this item is actually mentioned as a tradeable item in context"
    )
    snippet: str = Field("", description="The text snippet where this item appears, or empty if not relevant")


class AlgoValidationResponse(BaseModel):
    valid_items: List[AlgoValidationItem] = Field(default_factory=list)


class ExtractionRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    num_runs: Optional[int] = Field(None, ge=1, le=10)
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    clean_content: bool = True
    significant_only: bool = False


class VotedMentionResponse(BaseModel):
    item_id: int
    name: str
    snippet: str
    context: MentionContext
    confidence: float
    source: MentionSource
    appearances: int
    total_runs: int
    appearance_ratio: float
    avg_confidence: float
    source_consistency: float


class VotingStatsResponse(BaseModel):
    runs_requested: int
    runs_executed: int
    runs_failed: int
    voting_threshold: float
    unique_items_seen: int
    items_after_voting: int
    items_filtered: int


class TokenUsageResponse(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    reasoning_tokens: int = 0


class ExtractionResponse(BaseModel):
    mentions: List[VotedMentionResponse]
    voting_stats: VotingStatsResponse
    usage: TokenUsageResponse
    latency: float
