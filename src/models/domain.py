import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class MentionSource(str, enum.Enum):
    BOTH = "both"
    LLM_ONLY = "llm_only"
    ALGO_VALIDATED = "algo_validated"


class MatchType(str, enum.Enum):
    EXACT = "exact"
    GREEDY = "greedy"


class MatchedBy(str, enum.Enum):
    EXACT = "exact"
    NORMALIZED = "normalized"
    VARIANT = "variant"
    FUZZY = "fuzzy"


class MentionContext(str, enum.Enum):
    BUFF = "buff"
    NERF = "nerf"
    SUPPLY_CHANGE = "supply_change"
    NEW_CONTENT = "new_content"
    BUG_FIX = "bug_fix"
    MENTION_ONLY = "mention_only"


class MentionType(str, enum.Enum):
    DIRECT = "direct"
    IMPLIED = "implied"
    CATEGORY_EXPANSION = "category_expansion"


class Item(Base):
    __tablename__ = "items"
    __table_args__ = {'extend_existing': True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    buy_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    members: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    examine: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    prices: Mapped[List["ItemPrice"]] = relationship(
        "ItemPrice", back_populates="item", cascade="all, delete-orphan"
    )


class ItemPrice(Base):
    __tablename__ = "item_prices"
    __table_args__ = {'extend_existing': True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    high_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    low_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    snapshot_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item: Mapped["Item"] = relationship(Item, back_populates="prices")
