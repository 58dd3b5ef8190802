from models.database import Base, SessionLocal, get_db, init_db
from models.domain import (
    Item,
    ItemPrice,
    MatchedBy,
    MatchType,
    MentionContext,
    MentionSource,
    MentionType,
)

__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "init_db",
    "Item",
    "ItemPrice",
    "MatchedBy",
    "MatchType",
    "MentionContext",
    "MentionSource",
    "MentionType",
]
