"""Read the item catalog and price snapshots from the database."""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from config import settings
from models import Item, ItemPrice
from services.item_recognition.models import ItemCatalogEntry

logger = logging.getLogger(__name__)


def load_catalog(db: Session) -> List[ItemCatalogEntry]:
    items = db.query(Item).order_by(Item.id).all()
    catalog = [_to_entry(item) for item in items]
    logger.debug(f"Loaded {len(catalog)} catalog items")
    return catalog


def filter_significant_items(
    catalog: Iterable[ItemCatalogEntry],
    margin_threshold: Optional[int] = None,
) -> List[ItemCatalogEntry]:
    """Entries whose value times buy limit reaches the margin threshold."""
    threshold = settings.margin_threshold if margin_threshold is None else margin_threshold
    return [entry for entry in catalog if entry.margin >= threshold]


def load_volatile_items(
    db: Session,
    margin_threshold: Optional[int] = None,
    price_variance_percent: Optional[float] = None,
) -> List[ItemCatalogEntry]:
    """Items whose latest price snapshot is both profitable and volatile.

    The average of the latest high and low price times the buy limit must
    reach the margin threshold, and the high/low spread relative to that
    average must reach the variance threshold.
    """
    margin = settings.margin_threshold if margin_threshold is None else margin_threshold
    variance_floor = (
        settings.price_variance_percent if price_variance_percent is None else price_variance_percent
    )

    items = db.query(Item).options(selectinload(Item.prices)).order_by(Item.id).all()
    logger.info(f"Filtering {len(items)} items by margin and volatility")

    volatile: List[ItemCatalogEntry] = []
    for item in items:
        latest = _latest_price(item.prices)
        if latest is None or not item.buy_limit:
            continue
        if latest.high_price == 0 and latest.low_price == 0:
            continue

        avg_price = (latest.high_price + latest.low_price) / 2
        if avg_price * item.buy_limit < margin:
            continue

        spread = latest.high_price - latest.low_price
        variance = spread / avg_price if avg_price > 0 else 0
        if variance < variance_floor:
            continue

        volatile.append(_to_entry(item))

    logger.info(f"Found {len(volatile)} economically significant items")
    return volatile


def _latest_price(prices: List[ItemPrice]) -> Optional[ItemPrice]:
    if not prices:
        return None
    return max(prices, key=lambda p: p.snapshot_time)


def _to_entry(item: Item) -> ItemCatalogEntry:
    return ItemCatalogEntry(id=item.id, name=item.name, value=item.value, buy_limit=item.buy_limit)
