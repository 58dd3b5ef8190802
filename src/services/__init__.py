from .catalog_loader import filter_significant_items, load_catalog, load_volatile_items
from .content_cleaner import clean_article_content, cleaning_stats
from .item_oracle import ItemOracle, OpenAIItemOracle, get_oracle

__all__ = [
    "clean_article_content",
    "cleaning_stats",
    "filter_significant_items",
    "get_oracle",
    "ItemOracle",
    "load_catalog",
    "load_volatile_items",
    "OpenAIItemOracle",
]
