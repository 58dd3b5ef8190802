from constants.blocklists import (
    GENERIC_WORDS,
    GREEDY_PREFIX_BLOCKLIST,
    ITEM_NAME_BLOCKLIST,
    MULTI_WORD_PREFIX_BLOCKLIST,
    SINGLE_WORD_PREFIX_BLOCKLIST,
    STOP_WORDS,
)
from constants.text_patterns import (
    CLEANING_PATTERNS,
    EXCESSIVE_NEWLINES_PATTERN,
    TRAILING_PARENTHETICAL_PATTERN,
    WORD_PATTERN,
)

__all__ = [
    "GENERIC_WORDS",
    "GREEDY_PREFIX_BLOCKLIST",
    "ITEM_NAME_BLOCKLIST",
    "MULTI_WORD_PREFIX_BLOCKLIST",
    "SINGLE_WORD_PREFIX_BLOCKLIST",
    "STOP_WORDS",
    "CLEANING_PATTERNS",
    "EXCESSIVE_NEWLINES_PATTERN",
    "TRAILING_PARENTHETICAL_PATTERN",
    "WORD_PATTERN",
]
