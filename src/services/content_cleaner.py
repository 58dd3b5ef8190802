"""Strip predictable news-post boilerplate before extraction."""

import logging

from constants import CLEANING_PATTERNS, EXCESSIVE_NEWLINES_PATTERN

logger = logging.getLogger(__name__)


def clean_article_content(raw_content: str) -> str:
    if not raw_content:
        return ""

    cleaned = raw_content
    for pattern in CLEANING_PATTERNS:
        cleaned = pattern.sub("", cleaned)

    cleaned = EXCESSIVE_NEWLINES_PATTERN.sub("\n\n", cleaned)
    return cleaned.strip()


def cleaning_stats(original: str, cleaned: str) -> dict:
    original_length = len(original)
    cleaned_length = len(cleaned)
    reduction = original_length - cleaned_length
    reduction_percent = (reduction / original_length * 100) if original_length else 0.0
    return {
        "original_length": original_length,
        "cleaned_length": cleaned_length,
        "reduction": reduction,
        "reduction_percent": f"{reduction_percent:.1f}%",
    }
