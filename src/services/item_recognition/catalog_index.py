"""
Read-only lookup tables over the item catalog.

An index is built once per catalog snapshot and then shared, without copying,
by every concurrent extraction run. All maps are first-write-wins: when two
catalog entries collapse to the same key, the entry listed first keeps it.
"""

import logging
from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

from services.item_recognition.models import ItemCatalogEntry
from services.item_recognition.text_utils import name_variants, normalize_name

logger = logging.getLogger(__name__)


class CatalogIndex:
    def __init__(self, entries: Iterable[ItemCatalogEntry]):
        self._entries: Tuple[ItemCatalogEntry, ...] = tuple(e for e in entries if e.name)
        self._by_id: Dict[int, ItemCatalogEntry] = {}
        self._exact: Dict[str, ItemCatalogEntry] = {}
        self._normalized: Dict[str, ItemCatalogEntry] = {}
        self._variants: Dict[str, ItemCatalogEntry] = {}

        for entry in self._entries:
            self._by_id.setdefault(entry.id, entry)
            self._exact.setdefault(entry.name.lower(), entry)
            self._normalized.setdefault(normalize_name(entry.name), entry)
            for variant in name_variants(entry.name):
                self._variants.setdefault(variant, entry)

        logger.debug(
            f"Built catalog index: {len(self._entries)} entries, "
            f"{len(self._variants)} variant keys"
        )

    @classmethod
    def of(cls, catalog: Union["CatalogIndex", Sequence[ItemCatalogEntry]]) -> "CatalogIndex":
        if isinstance(catalog, CatalogIndex):
            return catalog
        return cls(catalog)

    def __iter__(self) -> Iterator[ItemCatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[ItemCatalogEntry, ...]:
        return self._entries

    def get(self, item_id: int) -> Optional[ItemCatalogEntry]:
        return self._by_id.get(item_id)

    def lookup_exact(self, name: str) -> Optional[ItemCatalogEntry]:
        return self._exact.get(name.lower())

    def lookup_normalized(self, name: str) -> Optional[ItemCatalogEntry]:
        return self._normalized.get(normalize_name(name))

    def lookup_variant(self, name: str) -> Optional[ItemCatalogEntry]:
        for variant in name_variants(name):
            entry = self._variants.get(variant)
            if entry is not None:
                return entry
        return None
