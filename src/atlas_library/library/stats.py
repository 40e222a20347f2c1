"""
Stats Aggregator

Combines the repository's counters with a per-category breakdown that is
computed on demand by scanning the items.
"""

from typing import Dict, List

from atlas_library.library.repository import ItemRepository
from atlas_library.library.taxonomy import TaxonomyStore
from atlas_library.models.library import LibraryDocument
from atlas_library.models.taxonomy import Category


def count_by_category(document: LibraryDocument, categories: List[Category]) -> Dict[str, int]:
    """Item count for every known category id; dangling references are ignored."""
    counts = {category.id: 0 for category in categories}
    for item in document.items:
        if item.category in counts:
            counts[item.category] += 1
    return counts


class StatsAggregator:
    """Read-only view over repository and taxonomy."""

    def __init__(self, repository: ItemRepository, taxonomy: TaxonomyStore):
        self.repository = repository
        self.taxonomy = taxonomy

    async def global_stats(self) -> dict:
        document = await self.repository.list()
        return self._counters(document)

    async def category_breakdown(self) -> Dict[str, int]:
        document = await self.repository.list()
        categories = await self.taxonomy.list_categories()
        return count_by_category(document, categories)

    async def summary(self) -> dict:
        """Counters, breakdown and last-updated stamp from one snapshot."""
        document = await self.repository.list()
        categories = await self.taxonomy.list_categories()

        stats = self._counters(document)
        stats["categoryStats"] = count_by_category(document, categories)
        return stats

    @staticmethod
    def _counters(document: LibraryDocument) -> dict:
        stats = document.stats.model_dump(by_alias=True)
        stats["lastUpdated"] = document.last_updated.isoformat()
        return stats
