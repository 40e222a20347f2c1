"""Library core: repository, query engine, ingestion, taxonomy and stats."""

from atlas_library.library.ingestion import FileIngestor, classify
from atlas_library.library.query import quick_search, run_query
from atlas_library.library.repository import ItemRepository
from atlas_library.library.stats import StatsAggregator
from atlas_library.library.taxonomy import TaxonomyStore

__all__ = [
    "FileIngestor",
    "ItemRepository",
    "StatsAggregator",
    "TaxonomyStore",
    "classify",
    "quick_search",
    "run_query",
]
