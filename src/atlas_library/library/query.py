"""
Query Engine

Stateless filter, sort and paginate pass over a snapshot of items.
Nothing here touches storage.
"""

from typing import List, Optional, Sequence

from atlas_library.models.item import Item
from atlas_library.models.library import LibraryStats, QueryParams, QueryResult, SearchResult


def filter_items(items: Sequence[Item], params: QueryParams) -> List[Item]:
    """
    Keep items matching every supplied predicate.

    `search` is a case-insensitive substring match against title,
    description, any tag or content; category and type must be equal;
    tag must be one of the item's tags.
    """
    result = list(items)
    if params.search:
        result = [item for item in result if item.matches_text(params.search)]
    if params.category:
        result = [item for item in result if item.category == params.category]
    if params.tag:
        result = [item for item in result if params.tag in item.tags]
    if params.type:
        result = [item for item in result if item.type == params.type]
    return result


def sort_items(items: Sequence[Item], sort: Optional[str] = None) -> List[Item]:
    """
    Order items.

    'oldest' sorts by creation ascending, 'title' alphabetically
    (case-insensitive, ties broken by exact title); anything else sorts
    newest first. All sorts are stable.
    """
    if sort == "oldest":
        return sorted(items, key=lambda item: item.created)
    if sort == "title":
        return sorted(items, key=lambda item: (item.title.casefold(), item.title))
    return sorted(items, key=lambda item: item.created, reverse=True)


def paginate(items: Sequence[Item], offset: int, limit: int) -> List[Item]:
    """Window [offset, offset + limit); out-of-range windows are empty."""
    return list(items[offset:offset + limit])


def run_query(items: Sequence[Item], params: QueryParams, stats: LibraryStats) -> QueryResult:
    """Filter, then sort, then paginate. `total` counts matches before paging."""
    matched = sort_items(filter_items(items, params), params.sort)
    return QueryResult(
        items=paginate(matched, params.offset, params.limit),
        total=len(matched),
        offset=params.offset,
        limit=params.limit,
        stats=stats,
    )


def quick_search(items: Sequence[Item], query: str, limit: int = 50) -> SearchResult:
    """
    Free-text search that also looks inside text previews of uploads.

    Items keep their stored order (newest inserted first).
    """
    if not query:
        return SearchResult(items=[], total=0, query=query or "")

    matched = [item for item in items if item.matches_text(query, include_preview=True)]
    return SearchResult(items=matched[:limit], total=len(matched), query=query)
