"""
Tests for Taxonomy and Stats

Tests category/tag vocabularies and the stats summary.
"""

import asyncio
import json
import tempfile
from pathlib import Path

import pytest

from atlas_library.errors import InvalidInput, ParseError
from atlas_library.library.repository import ItemRepository
from atlas_library.library.stats import StatsAggregator
from atlas_library.library.taxonomy import TaxonomyStore
from atlas_library.models import ItemCreate
from atlas_library.models.taxonomy import DEFAULT_CATEGORIES, DEFAULT_TAGS
from atlas_library.storage import JsonFileStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    return JsonFileStore(temp_dir)


@pytest.fixture
def taxonomy(store):
    return TaxonomyStore(store)


class TestTaxonomyStore:
    """Tests for TaxonomyStore."""

    @pytest.mark.asyncio
    async def test_seeds_defaults(self, taxonomy, temp_dir):
        await taxonomy.initialize()

        categories = await taxonomy.list_categories()
        assert [c.id for c in categories] == [c.id for c in DEFAULT_CATEGORIES]
        assert await taxonomy.list_tags() == DEFAULT_TAGS
        assert (temp_dir / "categories.json").exists()
        assert (temp_dir / "tags.json").exists()

    @pytest.mark.asyncio
    async def test_add_category_derives_slug(self, taxonomy):
        category = await taxonomy.add_category("Open Source Intel")

        assert category.id == "open-source-intel"
        assert category.icon == "📁"
        assert category.color == "#666666"
        assert (await taxonomy.list_categories())[-1] == category

    @pytest.mark.asyncio
    async def test_add_category_replaces_same_slug(self, taxonomy):
        await taxonomy.add_category("Maps", icon="🧭", color="#123456")

        categories = await taxonomy.list_categories()
        maps = [c for c in categories if c.id == "maps"]
        assert len(maps) == 1
        assert maps[0].icon == "🧭"
        assert len(categories) == len(DEFAULT_CATEGORIES)

    @pytest.mark.asyncio
    async def test_add_category_requires_name(self, taxonomy):
        with pytest.raises(InvalidInput):
            await taxonomy.add_category("")
        with pytest.raises(InvalidInput):
            await taxonomy.add_category(None)

    @pytest.mark.asyncio
    async def test_add_tag_is_idempotent(self, taxonomy):
        tags = await taxonomy.add_tag(" Belarus ")
        again = await taxonomy.add_tag("Belarus")

        assert tags[-1] == "Belarus"
        assert again == tags
        assert again.count("Belarus") == 1

    @pytest.mark.asyncio
    async def test_concurrent_tag_adds_all_kept(self, taxonomy):
        names = [f"tag-{n}" for n in range(20)]

        await asyncio.gather(*(taxonomy.add_tag(name) for name in names + names))

        tags = await taxonomy.list_tags()
        assert tags[:len(DEFAULT_TAGS)] == DEFAULT_TAGS
        assert sorted(tags[len(DEFAULT_TAGS):]) == sorted(names)

    @pytest.mark.asyncio
    async def test_add_tag_requires_value(self, taxonomy):
        with pytest.raises(InvalidInput):
            await taxonomy.add_tag("  ")

    @pytest.mark.asyncio
    async def test_malformed_categories(self, taxonomy, temp_dir):
        (temp_dir / "categories.json").write_text(json.dumps({"categories": [{"icon": "x"}]}), encoding="utf-8")

        with pytest.raises(ParseError):
            await taxonomy.list_categories()


class TestStatsAggregator:
    """Tests for StatsAggregator."""

    @pytest.mark.asyncio
    async def test_summary(self, store, taxonomy):
        repo = ItemRepository(store)
        await repo.create(ItemCreate(title="a", category="maps"))
        await repo.create(ItemCreate(title="b", category="maps"))
        await repo.create(ItemCreate(title="c", type="link", url="https://x", category="reports"))
        await repo.create(ItemCreate(title="d", category="deleted-category"))

        summary = await StatsAggregator(repo, taxonomy).summary()

        assert summary["totalItems"] == 4
        assert summary["totalLinks"] == 1
        assert summary["totalFiles"] == 0
        assert summary["totalSize"] == 0
        assert "lastUpdated" in summary
        assert summary["categoryStats"]["maps"] == 2
        assert summary["categoryStats"]["reports"] == 1
        assert summary["categoryStats"]["other"] == 0
        assert "deleted-category" not in summary["categoryStats"]

    @pytest.mark.asyncio
    async def test_breakdown_covers_every_category(self, store, taxonomy):
        repo = ItemRepository(store)
        aggregator = StatsAggregator(repo, taxonomy)

        breakdown = await aggregator.category_breakdown()
        stats = await aggregator.global_stats()

        assert set(breakdown) == {c.id for c in DEFAULT_CATEGORIES}
        assert all(count == 0 for count in breakdown.values())
        assert stats["totalItems"] == 0
