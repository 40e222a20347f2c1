"""
Tests for Item Repository

Tests CRUD and the counters kept in the library document.
"""

import asyncio
import json
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from atlas_library.errors import InvalidInput, NotFound, ParseError
from atlas_library.library.repository import ItemRepository
from atlas_library.models import FileInfo, ItemCreate, ItemPatch, LibraryDocument, LibraryStats, NoteItem
from atlas_library.storage import BlobStore, JsonFileStore


async def chunked(data: bytes):
    yield data


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def repo(temp_dir):
    store = JsonFileStore(temp_dir / "data")
    blobs = BlobStore(temp_dir / "uploads")
    return ItemRepository(store, blobs)


async def store_blob(repo: ItemRepository, name: str, data: bytes) -> FileInfo:
    stored = repo.blob_store.storage_filename(name)
    size = await repo.blob_store.write(stored, chunked(data))
    return FileInfo(
        original_name=name,
        stored_filename=stored,
        relative_path=f"/uploads/{stored}",
        mime_type="text/plain",
        size_bytes=size,
    )


async def assert_stats_consistent(repo: ItemRepository):
    document = await repo.list()
    assert document.stats == LibraryStats.from_items(document.items)


class TestItemRepository:
    """Tests for ItemRepository."""

    @pytest.mark.asyncio
    async def test_initialize_creates_empty_document(self, repo, temp_dir):
        await repo.initialize()

        raw = json.loads((temp_dir / "data" / "library.json").read_text(encoding="utf-8"))
        assert raw["items"] == []
        assert raw["stats"] == {"totalItems": 0, "totalFiles": 0, "totalLinks": 0, "totalSize": 0}
        assert "lastUpdated" in raw

    @pytest.mark.asyncio
    async def test_create_note(self, repo):
        item = await repo.create(ItemCreate(title="Report A", tags="osint, maps"))

        assert item.type == "note"
        assert item.tags == ["osint", "maps"]
        assert item.views == 0

        document = await repo.list()
        assert document.items[0].id == item.id
        assert document.stats.total_items == 1
        assert document.stats.total_links == 0

    @pytest.mark.asyncio
    async def test_create_link_counts_link(self, repo):
        await repo.create(ItemCreate(title="Source", type="link", url="https://example.org"))

        document = await repo.list()
        assert document.stats.total_items == 1
        assert document.stats.total_links == 1

    @pytest.mark.asyncio
    async def test_create_inserts_newest_first(self, repo):
        first = await repo.create(ItemCreate(title="first"))
        second = await repo.create(ItemCreate(title="second"))

        document = await repo.list()
        assert [i.id for i in document.items] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_create_requires_title(self, repo):
        with pytest.raises(InvalidInput):
            await repo.create(ItemCreate(title="  "))
        with pytest.raises(InvalidInput):
            await repo.create(ItemCreate())

        document = await repo.list()
        assert document.items == []

    @pytest.mark.asyncio
    async def test_create_rejects_file_type(self, repo):
        with pytest.raises(InvalidInput):
            await repo.create(ItemCreate(title="x", type="file"))

    @pytest.mark.asyncio
    async def test_get_counts_views(self, repo):
        item = await repo.create(ItemCreate(title="Report"))

        first = await repo.get(item.id)
        second = await repo.get(item.id)

        assert first.views == 0
        assert second.views == 1
        document = await repo.list()
        assert document.items[0].views == 2

    @pytest.mark.asyncio
    async def test_get_does_not_touch_last_updated(self, repo):
        item = await repo.create(ItemCreate(title="Report"))
        before = (await repo.list()).last_updated

        await repo.get(item.id)

        assert (await repo.list()).last_updated == before

    @pytest.mark.asyncio
    async def test_get_missing(self, repo):
        await repo.initialize()
        with pytest.raises(NotFound):
            await repo.get("nope")

    @pytest.mark.asyncio
    async def test_update_changes_only_given_fields(self, repo):
        item = await repo.create(ItemCreate(
            title="Old", description="desc", category="maps", tags=["a"], country="UA",
        ))

        updated = await repo.update(item.id, ItemPatch(title="New"))

        assert updated.title == "New"
        assert updated.description == "desc"
        assert updated.category == "maps"
        assert updated.tags == ["a"]
        assert updated.country == "UA"
        assert updated.id == item.id
        assert updated.created == item.created
        assert updated.updated is not None

    @pytest.mark.asyncio
    async def test_update_null_clears_field(self, repo):
        item = await repo.create(ItemCreate(title="Old", country="UA"))

        updated = await repo.update(item.id, ItemPatch.model_validate({"country": None, "starred": None}))

        assert updated.country is None
        assert updated.starred is False

    @pytest.mark.asyncio
    async def test_update_star_and_tags(self, repo):
        item = await repo.create(ItemCreate(title="Old"))

        updated = await repo.update(item.id, ItemPatch(starred=True, tags="x, y, x"))

        assert updated.starred is True
        assert updated.tags == ["x", "y"]

    @pytest.mark.asyncio
    async def test_update_blank_title_rejected(self, repo):
        item = await repo.create(ItemCreate(title="Old"))

        with pytest.raises(InvalidInput):
            await repo.update(item.id, ItemPatch(title=""))

        assert (await repo.list()).items[0].title == "Old"

    @pytest.mark.asyncio
    async def test_update_missing(self, repo):
        await repo.initialize()
        with pytest.raises(NotFound):
            await repo.update("nope", ItemPatch(title="x"))

    @pytest.mark.asyncio
    async def test_delete_twice(self, repo):
        item = await repo.create(ItemCreate(title="Gone"))

        result = await repo.delete(item.id)
        assert result.id == item.id
        assert result.blob_removed is None

        with pytest.raises(NotFound):
            await repo.delete(item.id)

        document = await repo.list()
        assert document.items == []
        assert document.stats.total_items == 0

    @pytest.mark.asyncio
    async def test_file_item_lifecycle(self, repo):
        blob = await store_blob(repo, "notes.txt", b"hello")
        item = await repo.create_from_upload(ItemCreate(), blob)

        assert item.title == "notes.txt"
        document = await repo.list()
        assert document.stats.total_files == 1
        assert document.stats.total_size == 5

        result = await repo.delete(item.id)

        assert result.blob_removed is True
        assert not repo.blob_store.exists(blob.stored_filename)
        document = await repo.list()
        assert document.stats.total_files == 0
        assert document.stats.total_size == 0

    @pytest.mark.asyncio
    async def test_delete_with_missing_blob(self, repo):
        blob = await store_blob(repo, "notes.txt", b"hello")
        item = await repo.create_from_upload(ItemCreate(title="Notes"), blob)
        await repo.blob_store.delete(blob.stored_filename)

        result = await repo.delete(item.id)

        assert result.blob_removed is False
        assert result.blob_error is None

    @pytest.mark.asyncio
    async def test_delete_survives_blob_failure(self, repo):
        blob = await store_blob(repo, "notes.txt", b"hello")
        item = await repo.create_from_upload(ItemCreate(title="Notes"), blob)
        repo.blob_store.delete = AsyncMock(side_effect=PermissionError("denied"))

        result = await repo.delete(item.id)

        assert result.blob_removed is False
        assert "denied" in result.blob_error
        assert (await repo.list()).items == []

    @pytest.mark.asyncio
    async def test_stats_consistent_after_mixed_mutations(self, repo):
        note = await repo.create(ItemCreate(title="n"))
        link = await repo.create(ItemCreate(title="l", type="link", url="https://x"))
        blob = await store_blob(repo, "a.txt", b"abc")
        file_item = await repo.create_from_upload(ItemCreate(), blob)
        await assert_stats_consistent(repo)

        await repo.update(link.id, ItemPatch(title="l2"))
        await repo.get(note.id)
        await assert_stats_consistent(repo)

        await repo.delete(link.id)
        await repo.delete(file_item.id)
        await assert_stats_consistent(repo)

    @pytest.mark.asyncio
    async def test_replace_recomputes_stats(self, repo):
        document = LibraryDocument(
            items=[NoteItem(title="a"), NoteItem(title="b")],
            stats=LibraryStats(total_items=99),
        )

        saved = await repo.replace(document)

        assert saved.stats.total_items == 2
        await assert_stats_consistent(repo)

    @pytest.mark.asyncio
    async def test_replace_rejects_duplicate_ids(self, repo):
        note = NoteItem(title="a")
        with pytest.raises(InvalidInput):
            await repo.replace(LibraryDocument(items=[note, note.model_copy()]))

    @pytest.mark.asyncio
    async def test_recompute_stats_repairs_drift(self, repo, temp_dir):
        await repo.create(ItemCreate(title="a"))
        path = temp_dir / "data" / "library.json"
        raw = json.loads(path.read_text(encoding="utf-8"))
        raw["stats"]["totalItems"] = 7
        path.write_text(json.dumps(raw), encoding="utf-8")

        stats = await repo.recompute_stats()

        assert stats.total_items == 1
        await assert_stats_consistent(repo)

    @pytest.mark.asyncio
    async def test_malformed_document_raises_parse_error(self, repo, temp_dir):
        path = temp_dir / "data" / "library.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"items": [{"type": "note"}]}), encoding="utf-8")

        with pytest.raises(ParseError):
            await repo.list()

    @pytest.mark.asyncio
    async def test_concurrent_mutations_lose_nothing(self, repo):
        target = await repo.create(ItemCreate(title="Watched"))

        await asyncio.gather(
            *(repo.create(ItemCreate(title=f"item {n}", type="link" if n % 3 == 0 else "note", url="https://x"))
              for n in range(30)),
            *(repo.get(target.id) for _ in range(10)),
        )

        document = await repo.list()
        assert len(document.items) == 31
        assert document.items[document.index_of(target.id)].views == 10
        await assert_stats_consistent(repo)
