import asyncio

from atlas_library.config import load_config
from atlas_library.library.repository import ItemRepository
from atlas_library.models import LibraryStats
from atlas_library.storage import BlobStore, JsonFileStore


async def rebuild():
    config = load_config()
    blobs = BlobStore(config.storage.uploads_dir)
    repo = ItemRepository(JsonFileStore(config.storage.data_dir), blobs)

    document = await repo.list()
    expected = LibraryStats.from_items(document.items)
    print(f"Found {len(document.items)} items in {config.storage.data_dir}.")

    if document.stats == expected:
        print("Stats already consistent.")
    else:
        print(f"Stored:   {document.stats.model_dump(by_alias=True)}")
        print(f"Rebuilt:  {expected.model_dump(by_alias=True)}")
        await repo.recompute_stats()
        print("Stats rewritten.")

    # Report file items whose blob is gone
    for item in document.items:
        file = getattr(item, "file", None)
        if file is not None and not blobs.exists(file.stored_filename):
            print(f"Missing blob for {item.id}: {file.stored_filename}")

    print("Done!")

if __name__ == "__main__":
    asyncio.run(rebuild())
