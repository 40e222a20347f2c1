"""
Taxonomy Store

Category and tag vocabularies, seeded with defaults the first time they
are used.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from atlas_library.errors import InvalidInput, ParseError
from atlas_library.models.taxonomy import (
    DEFAULT_CATEGORIES,
    DEFAULT_TAGS,
    Category,
    CategoryDocument,
    TagDocument,
    slugify,
)
from atlas_library.storage.document_store import DocumentStore

logger = logging.getLogger("atlas_library.taxonomy")

CATEGORIES_KEY = "categories"
TAGS_KEY = "tags"


class TaxonomyStore:
    """
    Categories and tags, each in its own document.

    Adding a category whose slug already exists replaces that entry in
    place. Two different names that slugify alike therefore overwrite
    each other; this is a known limitation.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def initialize(self) -> None:
        """Seed both documents if they have never been saved."""
        async with self.store.lock(CATEGORIES_KEY):
            await self._load_categories()
        async with self.store.lock(TAGS_KEY):
            await self._load_tags()

    async def _load_categories(self) -> CategoryDocument:
        raw = await self.store.load(CATEGORIES_KEY)
        if raw is None:
            document = CategoryDocument(categories=[c.model_copy() for c in DEFAULT_CATEGORIES])
            await self.store.save(CATEGORIES_KEY, document.model_dump(mode="json"))
            logger.info("Seeded default categories")
            return document
        try:
            return CategoryDocument.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Categories document does not match schema: {e}")
            raise ParseError("Categories document is malformed") from e

    async def _load_tags(self) -> TagDocument:
        raw = await self.store.load(TAGS_KEY)
        if raw is None:
            document = TagDocument(tags=list(DEFAULT_TAGS))
            await self.store.save(TAGS_KEY, document.model_dump(mode="json"))
            logger.info("Seeded default tags")
            return document
        try:
            return TagDocument.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Tags document does not match schema: {e}")
            raise ParseError("Tags document is malformed") from e

    async def list_categories(self) -> List[Category]:
        async with self.store.lock(CATEGORIES_KEY):
            document = await self._load_categories()
        return document.categories

    async def add_category(
        self,
        name: Optional[str],
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Category:
        """
        Add a category, or overwrite the one with the same slug.

        Raises:
            InvalidInput: If the name is missing
        """
        if not name or not name.strip():
            raise InvalidInput("Category name required")

        category = Category(
            id=slugify(name),
            name=name,
            icon=icon or "📁",
            color=color or "#666666",
        )

        async with self.store.lock(CATEGORIES_KEY):
            document = await self._load_categories()
            for index, existing in enumerate(document.categories):
                if existing.id == category.id:
                    document.categories[index] = category
                    break
            else:
                document.categories.append(category)
            await self.store.save(CATEGORIES_KEY, document.model_dump(mode="json"))

        logger.info(f"Saved category {category.id}")
        return category

    async def list_tags(self) -> List[str]:
        async with self.store.lock(TAGS_KEY):
            document = await self._load_tags()
        return document.tags

    async def add_tag(self, tag: Optional[str]) -> List[str]:
        """
        Add a tag if it is not already known.

        Returns:
            The full tag list after the add

        Raises:
            InvalidInput: If the tag is missing
        """
        if not tag or not tag.strip():
            raise InvalidInput("Tag required")
        tag = tag.strip()

        async with self.store.lock(TAGS_KEY):
            document = await self._load_tags()
            if tag not in document.tags:
                document.tags.append(tag)
                await self.store.save(TAGS_KEY, document.model_dump(mode="json"))
        return document.tags

    async def replace_categories(self, document: CategoryDocument) -> None:
        async with self.store.lock(CATEGORIES_KEY):
            await self.store.save(CATEGORIES_KEY, document.model_dump(mode="json"))

    async def replace_tags(self, document: TagDocument) -> None:
        async with self.store.lock(TAGS_KEY):
            await self.store.save(TAGS_KEY, document.model_dump(mode="json"))
