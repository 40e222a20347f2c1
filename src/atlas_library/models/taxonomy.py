"""
Taxonomy Data Model

Categories and tags used to classify items, with the seeded defaults.
"""

import re
from typing import List

from pydantic import BaseModel, Field


_NON_SLUG = re.compile(r"[^a-z0-9]")


def slugify(name: str) -> str:
    """Lowercase the name and turn every non-alphanumeric character into a hyphen."""
    return _NON_SLUG.sub("-", name.lower())


class Category(BaseModel):
    """A named bucket items point at through their `category` field."""

    id: str
    name: str
    icon: str = "📁"
    color: str = "#666666"


class CategoryDocument(BaseModel):
    """Persisted list of categories."""
    categories: List[Category] = Field(default_factory=list)


class TagDocument(BaseModel):
    """Persisted tag vocabulary, insertion ordered."""
    tags: List[str] = Field(default_factory=list)


DEFAULT_CATEGORIES = [
    Category(id="conflicts", name="Conflicts", icon="⚔️", color="#ff3333"),
    Category(id="military", name="Military", icon="🎖️", color="#ff6600"),
    Category(id="politics", name="Politics", icon="🏛️", color="#ffaa00"),
    Category(id="intelligence", name="Intelligence", icon="🔍", color="#00aaff"),
    Category(id="maps", name="Maps", icon="🗺️", color="#00ff00"),
    Category(id="reports", name="Reports", icon="📊", color="#aa00ff"),
    Category(id="media", name="Media", icon="📰", color="#ff00aa"),
    Category(id="other", name="Other", icon="📁", color="#666666"),
]

DEFAULT_TAGS = [
    "Ukraine",
    "Russia",
    "Israel",
    "Gaza",
    "Syria",
    "Iran",
    "NATO",
    "USA",
    "China",
    "Important",
    "Verified",
]
