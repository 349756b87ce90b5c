"""
Sitebuilder Kernel — Document Codec and Storage Protocol

The engine never persists anything itself. This module defines the JSON form
the persistence collaborator stores verbatim, and the interface such a
collaborator implements. MemoryStorage backs tests and the development API.
"""

from __future__ import annotations

import json
from typing import Any

from sitebuilder.kernel.errors import DocumentParseError, DuplicateElementId
from sitebuilder.kernel.site import Site
from sitebuilder.kernel.tree import find_duplicate_ids
from sitebuilder.kernel.types import Element

# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def _decode(document: str | bytes) -> Any:
    try:
        return json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentParseError(f"document is not valid JSON: {e}") from e


def dump_elements(elements: list[Element]) -> str:
    return json.dumps([e.to_dict() for e in elements], separators=(",", ":"))


def load_elements(document: str | bytes) -> list[Element]:
    """
    Parse a stored element tree. Raises DocumentParseError on bad JSON or a
    bad shape, DuplicateElementId if two nodes share an id.
    """
    data = _decode(document)
    if not isinstance(data, list):
        raise DocumentParseError(f"element document must be a list, got {type(data).__name__}")
    elements = [Element.from_dict(item) for item in data]
    duplicates = find_duplicate_ids(elements)
    if duplicates:
        raise DuplicateElementId(duplicates)
    return elements


def dump_site(site: Site) -> str:
    return json.dumps(site.to_dict(), separators=(",", ":"))


def load_site(document: str | bytes) -> Site:
    site = Site.from_dict(_decode(document))
    for page_id, tree in site.pages_content.items():
        duplicates = find_duplicate_ids(tree)
        if duplicates:
            raise DuplicateElementId(duplicates)
        if page_id not in {p.id for p in site.pages}:
            raise DocumentParseError(f"content for unregistered page '{page_id}'")
    return site


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class SiteStorage:
    """
    Abstract storage interface for serialized sites.
    Implement against a database or object store in production, in-memory for tests.
    """

    async def get(self, site_id: str) -> str | None:
        """Fetch the stored document. Returns None if not found."""
        raise NotImplementedError

    async def put(self, site_id: str, document: str) -> None:
        raise NotImplementedError

    async def delete(self, site_id: str) -> None:
        raise NotImplementedError


class MemoryStorage(SiteStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.documents: dict[str, str] = {}

    async def get(self, site_id: str) -> str | None:
        return self.documents.get(site_id)

    async def put(self, site_id: str, document: str) -> None:
        self.documents[site_id] = document

    async def delete(self, site_id: str) -> None:
        self.documents.pop(site_id, None)


async def save_site(storage: SiteStorage, site_id: str, site: Site) -> None:
    await storage.put(site_id, dump_site(site))


async def fetch_site(storage: SiteStorage, site_id: str) -> Site | None:
    document = await storage.get(site_id)
    if document is None:
        return None
    return load_site(document)
