"""
Sitebuilder Kernel — Multi-page Site Registry

A site is a list of pages plus, per page, its element tree and its
PageSettings. Once initialized a site has exactly one home page and every
registered page has both a content and a settings entry.

Functions here are pure: they return a new Site and leave the input alone.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sitebuilder.kernel.errors import DocumentParseError, PageNotFound
from sitebuilder.kernel.types import Element, PageEntry, PageSettings, new_element_id


@dataclass
class Site:
    pages: list[PageEntry] = field(default_factory=list)
    pages_content: dict[str, list[Element]] = field(default_factory=dict)
    pages_settings: dict[str, PageSettings] = field(default_factory=dict)

    def get_page(self, page_id: str) -> PageEntry:
        for page in self.pages:
            if page.id == page_id:
                return page
        raise PageNotFound(f"page '{page_id}' does not exist")

    def home_page(self) -> PageEntry | None:
        return next((p for p in self.pages if p.is_home), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pages": [p.to_dict() for p in self.pages],
            "pagesContent": {pid: [e.to_dict() for e in tree] for pid, tree in self.pages_content.items()},
            "pagesSettings": {pid: s.to_dict() for pid, s in self.pages_settings.items()},
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Site:
        if not isinstance(d, dict):
            raise DocumentParseError(f"site must be an object, got {type(d).__name__}")
        pages = d.get("pages") or []
        content = d.get("pagesContent") or {}
        settings = d.get("pagesSettings") or {}
        if not isinstance(pages, list) or not isinstance(content, dict) or not isinstance(settings, dict):
            raise DocumentParseError("site has malformed pages, pagesContent or pagesSettings")
        for pid, tree in content.items():
            if not isinstance(tree, list):
                raise DocumentParseError(f"content of page '{pid}' must be a list")
        return cls(
            pages=[PageEntry.from_dict(p) for p in pages],
            pages_content={pid: [Element.from_dict(e) for e in tree] for pid, tree in content.items()},
            pages_settings={pid: PageSettings.from_dict(s) for pid, s in settings.items()},
        )


def _normalize_path(path: str) -> str:
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    return path


def ensure_home_page(
    site: Site,
    legacy_content: list[Element] | None = None,
    title: str = "Home",
    id_factory: Callable[[], str] = new_element_id,
) -> Site:
    """
    Bring a site into shape: create a Home page at "/" (holding any legacy
    single-page content) when there are no pages, give every page a content
    and settings entry, and make sure exactly one page is home.
    """
    result = copy.deepcopy(site)

    if not result.pages:
        home = PageEntry(id=id_factory(), title=title, path="/", is_home=True)
        result.pages.append(home)
        result.pages_content[home.id] = copy.deepcopy(legacy_content or [])
        result.pages_settings[home.id] = PageSettings(title=title)

    for page in result.pages:
        result.pages_content.setdefault(page.id, [])
        result.pages_settings.setdefault(page.id, PageSettings(title=page.title))

    homes = [p for p in result.pages if p.is_home]
    if not homes:
        result.pages[0].is_home = True
    for extra in homes[1:]:
        extra.is_home = False

    return result


def add_page(
    site: Site,
    title: str,
    path: str,
    id_factory: Callable[[], str] = new_element_id,
) -> tuple[Site, PageEntry]:
    """Register an empty page. Paths are unique within a site."""
    path = _normalize_path(path)
    if any(p.path == path for p in site.pages):
        raise ValueError(f"a page already uses path {path!r}")

    result = copy.deepcopy(site)
    page = PageEntry(id=id_factory(), title=title, path=path, is_home=not result.pages)
    result.pages.append(page)
    result.pages_content[page.id] = []
    result.pages_settings[page.id] = PageSettings(title=title)
    return result, page


def remove_page(site: Site, page_id: str) -> Site:
    """Drop a page with its content and settings. The last page cannot go."""
    page = site.get_page(page_id)
    if len(site.pages) == 1:
        raise ValueError("cannot remove the only page of a site")

    result = copy.deepcopy(site)
    result.pages = [p for p in result.pages if p.id != page_id]
    result.pages_content.pop(page_id, None)
    result.pages_settings.pop(page_id, None)
    if page.is_home:
        result.pages[0].is_home = True
    return result


def set_home_page(site: Site, page_id: str) -> Site:
    site.get_page(page_id)
    result = copy.deepcopy(site)
    for page in result.pages:
        page.is_home = page.id == page_id
    return result
