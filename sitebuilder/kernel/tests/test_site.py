"""
Sitebuilder Site Registry — pages, home page, content and settings entries
"""

import pytest

from sitebuilder.kernel.errors import PageNotFound
from sitebuilder.kernel.site import Site, add_page, ensure_home_page, remove_page, set_home_page
from sitebuilder.kernel.types import Element, PageEntry


@pytest.fixture
def site(id_factory):
    return ensure_home_page(Site(), legacy_content=[Element(id="A", type="text")], id_factory=id_factory)


class TestEnsureHomePage:
    def test_creates_home_with_legacy_content(self, site):
        home = site.home_page()
        assert (home.id, home.title, home.path) == ("n1", "Home", "/")
        assert [e.id for e in site.pages_content[home.id]] == ["A"]
        assert site.pages_settings[home.id].title == "Home"

    def test_first_page_becomes_home(self):
        site = ensure_home_page(Site(pages=[PageEntry("p1", "Blog", "/blog"), PageEntry("p2", "Shop", "/shop")]))
        assert site.home_page().id == "p1"
        assert site.pages_content == {"p1": [], "p2": []}

    def test_only_one_home(self):
        site = ensure_home_page(
            Site(pages=[PageEntry("p1", "A", "/", is_home=True), PageEntry("p2", "B", "/b", is_home=True)])
        )
        assert [p.id for p in site.pages if p.is_home] == ["p1"]

    def test_input_is_not_modified(self):
        original = Site()
        ensure_home_page(original)
        assert original.pages == []


class TestPageOps:
    def test_add_page_normalizes_path(self, site, id_factory):
        updated, page = add_page(site, "About", " about ", id_factory)
        assert page.path == "/about"
        assert not page.is_home
        assert updated.pages_content[page.id] == []
        assert len(site.pages) == 1

    def test_add_page_duplicate_path(self, site):
        with pytest.raises(ValueError):
            add_page(site, "Again", "/")

    def test_remove_home_promotes_first_remaining(self, site, id_factory):
        site, about = add_page(site, "About", "/about", id_factory)
        result = remove_page(site, site.home_page().id)
        assert result.home_page().id == about.id
        assert list(result.pages_content) == [about.id]

    def test_remove_unknown(self, site):
        with pytest.raises(PageNotFound):
            remove_page(site, "ghost")

    def test_remove_last(self, site):
        with pytest.raises(ValueError):
            remove_page(site, site.home_page().id)

    def test_set_home_page(self, site, id_factory):
        site, about = add_page(site, "About", "/about", id_factory)
        result = set_home_page(site, about.id)
        assert [p.id for p in result.pages if p.is_home] == [about.id]

    def test_legacy_page_keys(self):
        page = PageEntry.from_dict({"id": "p", "title": "Old", "slug": "/old", "isHomePage": True})
        assert page.path == "/old"
        assert page.is_home
