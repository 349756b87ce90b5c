"""
Sitebuilder Kernel — Element Tree Store

The authoritative holder of one editing session: the current page's element
tree, the selection, the page settings and the multi-page site around them.
Every structural change goes through the pure functions in mutations.py; the
store swaps in the returned tree and notifies subscribers once per applied
change. No-ops never notify.

Trees handed out by `elements` are snapshots: a later mutation produces a new
list rather than editing the old one. Callers must not modify them.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from sitebuilder.config import settings
from sitebuilder.kernel import mutations
from sitebuilder.kernel import site as site_ops
from sitebuilder.kernel.capabilities import is_allowed
from sitebuilder.kernel.errors import DuplicateElementId
from sitebuilder.kernel.responsive import effective_props
from sitebuilder.kernel.site import Site
from sitebuilder.kernel.structure import (
    ensure_elements_order,
    ensure_page_chrome,
    get_content_insertion_index,
    is_footer,
    is_header,
)
from sitebuilder.kernel.tree import find_duplicate_ids, find_element_by_id
from sitebuilder.kernel.types import (
    BREAKPOINTS,
    TIERS,
    Breakpoint,
    Element,
    MutationResult,
    PageEntry,
    PageSettings,
    ResponsiveOverride,
    new_element_id,
)

logger = logging.getLogger(__name__)

Listener = Callable[["ElementTreeStore"], None]


def _as_element(element: Element | dict[str, Any]) -> Element:
    return element if isinstance(element, Element) else Element.from_dict(element)


class ElementTreeStore:
    """
    One editing session.

    `entitlements` is the read-only entitlement provider: a zero-argument
    callable returning the current tier. It is asked on every insertion so a
    plan change takes effect without rebuilding the store.
    """

    def __init__(
        self,
        elements: list[Element] | None = None,
        page_settings: PageSettings | None = None,
        entitlements: Callable[[], str] | None = None,
        id_factory: Callable[[], str] = new_element_id,
        site: Site | None = None,
    ) -> None:
        if site is not None and elements is not None:
            raise ValueError("pass either elements or site, not both")

        self._id_factory = id_factory
        self._entitlements = entitlements or (lambda: settings.DEFAULT_TIER)
        self._listeners: list[Listener] = []
        self._selected_id: str | None = None
        self._breakpoint: Breakpoint = settings.DEFAULT_BREAKPOINT

        self._site = site_ops.ensure_home_page(
            site or Site(),
            legacy_content=elements,
            id_factory=id_factory,
        )
        home = self._site.home_page()
        self._active_page_id: str = home.id
        self._elements: list[Element] = self._site.pages_content[home.id]
        self._page_settings: PageSettings = page_settings or self._site.pages_settings[home.id]
        self._check_unique(self._elements)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def elements(self) -> list[Element]:
        return self._elements

    @property
    def selected_element_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_element(self) -> Element | None:
        if self._selected_id is None:
            return None
        return find_element_by_id(self._elements, self._selected_id)

    @property
    def page_settings(self) -> PageSettings:
        return self._page_settings

    @property
    def current_breakpoint(self) -> Breakpoint:
        return self._breakpoint

    @property
    def tier(self) -> str:
        tier = self._entitlements()
        if tier not in TIERS:
            logger.warning("store: entitlement provider returned %r, treating as free", tier)
            return "free"
        return tier

    @property
    def id_factory(self) -> Callable[[], str]:
        return self._id_factory

    @property
    def active_page_id(self) -> str:
        return self._active_page_id

    @property
    def site(self) -> Site:
        """The whole site with the active page's tree and settings folded in."""
        snapshot = copy.deepcopy(self._site)
        snapshot.pages_content[self._active_page_id] = copy.deepcopy(self._elements)
        snapshot.pages_settings[self._active_page_id] = copy.deepcopy(self._page_settings)
        return snapshot

    def find_element_by_id(self, element_id: str) -> Element | None:
        return find_element_by_id(self._elements, element_id)

    def can_add_element(self, element_type: str) -> bool:
        return is_allowed(element_type, self.tier)

    def effective_props(self, element_id: str, breakpoint: str | None = None) -> dict[str, Any] | None:
        element = self.find_element_by_id(element_id)
        if element is None:
            return None
        return effective_props(element, breakpoint or self._breakpoint)

    def content_insertion_index(self) -> int:
        return get_content_insertion_index(self._elements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "elements": [e.to_dict() for e in self._elements],
            "selectedElementId": self._selected_id,
            "pageSettings": self._page_settings.to_dict(),
            "breakpoint": self._breakpoint,
            "activePageId": self._active_page_id,
            "pages": [p.to_dict() for p in self._site.pages],
        }

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(store)` after every applied change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("store: listener %r failed", listener)

    def _commit(self, result: MutationResult) -> bool:
        if not result.applied:
            return False
        self._elements = result.elements
        if self._selected_id is not None and find_element_by_id(self._elements, self._selected_id) is None:
            self._selected_id = None
        self._notify()
        return True

    @staticmethod
    def _check_unique(elements: list[Element]) -> None:
        duplicates = find_duplicate_ids(elements)
        if duplicates:
            raise DuplicateElementId(duplicates)

    # ------------------------------------------------------------------
    # Element mutations
    # ------------------------------------------------------------------

    def add_element(
        self,
        element: Element | dict[str, Any],
        position: int | str | None = None,
        container_id: str | None = None,
    ) -> str | None:
        """
        Insert an element and select it. Returns its id, or None when the
        target container does not exist. Raises ElementNotPermitted when the
        current tier may not insert this type.
        """
        element = _as_element(element)
        result = mutations.add_element(self._elements, element, position, container_id, tier=self.tier)
        if not result.applied:
            return None
        self._selected_id = result.element_id
        self._commit(result)
        return result.element_id

    def quick_add(self, element: Element | dict[str, Any]) -> str | None:
        """Insert at the root between header and footer."""
        return self.add_element(element, position=get_content_insertion_index(self._elements))

    def update_element(self, element_id: str, updates: dict[str, Any]) -> bool:
        return self._commit(mutations.update_element(self._elements, element_id, updates))

    def delete_element(self, element_id: str) -> bool:
        """Delete an element; clears the selection if it was inside the deleted subtree."""
        return self._commit(mutations.delete_element(self._elements, element_id))

    remove_element = delete_element

    def move_element(self, source_index: int, dest_index: int, scope_id: str | None = None) -> bool:
        return self._commit(mutations.move_element(self._elements, source_index, dest_index, scope_id))

    def move_element_up(self, element_id: str) -> bool:
        return self._commit(mutations.move_element_up(self._elements, element_id))

    def move_element_down(self, element_id: str) -> bool:
        return self._commit(mutations.move_element_down(self._elements, element_id))

    def transfer_element(self, element_id: str, container_id: str | None, index: int | None = None) -> bool:
        result = mutations.transfer_element(self._elements, element_id, container_id, index, tier=self.tier)
        return self._commit(result)

    def duplicate_element(self, element_id: str) -> str | None:
        """Clone a subtree next to the original and select the clone."""
        result = mutations.duplicate_element(self._elements, element_id, self._id_factory, tier=self.tier)
        if not result.applied:
            return None
        self._selected_id = result.element_id
        self._commit(result)
        return result.element_id

    def update_element_responsive(
        self,
        element_id: str,
        breakpoint: str,
        override: ResponsiveOverride | dict[str, Any] | None,
    ) -> bool:
        return self._commit(mutations.update_element_responsive(self._elements, element_id, breakpoint, override))

    def set_elements(self, elements: list[Element]) -> None:
        """Replace the tree wholesale, as given."""
        elements = copy.deepcopy(elements)
        self._check_unique(elements)
        self._commit(MutationResult(elements=elements, applied=True))

    def load_elements(self, elements: list[Element], ensure_chrome: bool | None = None) -> None:
        """
        Load a template or stored tree: normalize the header/footer order and,
        unless disabled, add the default navbar and footer when missing.
        Selection is cleared.
        """
        if ensure_chrome is None:
            ensure_chrome = settings.ENSURE_PAGE_CHROME
        if ensure_chrome:
            site_name = self._page_settings.title or settings.DEFAULT_SITE_NAME
            loaded = ensure_page_chrome(elements, site_name, self._id_factory)
        else:
            loaded = ensure_elements_order(elements)
        self._selected_id = None
        self.set_elements(loaded)

    # ------------------------------------------------------------------
    # Selection and breakpoint
    # ------------------------------------------------------------------

    def select_element(self, element_id: str | None) -> bool:
        if element_id is not None and self.find_element_by_id(element_id) is None:
            logger.warning("store: cannot select unknown element '%s'", element_id)
            return False
        if element_id == self._selected_id:
            return True
        self._selected_id = element_id
        self._notify()
        return True

    def set_breakpoint(self, breakpoint: Breakpoint) -> None:
        if breakpoint not in BREAKPOINTS:
            raise ValueError(f"unknown breakpoint: {breakpoint!r}")
        if breakpoint != self._breakpoint:
            self._breakpoint = breakpoint
            self._notify()

    # ------------------------------------------------------------------
    # Page settings
    # ------------------------------------------------------------------

    def update_page_settings(self, updates: dict[str, Any]) -> None:
        """
        Shallow-merge settings. A new title is also written into the siteName
        prop of the root navbar and footer.
        """
        self._page_settings = self._page_settings.merged(updates)
        title = updates.get("title")
        if title:
            elements = copy.deepcopy(self._elements)
            for element in elements:
                if is_header(element) or is_footer(element):
                    element.props = {**element.props, "siteName": title}
            self._elements = elements
        self._notify()

    def set_page_settings(self, page_settings: PageSettings) -> None:
        self._page_settings = copy.deepcopy(page_settings)
        self._notify()

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _stash_active_page(self) -> None:
        self._site.pages_content[self._active_page_id] = self._elements
        self._site.pages_settings[self._active_page_id] = self._page_settings

    def add_page(self, title: str, path: str) -> PageEntry:
        self._stash_active_page()
        self._site, page = site_ops.add_page(self._site, title, path, self._id_factory)
        self._notify()
        return page

    def switch_page(self, page_id: str) -> None:
        """Make another page the one being edited. Raises PageNotFound."""
        self._site.get_page(page_id)
        if page_id == self._active_page_id:
            return
        self._stash_active_page()
        self._active_page_id = page_id
        self._elements = self._site.pages_content[page_id]
        self._page_settings = self._site.pages_settings[page_id]
        self._selected_id = None
        self._notify()

    def remove_page(self, page_id: str) -> None:
        """Remove a page; removing the active page switches to the home page."""
        self._stash_active_page()
        self._site = site_ops.remove_page(self._site, page_id)
        if page_id == self._active_page_id:
            home = self._site.home_page()
            self._active_page_id = home.id
            self._elements = self._site.pages_content[home.id]
            self._page_settings = self._site.pages_settings[home.id]
            self._selected_id = None
        self._notify()

    def set_home_page(self, page_id: str) -> None:
        self._stash_active_page()
        self._site = site_ops.set_home_page(self._site, page_id)
        self._notify()
