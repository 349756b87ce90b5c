"""
Sitebuilder Kernel — the element tree engine.

Components:
  capabilities — element kinds, container flags, entitlement gate
  structure    — header/footer ordering rules for the root list
  responsive   — per-breakpoint overrides, effective props
  mutations    — (elements, args) → MutationResult  (pure)
  drop         — pointer release → insert / reorder / transfer
  store        — one editing session: tree, selection, page settings, pages
  storage      — JSON codec and the persistence protocol
"""

from sitebuilder.kernel.capabilities import get_kind, is_allowed, is_container
from sitebuilder.kernel.drop import DropEvent, DropPlan, Rect, RenderedElement, handle_drop, resolve_drop
from sitebuilder.kernel.errors import (
    BuilderError,
    DocumentParseError,
    DuplicateElementId,
    ElementNotPermitted,
    InvariantViolation,
    PageNotFound,
)
from sitebuilder.kernel.responsive import effective_props
from sitebuilder.kernel.store import ElementTreeStore
from sitebuilder.kernel.structure import ensure_elements_order, get_content_insertion_index
from sitebuilder.kernel.tree import find_element_by_id
from sitebuilder.kernel.types import Element, MutationResult, PageEntry, PageSettings, ResponsiveOverride

__all__ = [
    "Element",
    "ResponsiveOverride",
    "PageSettings",
    "PageEntry",
    "MutationResult",
    "ElementTreeStore",
    "find_element_by_id",
    "effective_props",
    "get_kind",
    "is_allowed",
    "is_container",
    "ensure_elements_order",
    "get_content_insertion_index",
    "DropEvent",
    "DropPlan",
    "Rect",
    "RenderedElement",
    "resolve_drop",
    "handle_drop",
    "BuilderError",
    "ElementNotPermitted",
    "InvariantViolation",
    "DuplicateElementId",
    "DocumentParseError",
    "PageNotFound",
]
