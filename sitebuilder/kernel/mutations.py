"""
Sitebuilder Kernel — Tree Mutation Engine

Pure functions: (elements, args) → MutationResult

Each function returns a new tree; the input list and its nodes are never
modified (deep copy on mutation), so a tree handed to a renderer stays a
consistent snapshot. Expected no-ops come back with applied=False and a
"CODE: detail" reason. Entitlement rejections raise ElementNotPermitted and
duplicate ids raise DuplicateElementId; in both cases nothing is inserted.

Reason codes:
  ELEMENT_NOT_FOUND, CONTAINER_NOT_FOUND, SCOPE_NOT_FOUND,
  INDEX_OUT_OF_RANGE, CYCLE, NO_CHANGE
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from sitebuilder.kernel.capabilities import is_allowed, required_tier
from sitebuilder.kernel.errors import DuplicateElementId, ElementNotPermitted
from sitebuilder.kernel.structure import is_footer, is_header
from sitebuilder.kernel.tree import (
    children_of,
    clone_element,
    collect_ids,
    find_duplicate_ids,
    find_element_by_id,
    is_descendant,
    iter_elements,
    locate_element,
)
from sitebuilder.kernel.types import BREAKPOINTS, Element, MutationResult, ResponsiveOverride, new_element_id

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(elements: list[Element], reason: str, level: int = logging.WARNING) -> MutationResult:
    logger.log(level, "mutations: %s", reason)
    return MutationResult(elements=elements, applied=False, reason=reason)


def _ok(elements: list[Element], element_id: str | None = None) -> MutationResult:
    return MutationResult(elements=elements, applied=True, element_id=element_id)


def _clamp(position: int, length: int) -> int:
    return max(0, min(position, length))


def _check_position(position: Any) -> None:
    if position is not None and (isinstance(position, bool) or not isinstance(position, int)):
        raise TypeError(f"position must be an int or None, got {type(position).__name__}")


def _check_allowed(element: Element, tier: str) -> None:
    """Gate every node of the subtree being inserted."""
    for node in iter_elements([element]):
        if not is_allowed(node.type, tier, node.props):
            raise ElementNotPermitted(node.type, tier, required_tier(node.type, node.props))


def _check_unique(elements: list[Element], incoming: Element) -> None:
    incoming_ids = collect_ids([incoming])
    clash = set(collect_ids(elements)) & set(incoming_ids)
    clash.update(find_duplicate_ids([incoming]))
    if clash:
        raise DuplicateElementId(sorted(clash))


def _root_insertion_index(elements: list[Element], element: Element) -> int:
    """
    Where a root-level element goes when no position is given: headers first,
    footers last, anything else before the first footer.
    """
    if is_header(element):
        return 0
    if is_footer(element):
        return len(elements)
    for index, existing in enumerate(elements):
        if is_footer(existing):
            return index
    return len(elements)


# ---------------------------------------------------------------------------
# Insert
# ---------------------------------------------------------------------------


def add_element(
    elements: list[Element],
    element: Element,
    position: int | str | None = None,
    container_id: str | None = None,
    tier: str = "free",
) -> MutationResult:
    """
    Insert a new element.

    - container_id given: inside that node at `position`, or appended.
    - container_id absent, int position: into the root list at that index.
    - container_id absent, str position: appended to the node with that id
      (older callers passed the parent id in the position slot).
    - neither: root list, headers first, footers last, content before footer.
      A header or footer added this way replaces the existing root one.
    """
    if isinstance(position, str) and container_id is None:
        container_id, position = position, None
    _check_position(position)
    _check_allowed(element, tier)
    _check_unique(elements, element)

    snap = copy.deepcopy(elements)
    new = copy.deepcopy(element)

    if container_id is None:
        if position is None:
            if is_header(new):
                snap = [e for e in snap if not is_header(e)]
            elif is_footer(new):
                snap = [e for e in snap if not is_footer(e)]
            index = _root_insertion_index(snap, new)
        else:
            index = _clamp(position, len(snap))
        snap.insert(index, new)
        return _ok(snap, new.id)

    parent = find_element_by_id(snap, container_id)
    if parent is None:
        return _reject(elements, f"CONTAINER_NOT_FOUND: '{container_id}' does not exist")
    index = len(parent.children) if position is None else _clamp(position, len(parent.children))
    parent.children.insert(index, new)
    return _ok(snap, new.id)


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

_UPDATABLE = {"type", "content", "props", "children", "responsiveSettings", "responsive_settings"}


def _coerce_children(value: Any) -> list[Element]:
    if not isinstance(value, list):
        raise TypeError("children must be a list")
    return [copy.deepcopy(c) if isinstance(c, Element) else Element.from_dict(c) for c in value]


def _coerce_responsive(value: Any) -> dict[str, ResponsiveOverride]:
    if not isinstance(value, dict):
        raise TypeError("responsiveSettings must be a mapping of breakpoint to override")
    result: dict[str, ResponsiveOverride] = {}
    for bp, override in value.items():
        if bp not in BREAKPOINTS:
            raise ValueError(f"unknown breakpoint: {bp!r}")
        if isinstance(override, ResponsiveOverride):
            result[bp] = copy.deepcopy(override)
        else:
            result[bp] = ResponsiveOverride.from_dict(override)
    return result


def update_element(elements: list[Element], element_id: str, updates: dict[str, Any]) -> MutationResult:
    """
    Shallow merge of top-level fields onto the element. `props` is replaced
    wholesale. `children` is only touched when present in updates. The id
    cannot be changed.
    """
    updates = dict(updates)
    if "id" in updates:
        if updates["id"] != element_id:
            logger.warning("mutations: ignoring id change %r -> %r", element_id, updates["id"])
        del updates["id"]
    unknown = set(updates) - _UPDATABLE
    if unknown:
        raise ValueError(f"cannot update element fields: {sorted(unknown)}")

    snap = copy.deepcopy(elements)
    node = find_element_by_id(snap, element_id)
    if node is None:
        return _reject(elements, f"ELEMENT_NOT_FOUND: '{element_id}' does not exist")

    if "type" in updates:
        node.type = str(updates["type"])
    if "content" in updates:
        content = updates["content"]
        node.content = None if content is None else str(content)
    if "props" in updates:
        props = updates["props"] or {}
        if not isinstance(props, dict):
            raise TypeError("props must be a mapping")
        node.props = copy.deepcopy(props)
    if "children" in updates:
        node.children = _coerce_children(updates["children"])
        duplicates = find_duplicate_ids(snap)
        if duplicates:
            raise DuplicateElementId(duplicates)
    for key in ("responsiveSettings", "responsive_settings"):
        if key in updates:
            node.responsive_settings = _coerce_responsive(updates[key] or {})

    return _ok(snap, element_id)


def delete_element(elements: list[Element], element_id: str) -> MutationResult:
    """Remove the element (and its subtree). Deleting an absent id is a no-op."""
    located = locate_element(elements, element_id)
    if located is None:
        return _reject(elements, f"ELEMENT_NOT_FOUND: '{element_id}' does not exist", logging.INFO)

    snap = copy.deepcopy(elements)
    scope_id, index = located
    children_of(snap, scope_id).pop(index)
    return _ok(snap, element_id)


# ---------------------------------------------------------------------------
# Reorder
# ---------------------------------------------------------------------------


def move_element(
    elements: list[Element],
    source_index: int,
    dest_index: int,
    scope_id: str | None = None,
) -> MutationResult:
    """
    Positional reorder inside one children list (the root list when scope_id
    is None): remove at source_index, reinsert at dest_index.
    """
    snap = copy.deepcopy(elements)
    children = children_of(snap, scope_id)
    if children is None:
        return _reject(elements, f"SCOPE_NOT_FOUND: '{scope_id}' does not exist")

    size = len(children)
    if not (0 <= source_index < size and 0 <= dest_index < size):
        return _reject(
            elements,
            f"INDEX_OUT_OF_RANGE: move {source_index} -> {dest_index} in scope of {size}",
        )
    if source_index == dest_index:
        return _reject(elements, f"NO_CHANGE: source and destination are both {source_index}", logging.DEBUG)

    moved = children.pop(source_index)
    children.insert(dest_index, moved)
    return _ok(snap, moved.id)


def _move_by(elements: list[Element], element_id: str, step: int) -> MutationResult:
    located = locate_element(elements, element_id)
    if located is None:
        return _reject(elements, f"ELEMENT_NOT_FOUND: '{element_id}' does not exist")
    scope_id, index = located
    size = len(children_of(elements, scope_id))
    target = index + step
    if not 0 <= target < size:
        return _reject(elements, f"NO_CHANGE: '{element_id}' is already at the edge", logging.DEBUG)
    return move_element(elements, index, target, scope_id)


def move_element_up(elements: list[Element], element_id: str) -> MutationResult:
    return _move_by(elements, element_id, -1)


def move_element_down(elements: list[Element], element_id: str) -> MutationResult:
    return _move_by(elements, element_id, 1)


def transfer_element(
    elements: list[Element],
    element_id: str,
    container_id: str | None,
    index: int | None = None,
    tier: str = "free",
) -> MutationResult:
    """
    Move an element (same id, full subtree) into another scope as one
    transaction. `index` is a position in the destination list as it looks
    before the move; None appends. Moving a node into itself or one of its
    descendants is rejected.
    """
    _check_position(index)
    located = locate_element(elements, element_id)
    if located is None:
        return _reject(elements, f"ELEMENT_NOT_FOUND: '{element_id}' does not exist")
    node = find_element_by_id(elements, element_id)
    _check_allowed(node, tier)

    if container_id is not None:
        if container_id == element_id or is_descendant(node, container_id):
            return _reject(elements, f"CYCLE: cannot move '{element_id}' into '{container_id}'")
        if find_element_by_id(elements, container_id) is None:
            return _reject(elements, f"CONTAINER_NOT_FOUND: '{container_id}' does not exist")

    source_scope, source_index = located
    snap = copy.deepcopy(elements)
    destination = children_of(snap, container_id)
    target = len(destination) if index is None else _clamp(index, len(destination))
    if source_scope == container_id:
        if target > source_index:
            target -= 1
        if target == source_index:
            return _reject(elements, f"NO_CHANGE: '{element_id}' is already there", logging.DEBUG)

    moved = children_of(snap, source_scope).pop(source_index)
    destination.insert(min(target, len(destination)), moved)
    return _ok(snap, element_id)


# ---------------------------------------------------------------------------
# Duplicate
# ---------------------------------------------------------------------------


def duplicate_element(
    elements: list[Element],
    element_id: str,
    id_factory: Callable[[], str] = new_element_id,
    tier: str = "free",
) -> MutationResult:
    """Deep clone with fresh ids on every node, inserted right after the original."""
    located = locate_element(elements, element_id)
    if located is None:
        return _reject(elements, f"ELEMENT_NOT_FOUND: '{element_id}' does not exist")

    clone = clone_element(find_element_by_id(elements, element_id), id_factory)
    _check_allowed(clone, tier)
    _check_unique(elements, clone)

    scope_id, index = located
    snap = copy.deepcopy(elements)
    children_of(snap, scope_id).insert(index + 1, clone)
    return _ok(snap, clone.id)


# ---------------------------------------------------------------------------
# Responsive
# ---------------------------------------------------------------------------


def update_element_responsive(
    elements: list[Element],
    element_id: str,
    breakpoint: str,
    override: ResponsiveOverride | dict[str, Any] | None,
) -> MutationResult:
    """
    Replace the whole override record for one breakpoint. Keys missing from the
    new record are gone afterwards; None or an empty record removes it.
    """
    if breakpoint not in BREAKPOINTS:
        raise ValueError(f"unknown breakpoint: {breakpoint!r}")

    snap = copy.deepcopy(elements)
    node = find_element_by_id(snap, element_id)
    if node is None:
        return _reject(elements, f"ELEMENT_NOT_FOUND: '{element_id}' does not exist")

    if isinstance(override, ResponsiveOverride):
        override = copy.deepcopy(override)
    elif override is not None:
        override = ResponsiveOverride.from_dict(override)

    if override is None or override.is_empty():
        node.responsive_settings.pop(breakpoint, None)
    else:
        node.responsive_settings[breakpoint] = override
    return _ok(snap, element_id)
