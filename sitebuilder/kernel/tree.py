"""
Sitebuilder Kernel — Tree Helpers

Recursive lookups over the nested element list. Ids are unique across the
whole tree, so the first match of a depth-first search is authoritative.
None of these helpers mutate their input.
"""

from __future__ import annotations

import copy
from collections import Counter
from collections.abc import Callable, Iterator

from sitebuilder.kernel.types import Element, new_element_id


def find_element_by_id(elements: list[Element], element_id: str) -> Element | None:
    """Depth-first search for an element anywhere in the tree."""
    for element in elements:
        if element.id == element_id:
            return element
        if element.children:
            found = find_element_by_id(element.children, element_id)
            if found is not None:
                return found
    return None


def locate_element(
    elements: list[Element], element_id: str, scope_id: str | None = None
) -> tuple[str | None, int] | None:
    """
    Return (scope_id, index) for an element: the id of the node whose children
    list holds it (None for the root list) and its position in that list.
    Root level is checked before any descendants.
    """
    for index, element in enumerate(elements):
        if element.id == element_id:
            return scope_id, index
    for element in elements:
        if element.children:
            found = locate_element(element.children, element_id, element.id)
            if found is not None:
                return found
    return None


def children_of(elements: list[Element], scope_id: str | None) -> list[Element] | None:
    """The live children list for a scope (the root list when scope_id is None)."""
    if scope_id is None:
        return elements
    node = find_element_by_id(elements, scope_id)
    if node is None:
        return None
    return node.children


def iter_elements(elements: list[Element]) -> Iterator[Element]:
    """Pre-order walk over every node."""
    for element in elements:
        yield element
        yield from iter_elements(element.children)


def collect_ids(elements: list[Element]) -> list[str]:
    return [e.id for e in iter_elements(elements)]


def count_elements(elements: list[Element]) -> int:
    return sum(1 for _ in iter_elements(elements))


def find_duplicate_ids(elements: list[Element]) -> list[str]:
    """Ids appearing more than once; empty for a well-formed tree."""
    counts = Counter(collect_ids(elements))
    return sorted(element_id for element_id, n in counts.items() if n > 1)


def is_descendant(element: Element, candidate_id: str) -> bool:
    """True if candidate_id is somewhere below element."""
    return find_element_by_id(element.children, candidate_id) is not None


def clone_element(element: Element, id_factory: Callable[[], str] = new_element_id) -> Element:
    """Deep copy of a subtree with a fresh id on every node."""
    clone = copy.deepcopy(element)
    for node in iter_elements([clone]):
        node.id = id_factory()
    return clone
