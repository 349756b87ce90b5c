"""
Sitebuilder Kernel — Page Structure Rules

Root-level ordering: one header-class element first, one footer-class element
last, content in between. Quick-add uses get_content_insertion_index so generic
content never lands above the header or below the footer. ensure_elements_order
is applied explicitly (template or page load), never on every mutation.
"""

from __future__ import annotations

import copy
from collections.abc import Callable

from sitebuilder.kernel.capabilities import get_kind
from sitebuilder.kernel.types import Element, new_element_id

HEADER_TYPES: frozenset[str] = frozenset({"navbar", "header"})
FOOTER_TYPES: frozenset[str] = frozenset({"footer"})


def is_header(element: Element) -> bool:
    return element.type in HEADER_TYPES


def is_footer(element: Element) -> bool:
    return element.type in FOOTER_TYPES


def has_required_structure(elements: list[Element]) -> tuple[bool, bool]:
    """(has_header, has_footer) for a root list."""
    return any(is_header(e) for e in elements), any(is_footer(e) for e in elements)


def get_content_insertion_index(elements: list[Element]) -> int:
    """
    Index for generic content: right after the header if there is one,
    otherwise right before the footer, otherwise the end.
    """
    for index, element in enumerate(elements):
        if is_header(element):
            return index + 1
    for index, element in enumerate(elements):
        if is_footer(element):
            return index
    return len(elements)


def ensure_elements_order(elements: list[Element]) -> list[Element]:
    """
    Normalized root list: the first header-class element, then every other
    non-chrome element in its original order, then the first footer-class
    element. Extra headers and footers are dropped.
    """
    header = next((e for e in elements if is_header(e)), None)
    footer = next((e for e in elements if is_footer(e)), None)
    content = [e for e in elements if not is_header(e) and not is_footer(e)]

    ordered: list[Element] = []
    if header is not None:
        ordered.append(header)
    ordered.extend(content)
    if footer is not None:
        ordered.append(footer)
    return ordered


def _chrome(element_type: str, site_name: str, id_factory: Callable[[], str]) -> Element:
    props = copy.deepcopy(get_kind(element_type).default_props)
    props["siteName"] = site_name
    return Element(id=id_factory(), type=element_type, content="", props=props)


def ensure_page_chrome(
    elements: list[Element],
    site_name: str,
    id_factory: Callable[[], str] = new_element_id,
) -> list[Element]:
    """
    Root list with a default navbar and footer added when missing, then
    normalized with ensure_elements_order. Used when loading a template.
    """
    has_header, has_footer = has_required_structure(elements)
    result = list(elements)
    if not has_header:
        result.insert(0, _chrome("navbar", site_name, id_factory))
    if not has_footer:
        result.append(_chrome("footer", site_name, id_factory))
    return ensure_elements_order(result)
