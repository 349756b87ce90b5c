"""
Sitebuilder Kernel — Responsive Overrides

Renderers never read element.props directly; they ask for the effective
props at the active breakpoint. Overrides are shallow: a key in the override
replaces the base value wholesale, nested objects included.
"""

from __future__ import annotations

from typing import Any

from sitebuilder.kernel.types import BREAKPOINTS, Element, ResponsiveOverride


def _override(element: Element, breakpoint: str) -> ResponsiveOverride | None:
    if breakpoint not in BREAKPOINTS:
        raise ValueError(f"unknown breakpoint: {breakpoint!r}")
    return element.responsive_settings.get(breakpoint)


def effective_props(element: Element, breakpoint: str) -> dict[str, Any]:
    """Base props with the breakpoint's override props merged on top."""
    merged = dict(element.props)
    override = _override(element, breakpoint)
    if override is not None and override.props:
        merged.update(override.props)
    return merged


def is_hidden(element: Element, breakpoint: str) -> bool:
    override = _override(element, breakpoint)
    return bool(override is not None and override.hidden)


def effective_class_name(element: Element, breakpoint: str) -> str | None:
    override = _override(element, breakpoint)
    return override.class_name if override is not None else None


def effective_order(element: Element, breakpoint: str) -> int | None:
    override = _override(element, breakpoint)
    return override.order if override is not None else None


def visible_children(element: Element, breakpoint: str) -> list[Element]:
    """
    Children as a renderer should lay them out at a breakpoint: hidden ones
    dropped, then stably sorted by their override order (unset counts as 0).
    """
    shown = [child for child in element.children if not is_hidden(child, breakpoint)]
    return sorted(shown, key=lambda child: effective_order(child, breakpoint) or 0)
