"""
Sitebuilder Kernel — Element Kinds and Capability Gate

Every element type maps to an ElementKind: its palette category, whether it
can hold children (and act as a drop zone), the entitlement tier needed to
insert it, and the defaults a freshly dropped element starts with.

The vocabulary is open. Types missing from the registry resolve to a free,
non-container kind so documents with unknown types still load and edit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sitebuilder.kernel.types import TIER_RANK, TIERS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementKind:
    name: str
    category: str
    container: bool = False
    tier: str = "free"
    default_content: str = ""
    default_props: dict[str, Any] = field(default_factory=dict)


_LINKS = [
    {"text": "Home", "url": "#"},
    {"text": "About", "url": "#"},
    {"text": "Services", "url": "#"},
    {"text": "Contact", "url": "#"},
]


def _kind(name: str, category: str, **kwargs: Any) -> ElementKind:
    return ElementKind(name=name, category=category, **kwargs)


ELEMENT_KINDS: dict[str, ElementKind] = {
    k.name: k
    for k in [
        # Layout
        _kind("header", "layout", default_content="Website Header"),
        _kind("hero", "layout", container=True, default_content="Welcome to My Website"),
        _kind("container", "layout", container=True),
        _kind("section", "layout", container=True, default_props={"padding": "medium"}),
        _kind("grid", "layout", container=True, default_props={"columns": 3, "gap": "medium"}),
        _kind("flex", "layout", container=True, default_props={"direction": "row", "gap": "medium"}),
        _kind("spacer", "layout", default_props={"height": "md"}),
        _kind("divider", "layout"),
        # Content
        _kind("text", "content", default_content="Add your content here"),
        _kind("heading", "content", default_content="Heading", default_props={"level": "h2"}),
        _kind("image", "content", default_props={"src": "", "alt": "Image description"}),
        _kind("button", "content", default_content="Click Me", default_props={"variant": "primary"}),
        _kind("list", "content", default_props={"items": []}),
        _kind("icon", "content", default_props={"name": "star"}),
        # Interactive
        _kind("form", "interactive", container=True),
        _kind("input", "interactive"),
        _kind("textarea", "interactive"),
        _kind("checkbox", "interactive"),
        _kind("select", "interactive", default_props={"options": []}),
        # Complex
        _kind(
            "feature",
            "complex",
            default_content="Feature Title",
            default_props={"description": "Feature description goes here", "icon": "star"},
        ),
        _kind(
            "testimonial",
            "complex",
            default_content="This is an amazing product!",
            default_props={"author": "John Doe", "role": "Customer"},
        ),
        _kind("contact", "complex", default_content="Contact Us"),
        _kind("pricing", "complex", default_props={"plans": []}),
        _kind("cta", "complex"),
        _kind("card", "complex", container=True),
        _kind("faq", "complex", default_props={"items": []}),
        _kind("productsList", "complex", tier="premium"),
        # Media
        _kind("video", "media", default_props={"src": ""}),
        _kind("audio", "media", default_props={"src": ""}),
        _kind("carousel", "media", tier="premium", default_props={"images": []}),
        _kind("gallery", "media", default_props={"images": []}),
        # Navigation
        _kind("navbar", "navigation", default_props={"links": _LINKS, "variant": "default"}),
        _kind("menu", "navigation"),
        _kind("footer", "navigation", default_props={"links": _LINKS, "variant": "dark"}),
        _kind("breadcrumbs", "navigation"),
        # Animation
        _kind("fadeInElement", "animation", tier="premium"),
        _kind("slideInElement", "animation", tier="premium"),
        _kind("scaleInElement", "animation", tier="premium"),
        _kind("scrollReveal", "animation", tier="enterprise"),
        _kind("particlesBackground", "animation", container=True, tier="enterprise"),
    ]
}

# Plan names as sold, mapped onto entitlement tiers.
PLAN_TIERS: dict[str, str] = {
    "Basic": "free",
    "Professional": "premium",
    "Enterprise": "enterprise",
}


def get_kind(element_type: str) -> ElementKind:
    """Registered kind for a type; unknown types get a free, non-container kind."""
    kind = ELEMENT_KINDS.get(element_type)
    if kind is None:
        return ElementKind(name=element_type, category="unknown")
    return kind


def is_container(element_type: str) -> bool:
    """True if elements of this type can hold children and accept drops."""
    return get_kind(element_type).container


def required_tier(element_type: str, props: dict[str, Any] | None = None) -> str:
    """
    Minimum tier needed to insert an element.

    An `animationType` prop of "premium" or "enterprise" raises the requirement
    above the kind's own tier.
    """
    tier = get_kind(element_type).tier
    animation_tier = (props or {}).get("animationType")
    if animation_tier in TIER_RANK and TIER_RANK[animation_tier] > TIER_RANK[tier]:
        tier = animation_tier
    return tier


def is_allowed(element_type: str, tier: str, props: dict[str, Any] | None = None) -> bool:
    """
    Capability gate.

    enterprise-gated types need enterprise; premium-gated types need premium or
    enterprise; everything else is unconditional.
    """
    if tier not in TIER_RANK:
        logger.warning("capabilities: unknown tier %r, treating as free", tier)
        tier = "free"
    return TIER_RANK[tier] >= TIER_RANK[required_tier(element_type, props)]


def tier_from_plan(plan_name: str | None) -> str:
    """Entitlement tier for a plan name; no plan or an unknown plan is free."""
    if plan_name is None:
        return "free"
    tier = PLAN_TIERS.get(plan_name)
    if tier is None:
        if plan_name.lower() in TIERS:
            return plan_name.lower()
        logger.info("capabilities: plan %r not mapped, using free tier", plan_name)
        return "free"
    return tier
