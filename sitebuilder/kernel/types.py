"""
Sitebuilder Kernel — Shared Types

Data classes used across the mutation engine, drop resolver, store and
storage codec. These are the contracts that bind the kernel together.

Serialized form (the persisted document) uses the editor's camelCase keys:

    [{"id", "type", "content"?, "props"?, "children"?, "responsiveSettings"?}]

Python attributes are snake_case; to_dict/from_dict translate.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Literal

from sitebuilder.kernel.errors import DocumentParseError

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

Breakpoint = Literal["mobile", "tablet", "desktop"]
Tier = Literal["free", "premium", "enterprise"]

BREAKPOINTS: tuple[str, ...] = ("mobile", "tablet", "desktop")
TIERS: tuple[str, ...] = ("free", "premium", "enterprise")

# Rank used to compare entitlements; higher includes everything below it.
TIER_RANK: dict[str, int] = {"free": 0, "premium": 1, "enterprise": 2}


def new_element_id() -> str:
    """Fresh globally unique element id."""
    return str(uuid.uuid4())


def _or_empty(value: Any, empty: Any) -> Any:
    return empty if value is None else value


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


@dataclass
class ResponsiveOverride:
    """
    Sparse per-breakpoint override. Unset fields fall back to the base element.
    Stored as a complete record: a new override replaces the old one.
    """

    hidden: bool | None = None
    order: int | None = None
    class_name: str | None = None
    props: dict[str, Any] | None = None

    def is_empty(self) -> bool:
        return self.hidden is None and self.order is None and self.class_name is None and not self.props

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.hidden is not None:
            d["hidden"] = self.hidden
        if self.order is not None:
            d["order"] = self.order
        if self.class_name is not None:
            d["className"] = self.class_name
        if self.props is not None:
            d["props"] = dict(self.props)
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ResponsiveOverride:
        if not isinstance(d, dict):
            raise DocumentParseError(f"responsive override must be an object, got {type(d).__name__}")
        props = d.get("props")
        if props is not None and not isinstance(props, dict):
            raise DocumentParseError("responsive override 'props' must be an object")
        hidden = d.get("hidden")
        if hidden is not None and not isinstance(hidden, bool):
            raise DocumentParseError(f"responsive override 'hidden' must be a boolean, got {hidden!r}")
        order = d.get("order")
        if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
            raise DocumentParseError(f"responsive override 'order' must be an integer, got {order!r}")
        class_name = d.get("className", d.get("class_name"))
        if class_name is not None and not isinstance(class_name, str):
            raise DocumentParseError(f"responsive override 'className' must be a string, got {class_name!r}")
        return cls(
            hidden=hidden,
            order=order,
            class_name=class_name,
            props=dict(props) if props is not None else None,
        )


@dataclass
class Element:
    """A node in the page tree."""

    id: str
    type: str
    content: str | None = None
    props: dict[str, Any] = field(default_factory=dict)
    children: list[Element] = field(default_factory=list)
    responsive_settings: dict[str, ResponsiveOverride] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id, "type": self.type}
        if self.content is not None:
            d["content"] = self.content
        d["props"] = dict(self.props)
        if self.children:
            d["children"] = [child.to_dict() for child in self.children]
        if self.responsive_settings:
            d["responsiveSettings"] = {bp: o.to_dict() for bp, o in self.responsive_settings.items()}
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Element:
        if not isinstance(d, dict):
            raise DocumentParseError(f"element must be an object, got {type(d).__name__}")
        element_id = d.get("id")
        element_type = d.get("type")
        if not isinstance(element_id, str) or not element_id:
            raise DocumentParseError(f"element is missing a string 'id': {d!r:.120}")
        if not isinstance(element_type, str) or not element_type:
            raise DocumentParseError(f"element '{element_id}' is missing a string 'type'")

        # null and absent mean empty
        props = _or_empty(d.get("props"), {})
        if not isinstance(props, dict):
            raise DocumentParseError(f"element '{element_id}': 'props' must be an object")
        children = _or_empty(d.get("children"), [])
        if not isinstance(children, list):
            raise DocumentParseError(f"element '{element_id}': 'children' must be a list")
        responsive = _or_empty(d.get("responsiveSettings"), {})
        if not isinstance(responsive, dict):
            raise DocumentParseError(f"element '{element_id}': 'responsiveSettings' must be an object")
        unknown = set(responsive) - set(BREAKPOINTS)
        if unknown:
            raise DocumentParseError(f"element '{element_id}': unknown breakpoints {sorted(unknown)}")

        content = d.get("content")
        return cls(
            id=element_id,
            type=element_type,
            content=None if content is None else str(content),
            props=dict(props),
            children=[cls.from_dict(child) for child in children],
            responsive_settings={bp: ResponsiveOverride.from_dict(o) for bp, o in responsive.items()},
        )


# ---------------------------------------------------------------------------
# Page settings and site registry
# ---------------------------------------------------------------------------

_PAGE_SETTINGS_KEYS = {"title", "description", "meta", "isPublic", "passwordProtected", "password"}


@dataclass
class PageSettings:
    """
    Page-level settings: title, description, SEO meta bag and visibility.
    Unknown keys are kept in `extra` so they survive a round trip.
    """

    title: str = ""
    description: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    is_public: bool = True
    password_protected: bool = False
    password: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = dict(self.extra)
        d["title"] = self.title
        if self.description is not None:
            d["description"] = self.description
        d["meta"] = dict(self.meta)
        d["isPublic"] = self.is_public
        d["passwordProtected"] = self.password_protected
        if self.password is not None:
            d["password"] = self.password
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PageSettings:
        if not isinstance(d, dict):
            raise DocumentParseError(f"page settings must be an object, got {type(d).__name__}")
        meta = d.get("meta") or {}
        if not isinstance(meta, dict):
            raise DocumentParseError("page settings 'meta' must be an object")
        return cls(
            title=d.get("title") or "",
            description=d.get("description"),
            meta=dict(meta),
            is_public=bool(d.get("isPublic", True)),
            password_protected=bool(d.get("passwordProtected", False)),
            password=d.get("password"),
            extra={k: v for k, v in d.items() if k not in _PAGE_SETTINGS_KEYS},
        )

    def merged(self, updates: dict[str, Any]) -> PageSettings:
        """Shallow merge of serialized-form keys; `meta` is replaced, not merged."""
        return PageSettings.from_dict({**self.to_dict(), **updates})


@dataclass
class PageEntry:
    """One page in a multi-page site."""

    id: str
    title: str
    path: str
    is_home: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "path": self.path, "isHome": self.is_home}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PageEntry:
        if not isinstance(d, dict) or not isinstance(d.get("id"), str):
            raise DocumentParseError(f"page entry must be an object with a string 'id': {d!r:.120}")
        # Older documents used slug/isHomePage
        return cls(
            id=d["id"],
            title=d.get("title") or "",
            path=d.get("path", d.get("slug", "/")),
            is_home=bool(d.get("isHome", d.get("isHomePage", False))),
        )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class MutationResult:
    """
    Result of applying one mutation to a tree.
    Expected no-ops (unknown id, bad index) come back with applied=False and
    a "CODE: detail" reason; the input tree is returned unchanged.
    """

    elements: list[Element]
    applied: bool
    reason: str | None = None
    element_id: str | None = None  # id of the inserted/duplicated element
