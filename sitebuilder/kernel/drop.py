"""
Sitebuilder Kernel — Drop-Target Resolver

Turns a pointer release over a drop zone into one tree mutation:

  1. hit-test the zone's rendered children against the pointer
  2. upper half of the hovered element → before it, lower half → after it,
     nothing hovered → append to the zone
  3. translate that into an index in the zone's children (the root list when
     the zone is the page canvas)
  4. dispatch on the payload:
       new element          → add_element at the index
       existing, same scope → move_element with the index shifted left by one
                              when the source sits before the destination
       existing, elsewhere  → transfer_element (one transaction)

Drops on a zone that is missing or cannot hold children are ignored. Malformed
payloads are logged and ignored. The tree, not the payload, is authoritative
for where a dragged element currently lives.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field, ValidationError

from sitebuilder.kernel.capabilities import get_kind, is_container
from sitebuilder.kernel.tree import find_element_by_id, is_descendant, locate_element
from sitebuilder.kernel.types import Element, new_element_id

if TYPE_CHECKING:
    from sitebuilder.kernel.store import ElementTreeStore

logger = logging.getLogger(__name__)

Placement = Literal["before", "after", "append"]

# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rect:
    """Bounding box in page coordinates (y grows downward)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def mid_y(self) -> float:
        return self.top + self.height / 2

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


@dataclass(frozen=True)
class RenderedElement:
    element_id: str
    rect: Rect


@dataclass
class DropEvent:
    """
    A pointer release. `zone_id` is the container the release happened in
    (None for the page canvas); `rendered` lists the boxes currently painted
    in that zone; `payload` is the drag data, raw JSON or already decoded.
    """

    payload: str | bytes | dict[str, Any]
    zone_id: str | None = None
    x: float = 0.0
    y: float = 0.0
    rendered: list[RenderedElement] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


class NewElementPayload(BaseModel):
    """Dragged from the palette: a type and optional content/props, no id."""

    model_config = {"extra": "forbid"}

    type: str = Field(min_length=1)
    content: str | None = None
    props: dict[str, Any] = Field(default_factory=dict)


class ExistingElementPayload(BaseModel):
    """Dragged from the canvas: the element id plus where the drag started."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    id: str = Field(min_length=1)
    type: str | None = None
    source_index: int | None = Field(default=None, alias="sourceIndex", ge=0)
    parent_id: str | None = Field(default=None, alias="parentId")


DropPayload = NewElementPayload | ExistingElementPayload


def parse_drop_payload(raw: str | bytes | dict[str, Any]) -> DropPayload | None:
    """Decode drag data. Returns None (and logs) when it is malformed."""
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("drop: payload is not valid JSON: %r", raw[:200])
            return None
    else:
        data = raw

    if not isinstance(data, dict):
        logger.warning("drop: payload must be an object, got %s", type(data).__name__)
        return None

    try:
        if data.get("id"):
            return ExistingElementPayload.model_validate(data)
        return NewElementPayload.model_validate({k: v for k, v in data.items() if k != "id"})
    except ValidationError as e:
        logger.warning("drop: rejected payload: %s", e.errors(include_url=False))
        return None


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass
class DropPlan:
    """The mutation a drop resolves to."""

    action: Literal["insert", "reorder", "transfer"]
    zone_id: str | None
    index: int
    placement: Placement
    hovered_id: str | None = None
    element: Element | None = None  # insert
    element_id: str | None = None  # reorder, transfer
    source_index: int | None = None  # reorder


def hit_test(
    zone_children: list[Element], rendered: list[RenderedElement], x: float, y: float
) -> RenderedElement | None:
    """
    The zone child under the pointer. When boxes overlap, the one whose
    vertical midpoint is closest to the pointer wins.
    """
    ids = {child.id for child in zone_children}
    under = [r for r in rendered if r.element_id in ids and r.rect.contains(x, y)]
    if not under:
        return None
    return min(under, key=lambda r: abs(r.rect.mid_y - y))


def classify(rect: Rect, y: float) -> Placement:
    return "before" if y < rect.mid_y else "after"


def _zone_children(elements: list[Element], zone_id: str | None) -> list[Element] | None:
    if zone_id is None:
        return elements
    zone = find_element_by_id(elements, zone_id)
    if zone is None:
        logger.debug("drop: zone '%s' does not exist", zone_id)
        return None
    if not is_container(zone.type):
        logger.debug("drop: zone '%s' (%s) cannot hold children", zone_id, zone.type)
        return None
    return zone.children


def _new_element(payload: NewElementPayload, id_factory: Callable[[], str]) -> Element:
    kind = get_kind(payload.type)
    props = copy.deepcopy(kind.default_props)
    props.update(payload.props)
    content = payload.content if payload.content is not None else kind.default_content
    return Element(id=id_factory(), type=payload.type, content=content, props=props)


def resolve_drop(
    elements: list[Element],
    event: DropEvent,
    id_factory: Callable[[], str] = new_element_id,
) -> DropPlan | None:
    """Pure: work out what a drop means without touching the tree."""
    payload = parse_drop_payload(event.payload)
    if payload is None:
        return None

    zone_children = _zone_children(elements, event.zone_id)
    if zone_children is None:
        return None

    hovered = hit_test(zone_children, event.rendered, event.x, event.y)
    if hovered is None:
        placement: Placement = "append"
        index = len(zone_children)
        hovered_id = None
    else:
        placement = classify(hovered.rect, event.y)
        hovered_id = hovered.element_id
        position = next(i for i, child in enumerate(zone_children) if child.id == hovered_id)
        index = position + (1 if placement == "after" else 0)

    if isinstance(payload, NewElementPayload):
        return DropPlan(
            action="insert",
            zone_id=event.zone_id,
            index=index,
            placement=placement,
            hovered_id=hovered_id,
            element=_new_element(payload, id_factory),
        )

    located = locate_element(elements, payload.id)
    if located is None:
        logger.warning("drop: dragged element '%s' is not in the tree", payload.id)
        return None
    source_scope, source_index = located
    if payload.parent_id != source_scope or (
        payload.source_index is not None and payload.source_index != source_index
    ):
        logger.debug(
            "drop: stale drag data for '%s' (payload %s[%s], tree %s[%s])",
            payload.id,
            payload.parent_id,
            payload.source_index,
            source_scope,
            source_index,
        )

    if source_scope == event.zone_id:
        dest = index - 1 if source_index < index else index
        if dest == source_index:
            logger.debug("drop: '%s' dropped onto its own position", payload.id)
            return None
        return DropPlan(
            action="reorder",
            zone_id=event.zone_id,
            index=dest,
            placement=placement,
            hovered_id=hovered_id,
            element_id=payload.id,
            source_index=source_index,
        )

    if event.zone_id is not None:
        node = find_element_by_id(elements, payload.id)
        if event.zone_id == payload.id or is_descendant(node, event.zone_id):
            logger.warning("drop: cannot move '%s' into its own subtree '%s'", payload.id, event.zone_id)
            return None

    return DropPlan(
        action="transfer",
        zone_id=event.zone_id,
        index=index,
        placement=placement,
        hovered_id=hovered_id,
        element_id=payload.id,
    )


def apply_drop_plan(store: ElementTreeStore, plan: DropPlan) -> bool:
    if plan.action == "insert":
        return store.add_element(plan.element, plan.index, plan.zone_id) is not None
    if plan.action == "reorder":
        return store.move_element(plan.source_index, plan.index, plan.zone_id)
    return store.transfer_element(plan.element_id, plan.zone_id, plan.index)


def handle_drop(store: ElementTreeStore, event: DropEvent) -> DropPlan | None:
    """
    Resolve a drop against the store's tree and apply it. Returns the applied
    plan, or None when the drop was ignored. ElementNotPermitted propagates.
    """
    plan = resolve_drop(store.elements, event, store.id_factory)
    if plan is None:
        return None
    if not apply_drop_plan(store, plan):
        return None
    return plan
