"""
Sitebuilder Drop — resolution

resolve_drop is pure: given a tree and a pointer release it returns the plan
(insert / reorder / transfer) or None when the drop should be ignored.

Layout used throughout: three stacked 100px boxes in the page canvas,
A at y=0..100, B at y=100..200, C at y=200..300.
"""

import pytest

from sitebuilder.kernel.drop import DropEvent, Rect, RenderedElement, classify, hit_test, resolve_drop
from sitebuilder.kernel.types import Element


def el(element_id, element_type="text", children=None):
    return Element(id=element_id, type=element_type, children=children or [])


def boxes(*element_ids, top=0.0):
    return [
        RenderedElement(element_id, Rect(left=0, top=top + i * 100, width=400, height=100))
        for i, element_id in enumerate(element_ids)
    ]


PALETTE_TEXT = {"type": "text", "content": "Dropped"}


@pytest.fixture
def abc():
    return [el("A"), el("B"), el("C")]


@pytest.fixture
def nested():
    return [
        el("box", "container", children=[el("x"), el("y")]),
        el("loose"),
        el("pic", "image"),
    ]


# ============================================================================
# Geometry
# ============================================================================


class TestGeometry:
    def test_classify_halves(self):
        rect = Rect(left=0, top=100, width=10, height=100)
        assert classify(rect, 120) == "before"
        assert classify(rect, 180) == "after"

    def test_hit_test_ignores_elements_outside_zone(self, abc):
        rendered = boxes("A", "B", "C") + [RenderedElement("other", Rect(0, 0, 400, 300))]
        assert hit_test(abc, rendered, 50, 150).element_id == "B"

    def test_hit_test_overlap_prefers_closest_midpoint(self, abc):
        rendered = [
            RenderedElement("A", Rect(0, 0, 400, 300)),
            RenderedElement("B", Rect(0, 200, 400, 60)),
        ]
        assert hit_test(abc, rendered, 50, 235).element_id == "B"

    def test_hit_test_miss(self, abc):
        assert hit_test(abc, boxes("A", "B", "C"), 50, 900) is None


# ============================================================================
# Palette drops
# ============================================================================


class TestResolveInsert:
    def test_upper_half_inserts_before(self, abc, id_factory):
        plan = resolve_drop(abc, DropEvent(PALETTE_TEXT, None, 50, 120, boxes("A", "B", "C")), id_factory)
        assert plan.action == "insert"
        assert plan.placement == "before"
        assert plan.hovered_id == "B"
        assert plan.index == 1

    def test_lower_half_inserts_after(self, abc, id_factory):
        plan = resolve_drop(abc, DropEvent(PALETTE_TEXT, None, 50, 180, boxes("A", "B", "C")), id_factory)
        assert plan.placement == "after"
        assert plan.index == 2

    def test_empty_space_appends(self, abc, id_factory):
        plan = resolve_drop(abc, DropEvent(PALETTE_TEXT, None, 50, 900, boxes("A", "B", "C")), id_factory)
        assert plan.placement == "append"
        assert plan.index == 3

    def test_new_element_gets_id_and_defaults(self, abc, id_factory):
        event = DropEvent({"type": "heading", "props": {"color": "red"}}, None, 50, 900, [])
        plan = resolve_drop(abc, event, id_factory)
        assert plan.element.id == "n1"
        assert plan.element.content == "Heading"
        assert plan.element.props == {"level": "h2", "color": "red"}

    def test_payload_props_override_defaults(self, abc, id_factory):
        event = DropEvent({"type": "heading", "props": {"level": "h1"}}, None, 50, 900, [])
        assert resolve_drop(abc, event, id_factory).element.props == {"level": "h1"}

    def test_drop_into_container(self, nested, id_factory):
        event = DropEvent(PALETTE_TEXT, "box", 50, 130, boxes("x", "y", top=100))
        plan = resolve_drop(nested, event, id_factory)
        assert plan.zone_id == "box"
        assert plan.index == 0

    def test_non_container_zone_is_ignored(self, nested, id_factory):
        assert resolve_drop(nested, DropEvent(PALETTE_TEXT, "pic", 0, 0, []), id_factory) is None

    def test_missing_zone_is_ignored(self, nested, id_factory):
        assert resolve_drop(nested, DropEvent(PALETTE_TEXT, "ghost", 0, 0, []), id_factory) is None

    def test_malformed_payload_is_ignored(self, abc, id_factory):
        assert resolve_drop(abc, DropEvent("{oops", None, 0, 0, []), id_factory) is None

    def test_undecodable_bytes_payload_is_ignored(self, abc, id_factory):
        assert resolve_drop(abc, DropEvent(b'{"type": "\xff"}', None, 0, 0, []), id_factory) is None


# ============================================================================
# Canvas drops
# ============================================================================


class TestResolveExisting:
    def test_same_scope_forward_shifts_left(self, abc):
        payload = {"id": "A", "sourceIndex": 0, "parentId": None}
        plan = resolve_drop(abc, DropEvent(payload, None, 50, 280, boxes("A", "B", "C")))
        assert plan.action == "reorder"
        assert plan.source_index == 0
        assert plan.index == 2

    def test_same_scope_backward(self, abc):
        payload = {"id": "C", "sourceIndex": 2}
        plan = resolve_drop(abc, DropEvent(payload, None, 50, 20, boxes("A", "B", "C")))
        assert plan.action == "reorder"
        assert (plan.source_index, plan.index) == (2, 0)

    def test_drop_on_own_slot_is_ignored(self, abc):
        payload = {"id": "A", "sourceIndex": 0}
        assert resolve_drop(abc, DropEvent(payload, None, 50, 120, boxes("A", "B", "C"))) is None

    def test_stale_source_index_uses_tree(self, abc):
        payload = {"id": "B", "sourceIndex": 7, "parentId": "somewhere"}
        plan = resolve_drop(abc, DropEvent(payload, None, 50, 280, boxes("A", "B", "C")))
        assert (plan.source_index, plan.index) == (1, 2)

    def test_cross_scope_is_a_transfer(self, nested):
        payload = {"id": "loose", "sourceIndex": 1}
        plan = resolve_drop(nested, DropEvent(payload, "box", 50, 180, boxes("x", "y", top=100)))
        assert plan.action == "transfer"
        assert plan.element_id == "loose"
        assert plan.zone_id == "box"
        assert plan.index == 1

    def test_out_of_container_to_root(self, nested):
        payload = {"id": "x", "parentId": "box", "sourceIndex": 0}
        plan = resolve_drop(nested, DropEvent(payload, None, 50, 900, []))
        assert plan.action == "transfer"
        assert plan.zone_id is None
        assert plan.index == 3

    def test_into_own_subtree_is_ignored(self):
        tree = [el("outer", "section", children=[el("inner", "container")])]
        payload = {"id": "outer", "sourceIndex": 0}
        assert resolve_drop(tree, DropEvent(payload, "inner", 0, 0, [])) is None

    def test_unknown_dragged_element_is_ignored(self, abc):
        assert resolve_drop(abc, DropEvent({"id": "ghost"}, None, 0, 0, [])) is None
