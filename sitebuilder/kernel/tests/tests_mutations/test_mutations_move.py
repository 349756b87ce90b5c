"""
Sitebuilder Mutations — move_element, move_element_up, move_element_down

Positional reorder inside one children list: remove at source, reinsert at
destination. Out-of-range indices and unknown scopes are no-ops.
"""

import pytest

from sitebuilder.kernel.mutations import move_element, move_element_down, move_element_up
from sitebuilder.kernel.tree import find_element_by_id
from sitebuilder.kernel.types import Element


def el(element_id, element_type="text", children=None):
    return Element(id=element_id, type=element_type, children=children or [])


def ids(elements):
    return [e.id for e in elements]


@pytest.fixture
def abc():
    return [el("A"), el("B"), el("C")]


@pytest.fixture
def nested():
    return [el("grid", "grid", children=[el("x"), el("y"), el("z")]), el("after")]


class TestMoveElement:
    def test_move_first_to_last(self, abc):
        r = move_element(abc, 0, 2)
        assert r.applied
        assert ids(r.elements) == ["B", "C", "A"]
        assert ids(abc) == ["A", "B", "C"]

    def test_move_last_to_first(self, abc):
        r = move_element(abc, 2, 0)
        assert ids(r.elements) == ["C", "A", "B"]

    @pytest.mark.parametrize("i,j", [(0, 2), (2, 0), (0, 1), (1, 2)])
    def test_move_back_restores_order(self, abc, i, j):
        there = move_element(abc, i, j)
        back = move_element(there.elements, j, i)
        assert ids(back.elements) == ["A", "B", "C"]

    def test_move_inside_scope(self, nested):
        r = move_element(nested, 2, 0, scope_id="grid")
        assert ids(find_element_by_id(r.elements, "grid").children) == ["z", "x", "y"]
        assert ids(r.elements) == ["grid", "after"]

    @pytest.mark.parametrize("i,j", [(3, 0), (0, 3), (-1, 0)])
    def test_out_of_range_is_a_no_op(self, abc, i, j):
        r = move_element(abc, i, j)
        assert not r.applied
        assert r.reason.startswith("INDEX_OUT_OF_RANGE")
        assert r.elements is abc

    def test_same_index_is_a_no_op(self, abc):
        r = move_element(abc, 1, 1)
        assert not r.applied
        assert r.reason.startswith("NO_CHANGE")

    def test_unknown_scope_is_a_no_op(self, abc):
        r = move_element(abc, 0, 1, scope_id="ghost")
        assert not r.applied
        assert r.reason.startswith("SCOPE_NOT_FOUND")


class TestMoveUpDown:
    def test_up(self, abc):
        r = move_element_up(abc, "B")
        assert ids(r.elements) == ["B", "A", "C"]

    def test_down(self, abc):
        r = move_element_down(abc, "B")
        assert ids(r.elements) == ["A", "C", "B"]

    def test_up_at_top_is_a_no_op(self, abc):
        assert not move_element_up(abc, "A").applied

    def test_down_at_bottom_is_a_no_op(self, abc):
        assert not move_element_down(abc, "C").applied

    def test_nested_down(self, nested):
        r = move_element_down(nested, "x")
        assert ids(find_element_by_id(r.elements, "grid").children) == ["y", "x", "z"]

    def test_unknown_element(self, abc):
        r = move_element_up(abc, "ghost")
        assert not r.applied
        assert r.reason.startswith("ELEMENT_NOT_FOUND")
