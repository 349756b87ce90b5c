"""
Sitebuilder Mutations — add_element

Verify insertion positions, root-level header/footer placement, container
targets and the entitlement gate. Every test also checks the input tree was
left untouched.
"""

import copy

import pytest

from sitebuilder.kernel.errors import DuplicateElementId, ElementNotPermitted
from sitebuilder.kernel.mutations import add_element
from sitebuilder.kernel.tree import count_elements, find_element_by_id
from sitebuilder.kernel.types import Element


def el(element_id, element_type="text", children=None, **props):
    return Element(id=element_id, type=element_type, props=props, children=children or [])


def ids(elements):
    return [e.id for e in elements]


@pytest.fixture
def abc():
    return [el("A"), el("B"), el("C")]


@pytest.fixture
def page():
    return [
        el("nav", "navbar"),
        el("body", "section", children=[el("t1"), el("t2")]),
        el("foot", "footer"),
    ]


# ============================================================================
# Root list
# ============================================================================


class TestAddAtRoot:
    def test_insert_at_index(self, abc):
        r = add_element(abc, el("D"), position=1)
        assert r.applied
        assert ids(r.elements) == ["A", "D", "B", "C"]
        assert r.element_id == "D"

    def test_input_tree_is_not_modified(self, abc):
        before = copy.deepcopy(abc)
        add_element(abc, el("D"), position=1)
        assert abc == before

    def test_grows_by_one_and_is_findable(self, page):
        r = add_element(page, el("new", "image"), container_id="body")
        assert count_elements(r.elements) == count_elements(page) + 1
        assert find_element_by_id(r.elements, "new").type == "image"

    def test_position_past_end_appends(self, abc):
        r = add_element(abc, el("D"), position=99)
        assert ids(r.elements) == ["A", "B", "C", "D"]

    def test_negative_position_clamps_to_start(self, abc):
        r = add_element(abc, el("D"), position=-3)
        assert ids(r.elements) == ["D", "A", "B", "C"]

    def test_no_position_goes_before_footer(self, page):
        r = add_element(page, el("D"))
        assert ids(r.elements) == ["nav", "body", "D", "foot"]

    def test_no_position_without_footer_appends(self, abc):
        r = add_element(abc, el("D"))
        assert ids(r.elements) == ["A", "B", "C", "D"]

    def test_header_goes_first(self, abc):
        r = add_element(abc, el("nav", "navbar"))
        assert ids(r.elements)[0] == "nav"

    def test_footer_goes_last(self, abc):
        r = add_element(abc, el("foot", "footer"))
        assert ids(r.elements) == ["A", "B", "C", "foot"]

    def test_second_footer_replaces_first(self, page):
        r = add_element(page, el("foot2", "footer"))
        assert ids(r.elements) == ["nav", "body", "foot2"]

    def test_second_header_replaces_first(self, page):
        r = add_element(page, el("nav2", "header"))
        assert ids(r.elements) == ["nav2", "body", "foot"]
        assert ids(page) == ["nav", "body", "foot"]

    def test_footer_at_explicit_position_is_kept_alongside(self, page):
        r = add_element(page, el("foot2", "footer"), position=1)
        assert ids(r.elements) == ["nav", "foot2", "body", "foot"]

    def test_bool_position_rejected(self, abc):
        with pytest.raises(TypeError):
            add_element(abc, el("D"), position=True)

    def test_float_position_rejected(self, abc):
        with pytest.raises(TypeError):
            add_element(abc, el("D"), position=1.5)


# ============================================================================
# Containers
# ============================================================================


class TestAddIntoContainer:
    def test_appends_to_container(self, page):
        r = add_element(page, el("t3"), container_id="body")
        assert ids(find_element_by_id(r.elements, "body").children) == ["t1", "t2", "t3"]

    def test_position_inside_container(self, page):
        r = add_element(page, el("t0"), position=0, container_id="body")
        assert ids(find_element_by_id(r.elements, "body").children) == ["t0", "t1", "t2"]

    def test_string_position_is_a_container_id(self, page):
        r = add_element(page, el("t3"), position="body")
        assert ids(find_element_by_id(r.elements, "body").children) == ["t1", "t2", "t3"]
        assert ids(r.elements) == ["nav", "body", "foot"]

    def test_string_position_with_container_id_rejected(self, page):
        with pytest.raises(TypeError):
            add_element(page, el("t3"), position="1", container_id="body")

    def test_missing_container_is_a_no_op(self, page):
        r = add_element(page, el("t3"), container_id="ghost")
        assert not r.applied
        assert r.reason.startswith("CONTAINER_NOT_FOUND")
        assert r.elements is page


# ============================================================================
# Invariants: gate and unique ids
# ============================================================================


class TestAddRejections:
    def test_premium_type_under_free_raises(self, abc):
        before = copy.deepcopy(abc)
        with pytest.raises(ElementNotPermitted) as exc:
            add_element(abc, el("P", "carousel"), tier="free")
        assert exc.value.required == "premium"
        assert abc == before

    def test_premium_type_under_premium_allowed(self, abc):
        r = add_element(abc, el("P", "carousel"), tier="premium")
        assert r.applied

    def test_enterprise_type_under_premium_raises(self, abc):
        with pytest.raises(ElementNotPermitted):
            add_element(abc, el("S", "scrollReveal"), tier="premium")

    def test_gated_descendant_blocks_whole_subtree(self, abc):
        subtree = el("box", "container", children=[el("fx", "fadeInElement")])
        with pytest.raises(ElementNotPermitted) as exc:
            add_element(abc, subtree, tier="free")
        assert exc.value.element_type == "fadeInElement"

    def test_animation_type_prop_raises_requirement(self, abc):
        with pytest.raises(ElementNotPermitted):
            add_element(abc, el("T", "text", animationType="enterprise"), tier="premium")

    def test_existing_id_raises(self, abc):
        with pytest.raises(DuplicateElementId) as exc:
            add_element(abc, el("B"))
        assert exc.value.ids == ["B"]

    def test_id_clash_inside_incoming_subtree_raises(self, abc):
        subtree = el("box", "container", children=[el("x"), el("x")])
        with pytest.raises(DuplicateElementId):
            add_element(abc, subtree)
