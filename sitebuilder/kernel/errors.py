"""
Sitebuilder Kernel — Exceptions

Expected no-ops (unknown id, out-of-range index) are reported through
MutationResult and never raise. These exceptions cover the cases the caller
must see: entitlement rejections and broken invariants.
"""

from __future__ import annotations


class BuilderError(Exception):
    """Base class for all kernel errors."""

    pass


class ElementNotPermitted(BuilderError):
    """The current entitlement tier does not allow inserting this element type."""

    def __init__(self, element_type: str, tier: str, required: str) -> None:
        self.element_type = element_type
        self.tier = tier
        self.required = required
        super().__init__(f"'{element_type}' requires the {required} plan (current: {tier})")


class InvariantViolation(BuilderError):
    """The tree would stop being a strict tree with unique ids."""

    pass


class DuplicateElementId(InvariantViolation):
    """Two nodes would share an id."""

    def __init__(self, ids: list[str]) -> None:
        self.ids = ids
        super().__init__(f"duplicate element ids: {', '.join(ids)}")


class DocumentParseError(BuilderError):
    """A serialized document is not valid JSON or does not have the element shape."""

    pass


class PageNotFound(BuilderError):
    """The site has no page with this id."""

    pass
