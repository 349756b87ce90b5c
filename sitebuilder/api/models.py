"""
Pydantic models for the editing API.

All request/response shapes defined here. No imports from routes.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from sitebuilder.kernel.types import Tier


class CreateSessionRequest(BaseModel):
    """What the client sends to open an editing session."""

    model_config = {"extra": "forbid"}

    elements: list[dict[str, Any]] | None = None
    page_settings: dict[str, Any] | None = None
    tier: Tier | None = None
    site_id: str | None = Field(default=None, min_length=1, max_length=200)
    ensure_chrome: bool = False


class SetTierRequest(BaseModel):
    model_config = {"extra": "forbid"}

    tier: Tier


class AddElementRequest(BaseModel):
    model_config = {"extra": "forbid"}

    element: dict[str, Any]
    position: int | str | None = None
    container_id: str | None = None


class UpdateElementRequest(BaseModel):
    model_config = {"extra": "forbid"}

    updates: dict[str, Any]


class MoveRequest(BaseModel):
    """Positional reorder inside one children list."""

    model_config = {"extra": "forbid"}

    source_index: int = Field(ge=0)
    dest_index: int = Field(ge=0)
    scope_id: str | None = None


class ResponsiveOverrideRequest(BaseModel):
    """Full replacement record for one breakpoint; null removes it."""

    model_config = {"extra": "forbid"}

    override: dict[str, Any] | None = None


class RenderedBox(BaseModel):
    model_config = {"extra": "forbid"}

    element_id: str
    left: float
    top: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class DropRequest(BaseModel):
    """A pointer release over a drop zone, with the boxes painted in it."""

    model_config = {"extra": "forbid"}

    payload: str | dict[str, Any]
    zone_id: str | None = None
    x: float
    y: float
    rendered: list[RenderedBox] = Field(default_factory=list)


class SelectionRequest(BaseModel):
    model_config = {"extra": "forbid"}

    element_id: str | None = None


class AddPageRequest(BaseModel):
    model_config = {"extra": "forbid"}

    title: str = Field(min_length=1, max_length=200)
    path: str = Field(min_length=1, max_length=200)


class SessionResponse(BaseModel):
    """Session id plus the full editor state."""

    session_id: str
    tier: Tier
    state: dict[str, Any]


class MutationResponse(BaseModel):
    applied: bool
    element_id: str | None = None
    state: dict[str, Any]


class DropResponse(BaseModel):
    applied: bool
    action: Literal["insert", "reorder", "transfer"] | None = None
    element_id: str | None = None
    index: int | None = None
    state: dict[str, Any]


class SaveResponse(BaseModel):
    site_id: str
    pages: int
