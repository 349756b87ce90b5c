"""Editing session routes — open a session, mutate its tree, drop, pages, save."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from sitebuilder.api.models import (
    AddElementRequest,
    AddPageRequest,
    CreateSessionRequest,
    DropRequest,
    DropResponse,
    MoveRequest,
    MutationResponse,
    ResponsiveOverrideRequest,
    SaveResponse,
    SelectionRequest,
    SessionResponse,
    SetTierRequest,
    UpdateElementRequest,
)
from sitebuilder.api.sessions import EditingSession, Entitlement, SessionRegistry
from sitebuilder.config import settings
from sitebuilder.kernel.drop import DropEvent, Rect, RenderedElement, handle_drop
from sitebuilder.kernel.storage import SiteStorage, fetch_site, save_site
from sitebuilder.kernel.store import ElementTreeStore
from sitebuilder.kernel.types import BREAKPOINTS, Element, PageSettings

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_storage(request: Request) -> SiteStorage:
    return request.app.state.storage


def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> EditingSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found.")
    return session


def _require_element(store: ElementTreeStore, element_id: str) -> None:
    if store.find_element_by_id(element_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Element not found.")


def _session_response(session: EditingSession) -> SessionResponse:
    return SessionResponse(session_id=session.id, tier=session.tier, state=session.store.to_dict())


def _mutation_response(store: ElementTreeStore, applied: bool, element_id: str | None = None) -> MutationResponse:
    return MutationResponse(applied=applied, element_id=element_id, state=store.to_dict())


# ── sessions ────────────────────────────────────────────────────────────────


@router.post("", status_code=201)
async def create_session(
    req: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
    storage: SiteStorage = Depends(get_storage),
) -> SessionResponse:
    """
    Open an editing session.

    With `site_id` the stored site is loaded; otherwise the session starts from
    the given elements (optionally with default navbar/footer added).
    """
    entitlement = Entitlement(tier=req.tier or settings.DEFAULT_TIER)

    if req.site_id is not None:
        if req.elements is not None:
            raise HTTPException(status_code=422, detail="Pass either site_id or elements, not both.")
        site = await fetch_site(storage, req.site_id)
        if site is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found.")
        store = ElementTreeStore(site=site, entitlements=entitlement)
    else:
        elements = [Element.from_dict(e) for e in req.elements or []]
        page_settings = PageSettings.from_dict(req.page_settings) if req.page_settings is not None else None
        if req.ensure_chrome:
            store = ElementTreeStore(page_settings=page_settings, entitlements=entitlement)
            store.load_elements(elements, ensure_chrome=True)
        else:
            store = ElementTreeStore(elements=elements, page_settings=page_settings, entitlements=entitlement)

    session = registry.open(store, entitlement, site_id=req.site_id)
    return _session_response(session)


@router.get("/{session_id}", status_code=200)
async def get_session_state(session: EditingSession = Depends(get_session)) -> SessionResponse:
    return _session_response(session)


@router.delete("/{session_id}", status_code=204)
async def close_session(
    session: EditingSession = Depends(get_session),
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    registry.close(session.id)
    return Response(status_code=204)


@router.put("/{session_id}/tier", status_code=200)
async def set_tier(req: SetTierRequest, session: EditingSession = Depends(get_session)) -> SessionResponse:
    """Change the entitlement; already placed elements are left alone."""
    session.entitlement.tier = req.tier
    return _session_response(session)


# ── elements ────────────────────────────────────────────────────────────────


@router.post("/{session_id}/elements", status_code=201)
async def add_element(req: AddElementRequest, session: EditingSession = Depends(get_session)) -> MutationResponse:
    """Insert an element. 403 if the plan does not allow it, 409 on an id clash."""
    store = session.store
    try:
        element_id = store.add_element(Element.from_dict(req.element), req.position, req.container_id)
    except TypeError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    if element_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Container not found.")
    return _mutation_response(store, True, element_id)


@router.patch("/{session_id}/elements/{element_id}", status_code=200)
async def update_element(
    element_id: str,
    req: UpdateElementRequest,
    session: EditingSession = Depends(get_session),
) -> MutationResponse:
    store = session.store
    _require_element(store, element_id)
    try:
        applied = store.update_element(element_id, req.updates)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _mutation_response(store, applied, element_id)


@router.delete("/{session_id}/elements/{element_id}", status_code=204)
async def delete_element(element_id: str, session: EditingSession = Depends(get_session)) -> Response:
    """Idempotent: deleting an element that is already gone is still 204."""
    session.store.delete_element(element_id)
    return Response(status_code=204)


@router.post("/{session_id}/elements/{element_id}/duplicate", status_code=201)
async def duplicate_element(element_id: str, session: EditingSession = Depends(get_session)) -> MutationResponse:
    store = session.store
    _require_element(store, element_id)
    clone_id = store.duplicate_element(element_id)
    return _mutation_response(store, clone_id is not None, clone_id)


@router.post("/{session_id}/elements/{element_id}/move-up", status_code=200)
async def move_element_up(element_id: str, session: EditingSession = Depends(get_session)) -> MutationResponse:
    store = session.store
    _require_element(store, element_id)
    return _mutation_response(store, store.move_element_up(element_id), element_id)


@router.post("/{session_id}/elements/{element_id}/move-down", status_code=200)
async def move_element_down(element_id: str, session: EditingSession = Depends(get_session)) -> MutationResponse:
    store = session.store
    _require_element(store, element_id)
    return _mutation_response(store, store.move_element_down(element_id), element_id)


@router.post("/{session_id}/moves", status_code=200)
async def move_element(req: MoveRequest, session: EditingSession = Depends(get_session)) -> MutationResponse:
    """Positional reorder; out-of-range indices come back with applied=false."""
    store = session.store
    return _mutation_response(store, store.move_element(req.source_index, req.dest_index, req.scope_id))


@router.put("/{session_id}/elements/{element_id}/responsive/{breakpoint}", status_code=200)
async def update_element_responsive(
    element_id: str,
    breakpoint: str,
    req: ResponsiveOverrideRequest,
    session: EditingSession = Depends(get_session),
) -> MutationResponse:
    if breakpoint not in BREAKPOINTS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown breakpoint.")
    store = session.store
    _require_element(store, element_id)
    applied = store.update_element_responsive(element_id, breakpoint, req.override)
    return _mutation_response(store, applied, element_id)


@router.get("/{session_id}/elements/{element_id}/effective-props", status_code=200)
async def get_effective_props(
    element_id: str,
    breakpoint: str | None = None,
    session: EditingSession = Depends(get_session),
) -> dict:
    if breakpoint is not None and breakpoint not in BREAKPOINTS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown breakpoint.")
    props = session.store.effective_props(element_id, breakpoint)
    if props is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Element not found.")
    return props


# ── drag and drop ───────────────────────────────────────────────────────────


@router.post("/{session_id}/drops", status_code=200)
async def drop(req: DropRequest, session: EditingSession = Depends(get_session)) -> DropResponse:
    """
    Resolve a pointer release. Ignored drops (bad payload, non-container zone,
    dropped in place) return applied=false and leave the tree alone.
    """
    store = session.store
    event = DropEvent(
        payload=req.payload,
        zone_id=req.zone_id,
        x=req.x,
        y=req.y,
        rendered=[
            RenderedElement(element_id=r.element_id, rect=Rect(left=r.left, top=r.top, width=r.width, height=r.height))
            for r in req.rendered
        ],
    )
    plan = handle_drop(store, event)
    if plan is None:
        return DropResponse(applied=False, state=store.to_dict())
    element_id = plan.element.id if plan.element is not None else plan.element_id
    return DropResponse(
        applied=True,
        action=plan.action,
        element_id=element_id,
        index=plan.index,
        state=store.to_dict(),
    )


# ── selection and page settings ─────────────────────────────────────────────


@router.put("/{session_id}/selection", status_code=200)
async def select_element(req: SelectionRequest, session: EditingSession = Depends(get_session)) -> SessionResponse:
    if not session.store.select_element(req.element_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Element not found.")
    return _session_response(session)


@router.patch("/{session_id}/page-settings", status_code=200)
async def update_page_settings(updates: dict, session: EditingSession = Depends(get_session)) -> SessionResponse:
    session.store.update_page_settings(updates)
    return _session_response(session)


# ── pages ───────────────────────────────────────────────────────────────────


@router.post("/{session_id}/pages", status_code=201)
async def add_page(req: AddPageRequest, session: EditingSession = Depends(get_session)) -> SessionResponse:
    try:
        session.store.add_page(req.title, req.path)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _session_response(session)


@router.post("/{session_id}/pages/{page_id}/activate", status_code=200)
async def activate_page(page_id: str, session: EditingSession = Depends(get_session)) -> SessionResponse:
    session.store.switch_page(page_id)
    return _session_response(session)


@router.delete("/{session_id}/pages/{page_id}", status_code=200)
async def remove_page(page_id: str, session: EditingSession = Depends(get_session)) -> SessionResponse:
    try:
        session.store.remove_page(page_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _session_response(session)


# ── persistence ─────────────────────────────────────────────────────────────


@router.post("/{session_id}/save", status_code=200)
async def save(
    session: EditingSession = Depends(get_session),
    storage: SiteStorage = Depends(get_storage),
) -> SaveResponse:
    """Serialize the whole site through the configured storage. New sites get their session id."""
    if session.site_id is None:
        session.site_id = session.id
    site = session.store.site
    await save_site(storage, session.site_id, site)
    return SaveResponse(site_id=session.site_id, pages=len(site.pages))
