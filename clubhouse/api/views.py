"""
Server-rendered views over the stores
"""

import os
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from clubhouse.core.config import settings
from clubhouse.core.errors import StoreError
from clubhouse.models.table import TABLES, get_table
from clubhouse.schemas.session import SessionContext
from clubhouse.services.access_gate import AccessGate, GateState, SessionRegistry
from clubhouse.services.booking_flow import BookingStep
from clubhouse.services.member_store import MemberStore
from clubhouse.services.messaging import whatsapp_url
from clubhouse.services.reservation_store import ReservationStore
from clubhouse.services.roster_service import RosterService
from clubhouse.services.slots import club_now, is_open
from clubhouse.api.routes_access import set_session_cookie
from clubhouse.api.routes_booking import start_flow
from clubhouse.utils.security import (
    get_client_ip,
    get_member_store,
    get_optional_session,
    get_reservation_store,
    get_session_registry,
    rate_limit_check,
)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")
templates = Jinja2Templates(directory=TEMPLATES_DIR)

router = APIRouter()

def render(request: Request, name: str, session: Optional[SessionContext] = None, status_code: int = 200, **context):
    context.update({
        "request": request,
        "club_name": settings.CLUB_NAME,
        "session": session,
        "alert": context.get("alert") or request.query_params.get("msg"),
    })
    return templates.TemplateResponse(request, name, context, status_code=status_code)

def redirect(url: str, msg: Optional[str] = None) -> RedirectResponse:
    if msg:
        url = f"{url}{'&' if '?' in url else '?'}msg={quote(msg)}"
    return RedirectResponse(url, status_code=303)

@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    cancel: Optional[str] = None,
    session: Optional[SessionContext] = Depends(get_optional_session),
    store: ReservationStore = Depends(get_reservation_store)
):
    """Access portal when locked, table list otherwise; ?cancel= asks for confirmation first"""
    if cancel:
        store.refresh()
        found = store.get(cancel)
        return render(
            request, "cancel.html", session,
            reservation=found.data if found.success else None,
            table=get_table(found.data.table_id) if found.success else None,
            alert=None if found.success else found.message,
        )

    if session is None:
        return render(request, "access.html", state=GateState.LOCKED.value)

    now = club_now()
    return render(
        request, "tables.html", session,
        tables=TABLES,
        today=store.for_date(now.date()),
        is_open=is_open(now),
    )

@router.post("/access", response_class=HTMLResponse)
async def submit_access(
    request: Request,
    code: str = Form(""),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    if not rate_limit_check(get_client_ip(request)):
        return render(request, "access.html", state=GateState.LOCKED.value,
                      alert="Demasiados intentos. Inténtalo de nuevo en un minuto.", status_code=429)

    gate = AccessGate(members, registry, request.cookies.get(settings.SESSION_COOKIE_NAME))
    result = gate.submit(code)
    if not result.success:
        return render(request, "access.html", state=gate.state.value, code=gate.entered_code,
                      alert=gate.error, status_code=401)

    response = redirect("/", result.message)
    set_session_cookie(response, gate.session.token)
    return response

@router.post("/logout")
async def logout(
    request: Request,
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    AccessGate(members, registry, request.cookies.get(settings.SESSION_COOKIE_NAME)).logout()
    response = redirect("/")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response

@router.post("/cancel/{reservation_id}", response_class=HTMLResponse)
async def confirm_cancel(
    request: Request,
    reservation_id: str,
    session: Optional[SessionContext] = Depends(get_optional_session),
    store: ReservationStore = Depends(get_reservation_store)
):
    result = store.delete(reservation_id)
    if not result.success:
        return render(request, "cancel.html", session, reservation=None,
                      alert=f"Error al cancelar: {result.message}", status_code=400)
    return redirect("/", result.message)

# -------- Booking wizard --------

def _current_flow(registry: SessionRegistry, session: SessionContext, table_id: int, restart: bool = False):
    table = get_table(table_id)
    if table is None:
        return None
    flow = registry.bookings.get(session.token)
    if restart or flow is None or flow.table.id != table.id or not flow.is_open:
        flow = start_flow(registry, session, table)
    return flow

def _render_flow(request, session, flow, store, alert=None, status_code=200):
    return render(
        request, "booking.html", session,
        flow=flow,
        steps=BookingStep,
        slots=flow.slots(store),
        today=club_now().date(),
        alert=alert or flow.error,
        status_code=status_code,
    )

@router.get("/book/{table_id}", response_class=HTMLResponse)
async def booking_page(
    request: Request,
    table_id: int,
    date: Optional[str] = None,
    session: Optional[SessionContext] = Depends(get_optional_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    if session is None:
        return redirect("/")
    flow = _current_flow(registry, session, table_id, restart=date is None)
    if flow is None:
        return redirect("/", "Mesa desconocida")

    alert = None
    if date:
        try:
            flow.set_day(date)
        except StoreError as e:
            alert = e.message
    if flow.day is None:
        flow.day = club_now().date()
    return _render_flow(request, session, flow, store, alert)

@router.post("/book/{table_id}", response_class=HTMLResponse)
async def booking_action(
    request: Request,
    table_id: int,
    action: str = Form(...),
    date: str = Form(""),
    time: str = Form(""),
    name: str = Form(""),
    member_id: str = Form(""),
    mobile: Optional[str] = Form(None),
    session: Optional[SessionContext] = Depends(get_optional_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    if session is None:
        return redirect("/")
    flow = _current_flow(registry, session, table_id)
    if flow is None:
        return redirect("/", "Mesa desconocida")

    try:
        if action == "slot":
            flow.select_slot(store, date, time, mobile)
            flow.next()
        elif action == "details":
            flow.set_details(name, member_id, mobile)
            if flow.step == BookingStep.DETAILS:
                flow.next()
        elif action == "back":
            flow.back()
        elif action == "close":
            registry.bookings.pop(session.token, None)
            return redirect("/")
        elif action == "submit":
            result = flow.submit(store)
            if result.success:
                registry.bookings.pop(session.token, None)
                return RedirectResponse(whatsapp_url(result.data), status_code=303)
            return _render_flow(request, session, flow, store, alert=f"Error: {result.message}", status_code=409 if result.error_code == "conflict" else 400)
    except StoreError as e:
        return _render_flow(request, session, flow, store, alert=e.message, status_code=422)

    return _render_flow(request, session, flow, store)

# -------- Reservations and members --------

@router.get("/reservations", response_class=HTMLResponse)
async def reservations_page(
    request: Request,
    session: Optional[SessionContext] = Depends(get_optional_session),
    store: ReservationStore = Depends(get_reservation_store)
):
    """Admins see every reservation, members their own"""
    if session is None:
        return redirect("/")
    items = store.list() if session.is_admin else store.for_member(session.member_id)
    return render(
        request, "reservations.html", session,
        grouped=store.group_by_date(items),
        total=len(items),
        tables={t.id: t for t in TABLES},
    )

@router.post("/reservations/{reservation_id}/delete")
async def delete_reservation(
    reservation_id: str,
    session: Optional[SessionContext] = Depends(get_optional_session),
    store: ReservationStore = Depends(get_reservation_store)
):
    if session is None:
        return redirect("/")
    found = store.get(reservation_id)
    if not found.success:
        return redirect("/reservations", found.message)
    if not session.is_admin and found.data.member_id != session.member_id:
        return redirect("/reservations", "Solo puedes cancelar tus propias reservas")
    result = store.delete(reservation_id)
    return redirect("/reservations", result.message if result.success else f"Error: {result.message}")

def _admin_or_redirect(session: Optional[SessionContext]):
    if session is None:
        return redirect("/")
    if not session.is_admin:
        return redirect("/", "Solo para administradores")
    return None

@router.get("/members", response_class=HTMLResponse)
async def members_page(
    request: Request,
    session: Optional[SessionContext] = Depends(get_optional_session),
    members: MemberStore = Depends(get_member_store)
):
    denied = _admin_or_redirect(session)
    if denied:
        return denied
    return render(request, "members.html", session, members=members.list())

@router.post("/members")
async def add_member(
    name: str = Form(""),
    session: Optional[SessionContext] = Depends(get_optional_session),
    members: MemberStore = Depends(get_member_store)
):
    denied = _admin_or_redirect(session)
    if denied:
        return denied
    result = members.add(name)
    if not result.success:
        return redirect("/members", f"Error: {result.message}")
    return redirect("/members", f"{result.data.name}: código {result.data.access_code}")

@router.post("/members/{member_id}/delete")
async def delete_member(
    member_id: str,
    session: Optional[SessionContext] = Depends(get_optional_session),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    denied = _admin_or_redirect(session)
    if denied:
        return denied
    result = members.delete(member_id)
    if result.success:
        registry.drop_member(member_id)
    return redirect("/members", result.message if result.success else f"Error: {result.message}")

@router.post("/members/{member_id}/photo")
async def upload_member_photo(
    member_id: str,
    file: UploadFile = File(...),
    session: Optional[SessionContext] = Depends(get_optional_session),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    denied = _admin_or_redirect(session)
    if denied:
        return denied
    result = members.upload_photo(member_id, file.filename, await file.read(), file.content_type)
    if result.success:
        registry.refresh_member(member_id, photo_url=result.data.photo_url)
    return redirect("/members", result.message if result.success else f"Error: {result.message}")

@router.post("/members/import")
async def import_members(
    file: UploadFile = File(...),
    session: Optional[SessionContext] = Depends(get_optional_session),
    members: MemberStore = Depends(get_member_store)
):
    denied = _admin_or_redirect(session)
    if denied:
        return denied
    ok, names, errors = RosterService.read_names(await file.read(), file.filename or "")
    if not ok:
        return redirect("/members", "Error: " + "; ".join(errors))
    result = members.import_names(names)
    return redirect("/members", result.message)
