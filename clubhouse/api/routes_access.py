"""
Access API routes - code login, logout and own profile
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Request, UploadFile

from clubhouse.core.config import settings
from clubhouse.schemas.member import AccessRequest, ProfileUpdate
from clubhouse.schemas.session import SessionContext
from clubhouse.services.access_gate import AccessGate, SessionRegistry
from clubhouse.services.member_store import MemberStore
from clubhouse.services.reservation_store import ReservationStore
from clubhouse.utils.security import (
    get_client_ip,
    get_member_store,
    get_reservation_store,
    get_session_registry,
    get_session_token,
    rate_limit_check,
    require_session,
)
from clubhouse.utils.responses import rate_limit_error, result_response, success_response

router = APIRouter()

def set_session_cookie(response, token: str) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * 24 * 365,
    )

@router.post("/access")
async def submit_access_code(
    request: Request,
    access: AccessRequest,
    token: Optional[str] = Depends(get_session_token),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Validate a member access code and open a session"""
    if not rate_limit_check(get_client_ip(request)):
        return rate_limit_error()

    gate = AccessGate(members, registry, token)
    result = gate.submit(access.code)
    if not result.success:
        result.data = {"state": gate.state.value, "code": gate.entered_code}
        return result_response(result)

    response = success_response(
        message=result.message or "Acceso concedido",
        data={"state": gate.state.value, "session": gate.session.model_dump(mode="json")}
    )
    set_session_cookie(response, gate.session.token)
    return response

@router.post("/logout")
async def logout(
    token: Optional[str] = Depends(get_session_token),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Clear the session and lock the portal again"""
    gate = AccessGate(members, registry, token)
    gate.logout()
    response = success_response(message="Sesión cerrada", data={"state": gate.state.value})
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response

@router.get("/session")
async def current_session(session: SessionContext = Depends(require_session)):
    return success_response(message="Sesión activa", data=session.model_dump(mode="json", exclude={"token"}))

@router.patch("/session/profile")
async def update_profile(
    update: ProfileUpdate,
    session: SessionContext = Depends(require_session),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Members may rename themselves"""
    result = members.update(session.member_id, update.model_dump(exclude_none=True))
    if result.success:
        registry.refresh_member(session.member_id, member_name=result.data.name)
    return result_response(result)

@router.post("/session/photo")
async def upload_own_photo(
    file: UploadFile = File(...),
    session: SessionContext = Depends(require_session),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    content = await file.read()
    result = members.upload_photo(session.member_id, file.filename, content, file.content_type)
    if result.success:
        registry.refresh_member(session.member_id, photo_url=result.data.photo_url)
    return result_response(result)

@router.get("/reservations/mine")
async def my_reservations(
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store)
):
    """Own reservations grouped by date"""
    grouped = store.group_by_date(store.for_member(session.member_id))
    return success_response(
        message=f"Tienes {sum(len(v) for v in grouped.values())} reservas",
        data={day.isoformat(): [r.model_dump(mode="json") for r in items] for day, items in grouped.items()}
    )
