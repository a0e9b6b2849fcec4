"""
Admin API routes - requires an admin session or the admin token
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from clubhouse.schemas.member import MemberCreate, MemberUpdate
from clubhouse.services.access_gate import SessionRegistry
from clubhouse.services.member_store import MemberStore
from clubhouse.services.reservation_store import ReservationStore
from clubhouse.services.roster_service import RosterService
from clubhouse.utils.security import get_member_store, get_reservation_store, get_session_registry, require_admin
from clubhouse.utils.responses import error_response, result_response, success_response

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

router = APIRouter(dependencies=[Depends(require_admin)])

@router.get("/reservations")
async def list_reservations(store: ReservationStore = Depends(get_reservation_store)):
    """All reservations grouped by date"""
    grouped = store.by_date()
    return success_response(
        message=f"{len(store.list())} reservas en total",
        data={day.isoformat(): [r.model_dump(mode="json") for r in items] for day, items in grouped.items()}
    )

@router.delete("/reservations/{reservation_id}")
async def delete_reservation(
    reservation_id: str,
    store: ReservationStore = Depends(get_reservation_store)
):
    return result_response(store.delete(reservation_id))

@router.post("/refresh")
async def refresh_stores(
    reservations: ReservationStore = Depends(get_reservation_store),
    members: MemberStore = Depends(get_member_store)
):
    """Reload both stores from the data service"""
    for result in (reservations.refresh(), members.refresh()):
        if not result.success:
            return result_response(result)
    return success_response(
        message="Datos actualizados",
        data={"reservations": len(reservations.list()), "members": len(members.list())}
    )

@router.get("/members")
async def list_members(members: MemberStore = Depends(get_member_store)):
    items = members.list()
    return success_response(
        message=f"{len(items)} socios registrados",
        data=[m.model_dump(mode="json") for m in items]
    )

@router.post("/members")
async def add_member(
    member: MemberCreate,
    members: MemberStore = Depends(get_member_store)
):
    return result_response(members.add(member.name), status_code=201)

@router.patch("/members/{member_id}")
async def update_member(
    member_id: str,
    update: MemberUpdate,
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    result = members.update(member_id, update)
    if result.success:
        member = result.data
        registry.refresh_member(member_id, member_name=member.name, photo_url=member.photo_url, is_admin=member.is_admin)
    return result_response(result)

@router.delete("/members/{member_id}")
async def delete_member(
    member_id: str,
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    result = members.delete(member_id)
    if result.success:
        registry.drop_member(member_id)
    return result_response(result)

@router.post("/members/{member_id}/photo")
async def upload_member_photo(
    member_id: str,
    file: UploadFile = File(...),
    members: MemberStore = Depends(get_member_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    content = await file.read()
    result = members.upload_photo(member_id, file.filename, content, file.content_type)
    if result.success:
        registry.refresh_member(member_id, photo_url=result.data.photo_url)
    return result_response(result)

@router.post("/members/import")
async def import_roster(
    file: UploadFile = File(...),
    members: MemberStore = Depends(get_member_store)
):
    """Seed import from an Excel or CSV roster"""
    if not file.filename.lower().endswith(('.xlsx', '.xls', '.csv')):
        return error_response(
            message="Formato no válido. Sube un archivo Excel (.xlsx, .xls) o CSV",
            error_code="validation_error",
            status_code=400
        )

    ok, names, errors = RosterService.read_names(await file.read(), file.filename)
    if not ok:
        return error_response(
            message="El archivo no es válido",
            error_code="validation_error",
            details=errors,
            status_code=422
        )
    return result_response(members.import_names(names))

@router.get("/members/template.xlsx")
async def download_roster_template():
    return Response(
        content=RosterService.create_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=plantilla_socios.xlsx"}
    )

@router.get("/members/export.xlsx")
async def export_roster(members: MemberStore = Depends(get_member_store)):
    return Response(
        content=RosterService.export_members(members.list()),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=socios.xlsx"}
    )
