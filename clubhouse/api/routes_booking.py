"""
Booking API routes - member session required
"""

from fastapi import APIRouter, Depends, Query

from clubhouse.core.config import settings
from clubhouse.core.errors import StoreError
from clubhouse.models.table import get_table
from clubhouse.schemas.common import StoreResult
from clubhouse.schemas.reservation import BookingDetails, BookingStart, SlotSelection
from clubhouse.schemas.session import SessionContext
from clubhouse.services.access_gate import SessionRegistry
from clubhouse.services.booking_flow import BookingFlow, BookingStep, available_slots
from clubhouse.services.messaging import whatsapp_url
from clubhouse.services.reservation_store import ReservationStore, parse_day
from clubhouse.utils.security import get_reservation_store, get_session_registry, require_session
from clubhouse.utils.responses import error_response, result_response, success_response

router = APIRouter()

def start_flow(registry: SessionRegistry, session: SessionContext, table) -> BookingFlow:
    """Open a fresh wizard for the session, identity prefilled"""
    flow = BookingFlow(
        table=table,
        name=session.member_name,
        member_id=session.member_id,
        details_step=settings.BOOKING_DETAILS_STEP,
    )
    registry.bookings[session.token] = flow
    return flow

def flow_response(flow: BookingFlow, store: ReservationStore, message: str):
    data = flow.summary()
    if flow.day:
        data["slots"] = [dict(s.model_dump(), disabled=s.disabled) for s in flow.slots(store)]
    return success_response(message=message, data=data)

def no_flow_response():
    return error_response(message="No hay ninguna reserva en curso", error_code="not_found", status_code=404)

@router.get("/slots")
async def list_slots(
    table_id: int,
    date: str = Query(...),
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store)
):
    """Hourly slots for a table and day, with occupied/past flags"""
    table = get_table(table_id)
    try:
        day = parse_day(date)
        if table is None or day is None:
            return error_response(message="Faltan datos obligatorios", error_code="validation_error", status_code=422)
    except StoreError as e:
        return result_response(StoreResult.fail(e))

    slots = available_slots(store, table.id, day)
    return success_response(
        message="Slots retrieved",
        data=[dict(s.model_dump(), disabled=s.disabled) for s in slots]
    )

@router.post("/start")
async def start_booking(
    start: BookingStart,
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    table = get_table(start.table_id)
    if table is None:
        return error_response(message="Mesa desconocida", error_code="not_found", status_code=404)
    flow = start_flow(registry, session, table)
    return flow_response(flow, store, "Reserva iniciada")

@router.get("")
async def get_booking(
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    flow = registry.bookings.get(session.token)
    if flow is None:
        return no_flow_response()
    return flow_response(flow, store, "Reserva en curso")

@router.post("/slot")
async def select_slot(
    selection: SlotSelection,
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    flow = registry.bookings.get(session.token)
    if flow is None:
        return no_flow_response()
    try:
        flow.select_slot(store, selection.date, selection.time, selection.mobile)
        flow.next()
    except StoreError as e:
        return result_response(StoreResult.fail(e))
    return flow_response(flow, store, "Horario seleccionado")

@router.post("/details")
async def set_details(
    details: BookingDetails,
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Legacy identity step"""
    flow = registry.bookings.get(session.token)
    if flow is None:
        return no_flow_response()
    try:
        flow.set_details(details.name, details.member_id, details.mobile)
        if flow.step == BookingStep.DETAILS:
            flow.next()
    except StoreError as e:
        return result_response(StoreResult.fail(e))
    return flow_response(flow, store, "Datos guardados")

@router.post("/next")
async def next_step(
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    flow = registry.bookings.get(session.token)
    if flow is None:
        return no_flow_response()
    try:
        flow.next()
    except StoreError as e:
        return result_response(StoreResult.fail(e))
    return flow_response(flow, store, "Paso siguiente")

@router.post("/back")
async def previous_step(
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    flow = registry.bookings.get(session.token)
    if flow is None:
        return no_flow_response()
    flow.back()
    return flow_response(flow, store, "Paso anterior")

@router.post("/submit")
async def submit_booking(
    session: SessionContext = Depends(require_session),
    store: ReservationStore = Depends(get_reservation_store),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Create the reservation; the flow closes on success and stays open on failure"""
    flow = registry.bookings.get(session.token)
    if flow is None:
        return no_flow_response()
    try:
        result = flow.submit(store)
    except StoreError as e:
        return result_response(StoreResult.fail(e))
    if not result.success:
        return result_response(result)

    registry.bookings.pop(session.token, None)
    reservation = result.data
    return success_response(
        message="Reserva confirmada",
        data={
            "reservation": reservation.model_dump(mode="json"),
            "whatsapp_url": whatsapp_url(reservation),
        },
        status_code=201
    )
