"""
Public API routes - no session required
"""

from dataclasses import asdict
from fastapi import APIRouter, Depends

from clubhouse.models.table import TABLES
from clubhouse.services.reservation_store import ReservationStore
from clubhouse.utils.security import get_reservation_store
from clubhouse.utils.responses import success_response, result_response

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/api/tables")
async def list_tables():
    """Static list of club tables"""
    return success_response(
        message="Tables retrieved",
        data=[asdict(t) for t in TABLES]
    )

@router.post("/api/reservations/{reservation_id}/cancel")
async def cancel_reservation(
    reservation_id: str,
    store: ReservationStore = Depends(get_reservation_store)
):
    """Cancel through the link sent in the confirmation message"""
    store.refresh()
    found = store.get(reservation_id)
    if not found.success:
        return result_response(found)
    return result_response(store.delete(reservation_id))
