"""
Reservation store: in-memory list of reservations mirrored from the data service
"""

import logging
from collections import OrderedDict
from datetime import date
from typing import Dict, List, Optional, Union

from pydantic import ValidationError as SchemaError

from clubhouse.core.errors import ConflictError, NotFoundError, RemoteError, StoreError, ValidationError
from clubhouse.models.table import get_table
from clubhouse.schemas.common import StoreResult
from clubhouse.schemas.reservation import ReservationRecord
from clubhouse.services.data_service import SLOT_TAKEN_MESSAGE
from clubhouse.services.slots import slot_labels

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Faltan datos obligatorios"


def parse_day(value: Union[str, date, None]) -> Optional[date]:
    """Accept a date or an ISO "YYYY-MM-DD" string; None when empty"""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError("Fecha no válida")


class ReservationStore:
    """Holds the loaded reservations; every mutation goes through the data service"""

    def __init__(self, data_service):
        self.data_service = data_service
        self._reservations: List[ReservationRecord] = []
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.refresh()

    def refresh(self) -> StoreResult:
        """Reload the full list from the data service"""
        try:
            rows = self.data_service.list_reservations()
            self._reservations = [self._validate(row) for row in rows]
        except StoreError as e:
            logger.error(f"Error fetching reservations: {e.message}")
            return StoreResult.fail(e)
        self._loaded = True
        return StoreResult.ok(data=len(self._reservations))

    @staticmethod
    def _validate(row) -> ReservationRecord:
        try:
            return ReservationRecord.model_validate(row)
        except SchemaError as e:
            raise RemoteError(f"Reserva con formato inesperado: {e}") from e

    def list(self) -> List[ReservationRecord]:
        self._ensure_loaded()
        return list(self._reservations)

    def get(self, reservation_id: str) -> StoreResult:
        self._ensure_loaded()
        for reservation in self._reservations:
            if reservation.id == str(reservation_id):
                return StoreResult.ok(data=reservation)
        return StoreResult.fail(NotFoundError("Reserva no encontrada"))

    def is_occupied(self, table_id, day, time: str) -> bool:
        """Pure scan of the loaded list, no remote call"""
        self._ensure_loaded()
        try:
            table_id = int(table_id)
            day = parse_day(day)
        except (TypeError, ValueError, ValidationError):
            return False
        return any(r.slot == (table_id, day, time) for r in self._reservations)

    def add(self, table_id, day, time: str, name: str, member_id: str = "", mobile: Optional[str] = None) -> StoreResult:
        """Create a reservation unless the slot is already taken.

        The in-memory check is a pre-flight hint; a uniqueness rejection from the
        data service is reported the same way.
        """
        try:
            if table_id in (None, "") or not day or not time or not (name or "").strip():
                raise ValidationError(MISSING_FIELDS_MESSAGE)

            table = get_table(table_id)
            if table is None:
                raise ValidationError("Mesa desconocida")
            day = parse_day(day)
            if time not in slot_labels():
                raise ValidationError("Hora no válida")

            if self.is_occupied(table.id, day, time):
                raise ConflictError(SLOT_TAKEN_MESSAGE)

            row = self.data_service.create_reservation({
                "table_id": table.id,
                "date": day,
                "time": time,
                "customer_name": name.strip(),
                "member_id": member_id or "",
                "mobile": (mobile or "").strip() or None,
            })
            reservation = self._validate(row)
        except StoreError as e:
            if isinstance(e, RemoteError):
                logger.error(f"Error adding reservation: {e.message}")
            return StoreResult.fail(e)

        self._reservations.append(reservation)
        logger.info(f"Reservation {reservation.id} created for table {reservation.table_id} on {reservation.date} {reservation.time}")
        return StoreResult.ok(data=reservation, message="Reserva confirmada")

    def delete(self, reservation_id: str) -> StoreResult:
        """Remove remotely, then locally; absent ids succeed"""
        self._ensure_loaded()
        try:
            self.data_service.delete_reservation(str(reservation_id))
        except StoreError as e:
            logger.error(f"Error deleting reservation {reservation_id}: {e.message}")
            return StoreResult.fail(e)

        self._reservations = [r for r in self._reservations if r.id != str(reservation_id)]
        return StoreResult.ok(message="Reserva cancelada con éxito.")

    def for_date(self, day) -> List[ReservationRecord]:
        day = parse_day(day)
        return sorted((r for r in self.list() if r.date == day), key=lambda r: (r.time, r.table_id))

    def for_member(self, member_id: str) -> List[ReservationRecord]:
        return [r for r in self.list() if member_id and r.member_id == member_id]

    @staticmethod
    def group_by_date(reservations: List[ReservationRecord]) -> Dict[date, List[ReservationRecord]]:
        """Dates ascending, times ascending within a date"""
        grouped: Dict[date, List[ReservationRecord]] = OrderedDict()
        for reservation in sorted(reservations, key=lambda r: (r.date, r.time, r.table_id)):
            grouped.setdefault(reservation.date, []).append(reservation)
        return grouped

    def by_date(self) -> Dict[date, List[ReservationRecord]]:
        return self.group_by_date(self.list())
