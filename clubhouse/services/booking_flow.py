"""
Booking flow: linear wizard collecting slot and identity before submission
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from clubhouse.core.errors import ValidationError
from clubhouse.models.table import Table
from clubhouse.schemas.common import StoreResult
from clubhouse.schemas.reservation import ReservationRecord, SlotOption
from clubhouse.services.reservation_store import parse_day
from clubhouse.services.slots import club_now, is_past, slot_labels


class BookingStep(str, Enum):
    SELECT_SLOT = "select_slot"
    DETAILS = "details"
    SUMMARY = "summary"
    SUBMITTED = "submitted"


def available_slots(store, table_id: int, day: date, now: Optional[datetime] = None) -> List[SlotOption]:
    now = now or club_now()
    return [
        SlotOption(time=label, occupied=store.is_occupied(table_id, day, label), past=is_past(day, label, now))
        for label in slot_labels()
    ]


@dataclass
class BookingFlow:
    table: Table
    name: str = ""
    member_id: str = ""
    mobile: str = ""
    day: Optional[date] = None
    time: str = ""
    details_step: bool = False
    step: BookingStep = BookingStep.SELECT_SLOT
    error: Optional[str] = None
    reservation: Optional[ReservationRecord] = field(default=None, repr=False)

    @property
    def steps(self) -> List[BookingStep]:
        steps = [BookingStep.SELECT_SLOT, BookingStep.SUMMARY, BookingStep.SUBMITTED]
        if self.details_step:
            steps.insert(1, BookingStep.DETAILS)
        return steps

    @property
    def is_open(self) -> bool:
        return self.step != BookingStep.SUBMITTED

    def slots(self, store, now: Optional[datetime] = None) -> List[SlotOption]:
        return available_slots(store, self.table.id, self.day or (now or club_now()).date(), now)

    def set_day(self, day, now: Optional[datetime] = None) -> None:
        """Change the date; a new date clears the chosen hour"""
        now = now or club_now()
        day = parse_day(day)
        if not day:
            raise ValidationError("Selecciona fecha y hora")
        if day < now.date():
            raise ValidationError("La fecha no puede ser anterior a hoy")
        if day != self.day:
            self.time = ""
        self.day = day

    def select_slot(self, store, day, time: str, mobile: Optional[str] = None, now: Optional[datetime] = None) -> None:
        """Pick date and hour; only enabled slots are accepted"""
        now = now or club_now()
        if self.step == BookingStep.SUBMITTED:
            raise ValidationError("La reserva ya está confirmada")
        self.step = BookingStep.SELECT_SLOT
        if mobile is not None:
            self.mobile = mobile.strip()
        self.set_day(day, now)

        if not time:
            raise ValidationError("Selecciona fecha y hora")
        if time not in slot_labels():
            raise ValidationError("Hora no válida")
        option = next(o for o in available_slots(store, self.table.id, self.day, now) if o.time == time)
        if option.disabled:
            raise ValidationError("Ese horario no está disponible")
        self.time = time

    def set_details(self, name: str, member_id: str = "", mobile: Optional[str] = None) -> None:
        """Identity fields; moves to the details step when it is enabled"""
        if self.step == BookingStep.SUBMITTED:
            raise ValidationError("La reserva ya está confirmada")
        if not (name or "").strip():
            raise ValidationError("Faltan datos obligatorios")
        self.name = name.strip()
        self.member_id = (member_id or "").strip()
        if mobile is not None:
            self.mobile = mobile.strip()
        if self.details_step:
            self.step = BookingStep.DETAILS

    def can_advance(self) -> bool:
        if self.step == BookingStep.SELECT_SLOT:
            return bool(self.day and self.time)
        if self.step == BookingStep.DETAILS:
            return bool(self.name)
        return False

    def next(self) -> BookingStep:
        if self.step not in (BookingStep.SELECT_SLOT, BookingStep.DETAILS):
            raise ValidationError("No hay más pasos")
        if not self.can_advance():
            raise ValidationError("Selecciona fecha y hora" if self.step == BookingStep.SELECT_SLOT else "Faltan datos obligatorios")
        self.step = self.steps[self.steps.index(self.step) + 1]
        self.error = None
        return self.step

    def back(self) -> BookingStep:
        index = self.steps.index(self.step)
        if self.step == BookingStep.SUBMITTED or index == 0:
            return self.step
        self.step = self.steps[index - 1]
        self.error = None
        return self.step

    def submit(self, store) -> StoreResult:
        """Hand the collected data to the reservation store; stays at Summary on failure"""
        if self.step != BookingStep.SUMMARY:
            raise ValidationError("Completa los pasos anteriores")
        result = store.add(self.table.id, self.day, self.time, self.name, self.member_id, self.mobile)
        if result.success:
            self.reservation = result.data
            self.step = BookingStep.SUBMITTED
            self.error = None
        else:
            self.error = result.message
        return result

    def summary(self) -> dict:
        return {
            "step": self.step.value,
            "table_id": self.table.id,
            "table_name": self.table.name,
            "date": self.day.isoformat() if self.day else None,
            "time": self.time or None,
            "name": self.name,
            "member_id": self.member_id,
            "mobile": self.mobile,
            "error": self.error,
        }
