"""
Tests for the booking wizard
"""

import pytest
from datetime import date, datetime

from clubhouse.core.errors import ValidationError
from clubhouse.models.table import get_table
from clubhouse.services.booking_flow import BookingFlow, BookingStep, available_slots

DAY = date(2030, 5, 10)
NOW = datetime(2030, 5, 10, 12, 30)

@pytest.fixture
def flow():
    return BookingFlow(table=get_table(1), name="Ana", member_id="m-1")

def test_slots_flag_past_and_occupied(reservation_store):
    reservation_store.add(1, DAY, "14:00", "Luis")

    slots = {s.time: s for s in available_slots(reservation_store, 1, DAY, NOW)}

    assert len(slots) == 12
    assert slots["12:00"].past and slots["12:00"].disabled
    assert not slots["13:00"].disabled
    assert slots["14:00"].occupied and slots["14:00"].disabled
    assert not any(s.disabled for s in available_slots(reservation_store, 2, date(2030, 5, 11), NOW))

def test_steps_without_details(flow):
    assert flow.steps == [BookingStep.SELECT_SLOT, BookingStep.SUMMARY, BookingStep.SUBMITTED]

def test_happy_path(flow, reservation_store):
    flow.select_slot(reservation_store, DAY, "13:00", "600 111 222", now=NOW)
    assert flow.next() == BookingStep.SUMMARY

    result = flow.submit(reservation_store)

    assert result.success
    assert flow.step == BookingStep.SUBMITTED
    assert not flow.is_open
    assert flow.reservation.customer_name == "Ana"
    assert flow.reservation.member_id == "m-1"
    assert flow.reservation.mobile == "600 111 222"
    assert reservation_store.is_occupied(1, DAY, "13:00")

def test_disabled_slots_cannot_be_selected(flow, reservation_store):
    reservation_store.add(1, DAY, "14:00", "Luis")

    for label in ["10:00", "14:00"]:
        with pytest.raises(ValidationError) as exc:
            flow.select_slot(reservation_store, DAY, label, now=NOW)
        assert exc.value.message == "Ese horario no está disponible"
    assert flow.time == ""

def test_cannot_advance_without_slot(flow, reservation_store):
    flow.set_day(DAY, NOW)

    assert not flow.can_advance()
    with pytest.raises(ValidationError):
        flow.next()

def test_past_day_rejected(flow):
    with pytest.raises(ValidationError) as exc:
        flow.set_day(date(2030, 5, 9), NOW)
    assert exc.value.message == "La fecha no puede ser anterior a hoy"

def test_new_day_clears_hour(flow, reservation_store):
    flow.select_slot(reservation_store, DAY, "13:00", now=NOW)

    flow.set_day("2030-05-11", NOW)

    assert flow.day == date(2030, 5, 11)
    assert flow.time == ""

def test_details_step(reservation_store):
    flow = BookingFlow(table=get_table(2), details_step=True)
    assert flow.steps[1] == BookingStep.DETAILS

    flow.select_slot(reservation_store, DAY, "18:00", now=NOW)
    assert flow.next() == BookingStep.DETAILS
    with pytest.raises(ValidationError):
        flow.next()

    flow.set_details("Luis", "m-2", "+44 7700 900123")
    assert flow.next() == BookingStep.SUMMARY
    assert flow.back() == BookingStep.DETAILS
    assert flow.back() == BookingStep.SELECT_SLOT
    assert flow.back() == BookingStep.SELECT_SLOT

def test_details_require_name(flow):
    with pytest.raises(ValidationError) as exc:
        flow.set_details("  ")
    assert exc.value.message == "Faltan datos obligatorios"

def test_submit_only_from_summary(flow, reservation_store):
    with pytest.raises(ValidationError):
        flow.submit(reservation_store)

def test_conflict_keeps_flow_at_summary(flow, reservation_store):
    flow.select_slot(reservation_store, DAY, "13:00", now=NOW)
    flow.next()
    reservation_store.add(1, DAY, "13:00", "Luis")

    result = flow.submit(reservation_store)

    assert not result.success
    assert result.error_code == "conflict"
    assert flow.step == BookingStep.SUMMARY
    assert flow.error == "Este horario ya está reservado"

def test_submitted_flow_is_closed(flow, reservation_store):
    flow.select_slot(reservation_store, DAY, "13:00", now=NOW)
    flow.next()
    flow.submit(reservation_store)

    with pytest.raises(ValidationError):
        flow.select_slot(reservation_store, DAY, "15:00", now=NOW)
    assert flow.back() == BookingStep.SUBMITTED

def test_summary(flow, reservation_store):
    flow.select_slot(reservation_store, DAY, "13:00", now=NOW)

    summary = flow.summary()

    assert summary["table_name"] == "Mesa 1 - Sagredo"
    assert summary["date"] == "2030-05-10"
    assert summary["time"] == "13:00"
    assert summary["step"] == "select_slot"
