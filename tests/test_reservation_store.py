"""
Tests for the reservation store
"""

import pytest
from datetime import date

from clubhouse.core.errors import RemoteError
from clubhouse.services.reservation_store import ReservationStore

from conftest import FailingDataService

DAY = date(2030, 5, 10)

@pytest.fixture
def booked_store(reservation_store):
    """Store holding one reservation: table 1 at 10:00"""
    result = reservation_store.add(1, DAY, "10:00", "Ana", "m-1", "600 111 222")
    assert result.success
    return reservation_store

def test_add_reservation(reservation_store):
    """A free slot is booked and appended to the local list"""
    result = reservation_store.add(1, DAY, "10:00", "Ana")

    assert result.success
    assert result.message == "Reserva confirmada"
    assert result.data.table_id == 1
    assert result.data.date == DAY
    assert result.data.member_id == ""
    assert len(reservation_store.list()) == 1

def test_add_conflict_on_taken_slot(booked_store):
    """Same table, date and hour is rejected without touching the list"""
    result = booked_store.add(1, DAY, "10:00", "Luis")

    assert not result.success
    assert result.error_code == "conflict"
    assert result.message == "Este horario ya está reservado"
    assert len(booked_store.list()) == 1

def test_add_next_hour_succeeds(booked_store):
    result = booked_store.add(1, DAY, "11:00", "Luis")

    assert result.success
    assert len(booked_store.list()) == 2

def test_same_hour_other_table_is_free(booked_store):
    assert booked_store.add(2, DAY, "10:00", "Luis").success

def test_conflict_detected_by_data_service(booked_store, data_service):
    """A second store with a stale list still cannot double-book"""
    stale = ReservationStore(data_service)
    stale.refresh()
    stale._reservations = []

    result = stale.add(1, DAY, "10:00", "Luis")

    assert not result.success
    assert result.error_code == "conflict"

def test_add_missing_fields(reservation_store):
    for args in [(None, DAY, "10:00", "Ana"), (1, None, "10:00", "Ana"), (1, DAY, "", "Ana"), (1, DAY, "10:00", "  ")]:
        result = reservation_store.add(*args)
        assert not result.success
        assert result.error_code == "validation_error"
        assert result.message == "Faltan datos obligatorios"

def test_add_unknown_table_and_hour(reservation_store):
    assert reservation_store.add(9, DAY, "10:00", "Ana").message == "Mesa desconocida"
    assert reservation_store.add(1, DAY, "21:00", "Ana").message == "Hora no válida"
    assert reservation_store.add(1, "10/05/2030", "10:00", "Ana").message == "Fecha no válida"

def test_add_accepts_iso_strings(reservation_store):
    result = reservation_store.add("2", "2030-05-10", "12:00", "Ana")

    assert result.success
    assert reservation_store.is_occupied(2, DAY, "12:00")

def test_is_occupied(booked_store):
    assert booked_store.is_occupied(1, DAY, "10:00")
    assert booked_store.is_occupied("1", "2030-05-10", "10:00")
    assert not booked_store.is_occupied(1, DAY, "11:00")
    assert not booked_store.is_occupied(3, DAY, "10:00")
    assert not booked_store.is_occupied("x", DAY, "10:00")

def test_delete_removes_exactly_one(booked_store):
    other = booked_store.add(2, DAY, "10:00", "Luis").data
    target = booked_store.list()[0]

    result = booked_store.delete(target.id)

    assert result.success
    assert result.message == "Reserva cancelada con éxito."
    assert [r.id for r in booked_store.list()] == [other.id]
    assert not booked_store.is_occupied(target.table_id, target.date, target.time)

def test_delete_unknown_id_succeeds(booked_store):
    result = booked_store.delete("does-not-exist")

    assert result.success
    assert len(booked_store.list()) == 1

def test_freed_slot_can_be_booked_again(booked_store):
    booked_store.delete(booked_store.list()[0].id)

    assert booked_store.add(1, DAY, "10:00", "Luis").success

def test_get_reservation(booked_store):
    reservation = booked_store.list()[0]

    assert booked_store.get(reservation.id).data == reservation
    missing = booked_store.get("nope")
    assert not missing.success
    assert missing.error_code == "not_found"

def test_refresh_reloads_from_data_service(booked_store, data_service):
    fresh = ReservationStore(data_service)

    assert fresh.refresh().success
    assert [r.id for r in fresh.list()] == [r.id for r in booked_store.list()]

def test_remote_failures_are_reported():
    store = ReservationStore(FailingDataService())

    refreshed = store.refresh()
    assert not refreshed.success
    assert refreshed.error_code == "remote_error"

    store._loaded = True
    added = store.add(1, DAY, "10:00", "Ana")
    assert not added.success
    assert added.message == "connection refused"
    assert store.list() == []

def test_remote_delete_failure_keeps_local_entry(booked_store, monkeypatch):
    def fail(reservation_id):
        raise RemoteError("timeout")

    monkeypatch.setattr(booked_store.data_service, "delete_reservation", fail)
    result = booked_store.delete(booked_store.list()[0].id)

    assert not result.success
    assert result.error_code == "remote_error"
    assert len(booked_store.list()) == 1

def test_grouping_by_date(reservation_store):
    reservation_store.add(1, date(2030, 5, 11), "09:00", "Ana", "m-1")
    reservation_store.add(2, DAY, "18:00", "Luis", "m-2")
    reservation_store.add(3, DAY, "10:00", "Ana", "m-1")

    grouped = reservation_store.by_date()

    assert list(grouped.keys()) == [DAY, date(2030, 5, 11)]
    assert [r.time for r in grouped[DAY]] == ["10:00", "18:00"]
    assert [r.time for r in reservation_store.for_date(DAY)] == ["10:00", "18:00"]
    assert len(reservation_store.for_member("m-1")) == 2
    assert reservation_store.for_member("") == []
