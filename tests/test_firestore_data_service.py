"""
Tests for the Firestore data service against an in-memory client
"""

import pytest
from datetime import date, datetime
from google.api_core import exceptions as gexc

from clubhouse.core.errors import ConflictError, NotFoundError, RemoteError
from clubhouse.services import data_service as data_service_module
from clubhouse.services import member_store as member_store_module
from clubhouse.services.data_service import FirestoreDataService
from clubhouse.services.member_store import MemberStore
from clubhouse.services.reservation_store import ReservationStore

DAY = date(2030, 5, 10)

class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None

class FakeDocument:
    def __init__(self, db, collection, doc_id):
        self.db = db
        self.collection = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self.db.data.setdefault(self.collection, {})

    def get(self):
        return FakeSnapshot(self.id, self._docs.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._docs:
            self._docs[self.id].update(data)
        else:
            self._docs[self.id] = dict(data)

    def delete(self):
        self._docs.pop(self.id, None)

class FakeQuery:
    def __init__(self, db, collection, filters=(), order=None, limit=None):
        self.db = db
        self.collection = collection
        self.filters = list(filters)
        self.order = order
        self.count = limit

    def document(self, doc_id):
        return FakeDocument(self.db, self.collection, doc_id)

    def where(self, field, op, value):
        return FakeQuery(self.db, self.collection, self.filters + [(field, value)], self.order, self.count)

    def order_by(self, field):
        return FakeQuery(self.db, self.collection, self.filters, field, self.count)

    def limit(self, count):
        return FakeQuery(self.db, self.collection, self.filters, self.order, count)

    def get(self):
        if self.db.fail_with:
            raise self.db.fail_with
        items = [
            (doc_id, data) for doc_id, data in self.db.data.get(self.collection, {}).items()
            if all(data.get(field) == value for field, value in self.filters)
        ]
        if self.order:
            items.sort(key=lambda item: item[1][self.order])
        if self.count is not None:
            items = items[:self.count]
        return [FakeSnapshot(doc_id, dict(data)) for doc_id, data in items]

class FakeBatch:
    """Applies all writes or none; create fails on an existing document"""

    def __init__(self, db):
        self.db = db
        self.creates = []
        self.deletes = []

    def create(self, ref, data):
        self.creates.append((ref, data))

    def delete(self, ref):
        self.deletes.append(ref)

    def commit(self):
        for ref, data in self.creates:
            if ref.get().exists:
                raise gexc.AlreadyExists(f"Document already exists: {ref.collection}/{ref.id}")
        for ref, data in self.creates:
            ref.set(data)
        for ref in self.deletes:
            ref.delete()

class FakeFirestore:
    def __init__(self):
        self.data = {}
        self.fail_with = None

    def collection(self, name):
        return FakeQuery(self, name)

    def batch(self):
        return FakeBatch(self)

@pytest.fixture
def firestore(monkeypatch):
    client = FakeFirestore()
    monkeypatch.setattr(data_service_module, "get_firestore_client", lambda: client)
    return client

@pytest.fixture
def service(firestore):
    return FirestoreDataService(storage=None)

def reservation_values(time="10:00", table_id=1):
    return {
        "table_id": table_id,
        "date": DAY,
        "time": time,
        "customer_name": "Ana",
        "member_id": "m-1",
        "mobile": None,
    }

def test_create_reservation_writes_slot_lock(service, firestore):
    created = service.create_reservation(reservation_values())

    assert firestore.data["reservations"][created["id"]]["date"] == "2030-05-10"
    assert firestore.data["reservation_slots"]["1_2030-05-10_10:00"] == {"reservation_id": created["id"]}

def test_second_create_on_same_slot_conflicts(service, firestore):
    service.create_reservation(reservation_values())

    with pytest.raises(ConflictError) as exc:
        service.create_reservation(reservation_values())

    assert exc.value.message == "Este horario ya está reservado"
    assert len(firestore.data["reservations"]) == 1

def test_stale_store_gets_conflict(service):
    first = ReservationStore(service)
    stale = ReservationStore(service)
    stale.refresh()

    assert first.add(1, DAY, "10:00", "Ana").success
    result = stale.add(1, DAY, "10:00", "Luis")

    assert not result.success
    assert result.error_code == "conflict"
    assert result.message == "Este horario ya está reservado"

def test_delete_releases_slot(service, firestore):
    store = ReservationStore(service)
    reservation = store.add(1, DAY, "10:00", "Ana").data

    assert store.delete(reservation.id).success
    assert firestore.data["reservation_slots"] == {}
    assert firestore.data["reservations"] == {}

    assert store.add(1, DAY, "10:00", "Luis").success

def test_delete_unknown_reservation(service):
    service.delete_reservation("missing")

def test_reservations_reload(service):
    service.create_reservation(reservation_values("18:00", 2))

    store = ReservationStore(service)

    assert store.refresh().success
    assert store.is_occupied(2, DAY, "18:00")

def test_backend_failure_is_remote_error(service, firestore):
    firestore.fail_with = gexc.ServiceUnavailable("backend down")

    with pytest.raises(RemoteError):
        service.list_reservations()

    result = ReservationStore(service).refresh()
    assert not result.success
    assert result.error_code == "remote_error"

def test_members(service, monkeypatch):
    codes = iter(["1111", "2222"])
    monkeypatch.setattr(member_store_module, "generate_access_code", lambda: next(codes))
    members = MemberStore(service)
    ana = members.add("Ana").data
    members.add("Bea")

    assert [m["name"] for m in service.list_members()] == ["Ana", "Bea"]
    assert members.check_access("1111").data.id == ana.id

    updated = members.update(ana.id, {"name": "Zoe"})
    assert updated.success
    assert updated.data.access_code == ana.access_code

    with pytest.raises(NotFoundError):
        service.update_member("missing", {"name": "Zoe"})

def test_sessions(service):
    service.save_session({
        "token": "tok",
        "member_id": "m-1",
        "member_name": "Ana",
        "access_code": "1234",
        "photo_url": None,
        "is_admin": False,
        "granted_at": datetime(2030, 5, 10, 12, 0),
    })

    rows = service.list_sessions()
    assert rows[0]["token"] == "tok"
    assert rows[0]["granted_at"] == "2030-05-10T12:00:00"

    service.delete_session("tok")
    assert service.list_sessions() == []
