"""
Data service abstracting storage (SQLAlchemy vs Firebase Firestore).

Only the stores talk to this layer. Every backend failure is raised as one of
the error kinds in clubhouse.core.errors so the stores can report it.
"""

from __future__ import annotations

import os
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as gexc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from clubhouse.core.config import settings
from clubhouse.core.errors import ConflictError, NotFoundError, RemoteError
from clubhouse.models import Member, MemberSession, Reservation
from clubhouse.services.firebase_client import get_firestore_client, get_storage_bucket

SLOT_TAKEN_MESSAGE = "Este horario ya está reservado"


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _row_to_dict(row) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


# -------- Object storage --------

class LocalObjectStorage:
    """Stores uploads on disk; files are served by the app under /uploads"""

    def __init__(self, root: str, base_url: str):
        self.root = root
        self.base_url = base_url.rstrip("/")

    def upload(self, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        target = os.path.join(self.root, bucket, *path.split("/"))
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, "wb") as f:
                f.write(content)
        except OSError as e:
            raise RemoteError(str(e)) from e

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/uploads/{bucket}/{path}"


class FirebaseObjectStorage:
    """Stores uploads in the project's Cloud Storage bucket"""

    def upload(self, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        blob = get_storage_bucket().blob(f"{bucket}/{path}")
        try:
            blob.upload_from_string(content, content_type=content_type)
            blob.make_public()
        except gexc.GoogleAPICallError as e:
            raise RemoteError(str(e)) from e

    def public_url(self, bucket: str, path: str) -> str:
        return get_storage_bucket().blob(f"{bucket}/{path}").public_url


# -------- SQLAlchemy backend --------

class SqlDataService:
    def __init__(self, session_factory: sessionmaker, storage):
        self.session_factory = session_factory
        self.storage = storage

    @contextmanager
    def _session(self):
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            raise RemoteError(str(e.orig) if getattr(e, "orig", None) else str(e)) from e
        finally:
            db.close()

    # reservations

    def list_reservations(self) -> List[Dict[str, Any]]:
        with self._session() as db:
            rows = db.query(Reservation).order_by(Reservation.date, Reservation.time).all()
            return [_row_to_dict(r) for r in rows]

    def create_reservation(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._session() as db:
            reservation = Reservation(**values)
            db.add(reservation)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise ConflictError(SLOT_TAKEN_MESSAGE) from e
            db.refresh(reservation)
            return _row_to_dict(reservation)

    def delete_reservation(self, reservation_id: str) -> None:
        with self._session() as db:
            db.query(Reservation).filter(Reservation.id == reservation_id).delete()
            db.commit()

    # members

    def list_members(self) -> List[Dict[str, Any]]:
        with self._session() as db:
            return [_row_to_dict(m) for m in db.query(Member).order_by(Member.name).all()]

    def create_member(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._session() as db:
            member = Member(**values)
            db.add(member)
            db.commit()
            db.refresh(member)
            return _row_to_dict(member)

    def delete_member(self, member_id: str) -> None:
        with self._session() as db:
            db.query(Member).filter(Member.id == member_id).delete()
            db.commit()

    def update_member(self, member_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._session() as db:
            member = db.query(Member).filter(Member.id == member_id).first()
            if not member:
                raise NotFoundError("Socio no encontrado")
            for key, value in values.items():
                setattr(member, key, value)
            db.commit()
            db.refresh(member)
            return _row_to_dict(member)

    def find_members_by_code(self, access_code: str) -> List[Dict[str, Any]]:
        with self._session() as db:
            rows = db.query(Member).filter(Member.access_code == access_code).limit(2).all()
            return [_row_to_dict(m) for m in rows]

    # sessions

    def list_sessions(self) -> List[Dict[str, Any]]:
        with self._session() as db:
            return [_row_to_dict(s) for s in db.query(MemberSession).all()]

    def save_session(self, values: Dict[str, Any]) -> None:
        """Insert or replace the session with this token"""
        with self._session() as db:
            db.merge(MemberSession(**values))
            db.commit()

    def delete_session(self, token: str) -> None:
        with self._session() as db:
            db.query(MemberSession).filter(MemberSession.token == token).delete()
            db.commit()


# -------- Firestore backend --------

class FirestoreDataService:
    """Collections "reservations" and "members"; "reservation_slots/{table}_{date}_{time}"
    holds one lock document per booked slot, written in the same batch as the reservation.
    """

    def __init__(self, storage):
        self.storage = storage

    @property
    def fs(self):
        return get_firestore_client()

    @contextmanager
    def _calls(self):
        try:
            yield
        except gexc.GoogleAPICallError as e:
            raise RemoteError(str(e)) from e

    @staticmethod
    def _slot_key(table_id: int, day: date, time: str) -> str:
        return f"{table_id}_{day.isoformat()}_{time}"

    @staticmethod
    def _doc_to_dict(doc) -> Dict[str, Any]:
        item = doc.to_dict()
        item["id"] = doc.id
        return item

    # reservations

    def list_reservations(self) -> List[Dict[str, Any]]:
        with self._calls():
            docs = self.fs.collection("reservations").get()
            return [self._doc_to_dict(d) for d in docs]

    def create_reservation(self, values: Dict[str, Any]) -> Dict[str, Any]:
        reservation_id = uuid.uuid4().hex
        data = dict(values)
        data["date"] = values["date"].isoformat()
        data["created_at"] = datetime.utcnow().isoformat()

        batch = self.fs.batch()
        batch.create(
            self.fs.collection("reservation_slots").document(
                self._slot_key(values["table_id"], values["date"], values["time"])
            ),
            {"reservation_id": reservation_id},
        )
        batch.create(self.fs.collection("reservations").document(reservation_id), data)
        try:
            with self._calls():
                batch.commit()
        except RemoteError as e:
            if isinstance(e.__cause__, gexc.AlreadyExists):
                raise ConflictError(SLOT_TAKEN_MESSAGE) from e
            raise
        data["id"] = reservation_id
        return data

    def delete_reservation(self, reservation_id: str) -> None:
        with self._calls():
            ref = self.fs.collection("reservations").document(reservation_id)
            doc = ref.get()
            if not doc.exists:
                return
            item = doc.to_dict()
            batch = self.fs.batch()
            batch.delete(ref)
            batch.delete(
                self.fs.collection("reservation_slots").document(
                    self._slot_key(item["table_id"], date.fromisoformat(item["date"]), item["time"])
                )
            )
            batch.commit()

    # members

    def list_members(self) -> List[Dict[str, Any]]:
        with self._calls():
            docs = self.fs.collection("members").order_by("name").get()
            return [self._doc_to_dict(d) for d in docs]

    def create_member(self, values: Dict[str, Any]) -> Dict[str, Any]:
        member_id = uuid.uuid4().hex
        data = {"is_admin": False, "photo_url": None, **values, "created_at": datetime.utcnow().isoformat()}
        with self._calls():
            self.fs.collection("members").document(member_id).set(data)
        data["id"] = member_id
        return data

    def delete_member(self, member_id: str) -> None:
        with self._calls():
            self.fs.collection("members").document(member_id).delete()

    def update_member(self, member_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._calls():
            ref = self.fs.collection("members").document(member_id)
            if not ref.get().exists:
                raise NotFoundError("Socio no encontrado")
            ref.set(values, merge=True)
            return self._doc_to_dict(ref.get())

    def find_members_by_code(self, access_code: str) -> List[Dict[str, Any]]:
        with self._calls():
            docs = self.fs.collection("members").where("access_code", "==", access_code).limit(2).get()
            return [self._doc_to_dict(d) for d in docs]

    # sessions

    def list_sessions(self) -> List[Dict[str, Any]]:
        with self._calls():
            return [d.to_dict() for d in self.fs.collection("sessions").get()]

    def save_session(self, values: Dict[str, Any]) -> None:
        data = dict(values)
        data["granted_at"] = values["granted_at"].isoformat()
        with self._calls():
            self.fs.collection("sessions").document(values["token"]).set(data)

    def delete_session(self, token: str) -> None:
        with self._calls():
            self.fs.collection("sessions").document(token).delete()


def get_data_service():
    """Build the data service selected by configuration"""
    if use_firestore():
        return FirestoreDataService(FirebaseObjectStorage())

    from clubhouse.core.db import SessionLocal
    return SqlDataService(SessionLocal, LocalObjectStorage(settings.UPLOAD_DIR, settings.BASE_URL))
