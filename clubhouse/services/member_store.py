"""
Member store: in-memory member list kept in name order
"""

import logging
import secrets
import unicodedata
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as SchemaError

from clubhouse.core.config import settings
from clubhouse.core.errors import NotFoundError, RemoteError, StoreError, ValidationError
from clubhouse.schemas.common import StoreResult
from clubhouse.schemas.member import MemberProfile, MemberRecord, MemberUpdate

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Código incorrecto"
UPDATABLE_FIELDS = ("name", "photo_url", "is_admin")
PHOTO_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def generate_access_code() -> str:
    """Uniform in [1000, 9999); collisions with existing codes are not checked"""
    return str(1000 + secrets.randbelow(8999))


def name_key(name: str) -> str:
    """Case and accent insensitive sort key ("Ángel" sorts with "Angel")"""
    decomposed = unicodedata.normalize("NFKD", name or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


class MemberStore:
    """Holds the loaded members; every mutation goes through the data service"""

    def __init__(self, data_service):
        self.data_service = data_service
        self._members: List[MemberRecord] = []
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.refresh()

    def _sort(self) -> None:
        self._members.sort(key=lambda m: name_key(m.name))

    @staticmethod
    def _validate(row) -> MemberRecord:
        try:
            return MemberRecord.model_validate(row)
        except SchemaError as e:
            raise RemoteError(f"Socio con formato inesperado: {e}") from e

    def refresh(self) -> StoreResult:
        try:
            self._members = [self._validate(row) for row in self.data_service.list_members()]
        except StoreError as e:
            logger.error(f"Error fetching members: {e.message}")
            return StoreResult.fail(e)
        self._sort()
        self._loaded = True
        return StoreResult.ok(data=len(self._members))

    def list(self) -> List[MemberRecord]:
        self._ensure_loaded()
        return list(self._members)

    def get(self, member_id: str) -> Optional[MemberRecord]:
        self._ensure_loaded()
        return next((m for m in self._members if m.id == member_id), None)

    def add(self, name: str) -> StoreResult:
        self._ensure_loaded()
        name = (name or "").strip()
        try:
            if not name:
                raise ValidationError("El nombre es obligatorio")
            member = self._validate(self.data_service.create_member({
                "name": name,
                "access_code": generate_access_code(),
            }))
        except StoreError as e:
            logger.error(f"Error adding member: {e.message}")
            return StoreResult.fail(e)

        self._members.append(member)
        self._sort()
        logger.info(f"Member {member.id} added")
        return StoreResult.ok(data=member, message="Socio añadido")

    def delete(self, member_id: str) -> StoreResult:
        self._ensure_loaded()
        try:
            self.data_service.delete_member(member_id)
        except StoreError as e:
            logger.error(f"Error deleting member {member_id}: {e.message}")
            return StoreResult.fail(e)

        self._members = [m for m in self._members if m.id != member_id]
        return StoreResult.ok(message="Socio eliminado")

    def update(self, member_id: str, fields) -> StoreResult:
        """Apply a partial update; accepts a MemberUpdate or a plain dict"""
        self._ensure_loaded()
        if isinstance(fields, MemberUpdate):
            fields = fields.model_dump(exclude_none=True)
        values: Dict[str, Any] = {k: v for k, v in dict(fields).items() if k in UPDATABLE_FIELDS}

        try:
            if not values:
                raise ValidationError("No hay cambios que guardar")
            if "name" in values:
                values["name"] = (values["name"] or "").strip()
                if not values["name"]:
                    raise ValidationError("El nombre es obligatorio")
            member = self._validate(self.data_service.update_member(member_id, values))
        except StoreError as e:
            logger.error(f"Error updating member {member_id}: {e.message}")
            return StoreResult.fail(e)

        self._members = [member if m.id == member_id else m for m in self._members]
        self._sort()
        return StoreResult.ok(data=member, message="Socio actualizado")

    def upload_photo(self, member_id: str, filename: str, content: bytes, content_type: Optional[str] = None) -> StoreResult:
        """Store the image, then point the member's photo_url at its public address"""
        try:
            if not content:
                raise ValidationError("El archivo está vacío")
            if len(content) > settings.MAX_UPLOAD_SIZE:
                raise ValidationError("El archivo es demasiado grande")

            ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""
            if ext not in PHOTO_TYPES or (content_type and content_type not in PHOTO_TYPES.values()):
                raise ValidationError("Formato de imagen no válido (jpg, png, gif o webp)")
            content_type = PHOTO_TYPES[ext]
            path = f"avatars/{member_id}-{secrets.token_hex(8)}.{ext}"
            storage = self.data_service.storage
            storage.upload(settings.PHOTO_BUCKET, path, content, content_type)
            public_url = storage.public_url(settings.PHOTO_BUCKET, path)
        except StoreError as e:
            logger.error(f"Error uploading photo for member {member_id}: {e.message}")
            return StoreResult.fail(e)

        return self.update(member_id, {"photo_url": public_url})

    def check_access(self, code: str) -> StoreResult:
        """Exact-match lookup; every failure is the same generic error"""
        try:
            rows = self.data_service.find_members_by_code(code or "")
            matches = [self._validate(row) for row in rows]
        except StoreError as e:
            logger.error(f"Error validating access code: {e.message}")
            matches = []

        if len(matches) != 1 or matches[0].access_code != code:
            return StoreResult.fail(NotFoundError(INVALID_CODE_MESSAGE))

        member = matches[0]
        profile = MemberProfile(
            id=member.id,
            name=member.name,
            code=member.access_code,
            is_admin=member.is_admin,
            photo_url=member.photo_url,
        )
        return StoreResult.ok(data=profile)

    def import_names(self, names: Iterable[str]) -> StoreResult:
        """Seed import: add every name not already present"""
        self._ensure_loaded()
        existing = {m.name for m in self._members}
        created, skipped, errors = 0, 0, []
        for name in names:
            name = (name or "").strip()
            if not name or name in existing:
                skipped += 1
                continue
            result = self.add(name)
            if result.success:
                created += 1
                existing.add(name)
            else:
                errors.append(f"{name}: {result.message}")

        data = {"created": created, "skipped": skipped, "errors": errors}
        if errors and not created:
            return StoreResult(success=False, message="No se pudo importar ningún socio",
                               error_code=RemoteError.error_code, data=data)
        return StoreResult.ok(data=data, message=f"{created} socios importados")
