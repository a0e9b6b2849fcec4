"""
Access gate: turns a member access code into a session context
"""

import logging
import secrets
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import ValidationError as SchemaError

from clubhouse.core.errors import StoreError
from clubhouse.schemas.common import StoreResult
from clubhouse.schemas.member import MemberProfile
from clubhouse.schemas.session import SessionContext

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    LOCKED = "locked"
    VALIDATING = "validating"
    GRANTED = "granted"


class SessionRegistry:
    """Session contexts keyed by token, persisted through the data service so
    grants survive restarts. In-progress booking flows are kept in memory only."""

    def __init__(self, data_service):
        self.data_service = data_service
        self._sessions: Dict[str, SessionContext] = {}
        self.bookings: Dict[str, object] = {}

    def load(self) -> int:
        """Read persisted sessions; on a backend failure start empty"""
        try:
            rows = self.data_service.list_sessions()
            self._sessions = {row["token"]: SessionContext.model_validate(row) for row in rows}
        except StoreError as e:
            logger.error(f"Could not load sessions: {e.message}")
            self._sessions = {}
        except SchemaError as e:
            logger.error(f"Session with unexpected format: {e}")
            self._sessions = {}
        return len(self._sessions)

    def get(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        return self._sessions.get(token)

    def save(self, context: SessionContext) -> None:
        """Persist first; raises StoreError when the backend rejects it"""
        self.data_service.save_session(context.model_dump())
        self._sessions[context.token] = context

    def remove(self, token: str) -> Optional[SessionContext]:
        self.bookings.pop(token, None)
        context = self._sessions.pop(token, None)
        if context:
            try:
                self.data_service.delete_session(token)
            except StoreError as e:
                logger.error(f"Could not delete session of member {context.member_id}: {e.message}")
        return context

    def refresh_member(self, member_id: str, **fields) -> None:
        """Mirror profile changes into every session of that member"""
        for token, context in list(self._sessions.items()):
            if context.member_id == member_id:
                updated = context.model_copy(update=fields)
                self._sessions[token] = updated
                try:
                    self.data_service.save_session(updated.model_dump())
                except StoreError as e:
                    logger.error(f"Could not update session of member {member_id}: {e.message}")

    def drop_member(self, member_id: str) -> None:
        for token, context in list(self._sessions.items()):
            if context.member_id == member_id:
                self.remove(token)


class AccessGate:
    """Per-client gate: Locked -> Validating -> Granted, or back to Locked on failure"""

    def __init__(self, member_store, registry: SessionRegistry, token: Optional[str] = None):
        self.member_store = member_store
        self.registry = registry
        self.session = registry.get(token)
        self.state = GateState.GRANTED if self.session else GateState.LOCKED
        self.error: Optional[str] = None
        self.entered_code = ""

    @property
    def granted(self) -> bool:
        return self.state == GateState.GRANTED

    def submit(self, code: str) -> StoreResult:
        if self.granted:
            return StoreResult.ok(data=self.session)

        self.entered_code = code or ""
        self.state = GateState.VALIDATING
        result = self.member_store.check_access(code)

        if not result.success:
            self.state = GateState.LOCKED
            self.error = result.message
            self.entered_code = ""
            return result

        profile: MemberProfile = result.data
        session = SessionContext(
            token=secrets.token_urlsafe(32),
            member_id=profile.id,
            member_name=profile.name,
            access_code=profile.code,
            photo_url=profile.photo_url,
            is_admin=profile.is_admin,
            granted_at=datetime.utcnow(),
        )
        try:
            self.registry.save(session)
        except StoreError as e:
            logger.error(f"Could not store session for member {profile.id}: {e.message}")
            self.state = GateState.LOCKED
            self.error = e.message
            self.entered_code = ""
            return StoreResult.fail(e)

        self.session = session
        self.state = GateState.GRANTED
        self.error = None
        logger.info(f"Access granted to member {profile.id}")
        return StoreResult.ok(data=self.session, message=f"¡Bienvenido {profile.name}!")

    def logout(self) -> None:
        """Clear all session state and lock again"""
        if self.session:
            self.registry.remove(self.session.token)
            logger.info(f"Member {self.session.member_id} logged out")
        self.session = None
        self.state = GateState.LOCKED
        self.error = None
        self.entered_code = ""
