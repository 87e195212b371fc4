from __future__ import annotations

from dataclasses import dataclass
import logging

from pydantic import ValidationError

from laborportal.schemas.sessions import Role, Session
from laborportal.services.store import Store

logger = logging.getLogger(__name__)

NO_SESSION = "no_session"
WRONG_ROLE = "wrong_role"


@dataclass(slots=True)
class RoleCheck:
    ok: bool
    reason: str | None = None
    session: Session | None = None


class SessionManager:
    """Holds the single active session of one client context.

    The context is the ``session_key``; every client gets its own key, so
    concurrent logical sessions never overwrite each other. Within one key the
    last write wins.
    """

    def __init__(self, store: Store, session_key: str) -> None:
        self.store = store
        self.session_key = session_key

    async def get_session(self) -> Session | None:
        raw = await self.store.get_session(self.session_key)
        if raw is None:
            return None
        try:
            return Session.model_validate(raw)
        except ValidationError:
            logger.warning("discarding malformed session for key=%s", self.session_key)
            return None

    async def set_session(self, session: Session) -> None:
        await self.store.set_session(self.session_key, session.model_dump())

    async def clear_session(self) -> None:
        await self.store.clear_session(self.session_key)

    async def require_role(self, expected_role: Role | None = None) -> RoleCheck:
        session = await self.get_session()
        if session is None:
            return RoleCheck(ok=False, reason=NO_SESSION)
        if expected_role and session.role != expected_role:
            return RoleCheck(ok=False, reason=WRONG_ROLE)
        return RoleCheck(ok=True, session=session)
