from fastapi import Depends, Header, HTTPException, status

from laborportal.core.auth import Principal, parse_session_header
from laborportal.schemas.sessions import Role
from laborportal.services.factory import get_store
from laborportal.services.sessions import NO_SESSION, SessionManager
from laborportal.services.store import Store, StoreError

SESSION_HEADER = "X-Session-Id"


def get_session_id(x_session_id: str | None = Header(default=None, alias=SESSION_HEADER)) -> str | None:
    return parse_session_header(x_session_id)


async def get_principal(
    store: Store = Depends(get_store),
    session_id: str | None = Depends(get_session_id),
) -> Principal:
    return await _resolve_principal(store, session_id, None)


async def get_recruiter_principal(
    store: Store = Depends(get_store),
    session_id: str | None = Depends(get_session_id),
) -> Principal:
    return await _resolve_principal(store, session_id, "recruiter")


async def get_laborer_principal(
    store: Store = Depends(get_store),
    session_id: str | None = Depends(get_session_id),
) -> Principal:
    return await _resolve_principal(store, session_id, "laborer")


async def _resolve_principal(store: Store, session_id: str | None, role: Role | None) -> Principal:
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"session auth requires {SESSION_HEADER}",
        )

    try:
        check = await SessionManager(store, session_id).require_role(role)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    if not check.ok or check.session is None:
        if check.reason == NO_SESSION:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="no active session")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role} session required")

    return Principal(session_id=session_id, session=check.session)
