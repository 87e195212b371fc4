from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status

from laborportal.api.errors import raise_for_outcome
from laborportal.core.config import Settings, get_settings
from laborportal.core.security import get_principal, get_session_id
from laborportal.schemas.sessions import LaborerLoginRequest, RecruiterLoginRequest, Session, SessionOut
from laborportal.services.factory import get_store
from laborportal.services.laborers import LaborerRegistry, login_laborer
from laborportal.services.recruiters import RecruiterProvisioning
from laborportal.services.sessions import SessionManager
from laborportal.services.store import Store, StoreError

router = APIRouter()


@router.post("/recruiter", response_model=SessionOut)
async def recruiter_login(
    payload: RecruiterLoginRequest,
    store: Store = Depends(get_store),
    session_id: str | None = Depends(get_session_id),
) -> SessionOut:
    session_id = session_id or uuid4().hex
    provisioning = RecruiterProvisioning(store, SessionManager(store, session_id))
    outcome = await provisioning.verify_or_setup_recruiter(payload.email, payload.password)
    if not outcome.ok or outcome.value is None:
        raise_for_outcome(outcome)
    return SessionOut(session_id=session_id, session=outcome.value.session, setup=outcome.value.setup)


@router.post("/laborer", response_model=SessionOut)
async def laborer_login(
    payload: LaborerLoginRequest,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
    session_id: str | None = Depends(get_session_id),
) -> SessionOut:
    session_id = session_id or uuid4().hex
    outcome = await login_laborer(
        SessionManager(store, session_id),
        LaborerRegistry(store),
        payload.name,
        payload.contact,
        payload.passkey,
        expected_passkey=settings.laborer_passkey,
    )
    if not outcome.ok or outcome.value is None:
        raise_for_outcome(outcome)
    return SessionOut(session_id=session_id, session=outcome.value)


@router.get("/me", response_model=Session)
async def current_session(principal=Depends(get_principal)) -> Session:
    return principal.session


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def logout(principal=Depends(get_principal), store: Store = Depends(get_store)) -> None:
    try:
        await SessionManager(store, principal.session_id).clear_session()
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
