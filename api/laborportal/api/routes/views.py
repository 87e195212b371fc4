from fastapi import APIRouter, Depends, HTTPException, status

from laborportal.core.security import get_laborer_principal, get_recruiter_principal
from laborportal.schemas.jobs import Job
from laborportal.services.factory import get_store
from laborportal.services.store import Store, StoreError
from laborportal.services.views import JobViews

router = APIRouter()


@router.get("/recruiter/jobs", response_model=list[Job])
async def recruiter_jobs(principal=Depends(get_recruiter_principal), store: Store = Depends(get_store)) -> list[Job]:
    try:
        return await JobViews(store).get_jobs_for_recruiter(principal.username)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.get("/laborer/jobs", response_model=list[Job])
async def laborer_jobs(principal=Depends(get_laborer_principal), store: Store = Depends(get_store)) -> list[Job]:
    try:
        return await JobViews(store).get_jobs_for_laborer(principal.username)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
