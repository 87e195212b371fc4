from fastapi import APIRouter, Depends, HTTPException, status

from laborportal.api.errors import raise_for_outcome
from laborportal.core.config import Settings, get_settings
from laborportal.core.security import get_principal, get_recruiter_principal
from laborportal.schemas.jobs import ApplicantDetails, Job, JobCreate
from laborportal.services.applicants import ApplicantManager
from laborportal.services.factory import get_store
from laborportal.services.jobs import JobStore
from laborportal.services.laborers import normalize_contact
from laborportal.services.store import Store, StoreError
from laborportal.services.views import JobViews

router = APIRouter()


@router.get("", response_model=list[Job])
async def list_open_jobs(store: Store = Depends(get_store)) -> list[Job]:
    try:
        return await JobViews(store).get_open_jobs()
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("", response_model=Job, status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    principal=Depends(get_recruiter_principal),
    store: Store = Depends(get_store),
) -> Job:
    try:
        return await JobStore(store).add_job(payload, created_by=principal.username)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.get("/{job_id}", response_model=Job)
async def get_job(job_id: str, store: Store = Depends(get_store)) -> Job:
    try:
        job = await JobStore(store).get_job(job_id)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="job not found")
    return job


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    principal=Depends(get_recruiter_principal),
    store: Store = Depends(get_store),
) -> None:
    try:
        deleted = await JobStore(store).delete_job(job_id, by_user=principal.username)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="job not found")


@router.post("/{job_id}/applicants", response_model=Job)
async def apply_to_job(
    job_id: str,
    payload: ApplicantDetails,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> Job:
    manager = ApplicantManager(store, expected_passkey=settings.laborer_passkey)
    outcome = await manager.apply_to_job_with_details(job_id, payload)
    if not outcome.ok or outcome.value is None:
        raise_for_outcome(outcome)
    return outcome.value


@router.delete("/{job_id}/applicants/{contact}", response_model=Job)
async def unapply_from_job(
    job_id: str,
    contact: str,
    principal=Depends(get_principal),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> Job:
    manager = ApplicantManager(store, expected_passkey=settings.laborer_passkey)
    if principal.session.role == "laborer":
        if principal.session.contact != normalize_contact(contact):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="cannot withdraw another laborer")
    else:
        try:
            principal.require_role("recruiter")
            job = await manager.jobs.get_job(job_id)
        except PermissionError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
        except StoreError as exc:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
        if job is not None and job.created_by != principal.username:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="job owned by another recruiter")

    outcome = await manager.unapply_from_job_by_contact(job_id, contact)
    if not outcome.ok or outcome.value is None:
        raise_for_outcome(outcome)
    return outcome.value
