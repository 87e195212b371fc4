from __future__ import annotations

import logging
from typing import Any

from laborportal.schemas.jobs import Applicant, Job
from laborportal.schemas.sessions import Laborer, RecruiterCredential
from laborportal.services.normalize import EPOCH, coerce_datetime
from laborportal.services.store import JobQuery, KeyValueStore, MemoryKeyValueStore, Store

logger = logging.getLogger(__name__)

JOBS_KEY = "lp_jobs"
LABORERS_KEY = "lp_laborers"
RECRUITER_EMAIL_KEY = "lp_recruiter_email"
RECRUITER_PASS_HASH_KEY = "lp_recruiter_pass_hash"


class LocalStore(Store):
    """Whole dataset serialized as JSON text under a handful of keys.

    Jobs keep the camelCase record layout of the browser build so existing data
    loads unchanged. Each mutation reads, changes and writes the job list with no
    await in between.
    """

    def __init__(self, kv: KeyValueStore | None = None) -> None:
        if kv is None:
            kv = MemoryKeyValueStore()
        super().__init__(session_kv=kv)
        self.kv = kv

    async def get_recruiter_credential(self) -> RecruiterCredential | None:
        password_hash = self.kv.get(RECRUITER_PASS_HASH_KEY)
        if not password_hash:
            return None
        return RecruiterCredential(email=self.kv.get(RECRUITER_EMAIL_KEY) or "", password_hash=password_hash)

    async def create_recruiter_credential(self, credential: RecruiterCredential) -> bool:
        if self.kv.get(RECRUITER_PASS_HASH_KEY):
            return False
        self.kv.set(RECRUITER_EMAIL_KEY, credential.email)
        self.kv.set(RECRUITER_PASS_HASH_KEY, credential.password_hash)
        return True

    async def get_laborer(self, contact: str) -> Laborer | None:
        return self._laborer_from_record(self._laborers().get(contact), contact)

    async def insert_laborer(self, laborer: Laborer) -> Laborer:
        registry = self._laborers()
        existing = self._laborer_from_record(registry.get(laborer.contact), laborer.contact)
        if existing is not None:
            return existing
        registry[laborer.contact] = {
            "name": laborer.name,
            "contact": laborer.contact,
            "createdAt": laborer.created_at.isoformat(),
        }
        self.kv.write_json(LABORERS_KEY, registry)
        return laborer

    async def insert_job(self, job: Job) -> None:
        jobs = self._jobs()
        jobs.insert(0, self._job_to_record(job))
        self._write_jobs(jobs)

    async def get_job(self, job_id: str) -> dict[str, Any] | None:
        return next((job for job in self._jobs() if job.get("id") == job_id), None)

    async def delete_job(self, job_id: str, created_by: str) -> bool:
        jobs = self._jobs()
        remaining = [job for job in jobs if not (job.get("id") == job_id and job.get("createdBy") == created_by)]
        if len(remaining) == len(jobs):
            return False
        self._write_jobs(remaining)
        return True

    async def query_jobs(self, query: JobQuery) -> list[dict[str, Any]]:
        jobs = self._jobs()
        if query.created_by is not None:
            jobs = [job for job in jobs if job.get("createdBy") == query.created_by]
        return jobs

    async def add_applicant(self, job_id: str, applicant: Applicant) -> bool:
        jobs = self._jobs()
        job = next((item for item in jobs if item.get("id") == job_id), None)
        if job is None:
            return False
        applicants = job.get("applicants") if isinstance(job.get("applicants"), list) else []
        if len(applicants) >= _required_count(job):
            return False
        if any(_raw_contact(entry) == applicant.contact for entry in applicants):
            return False
        job["applicants"] = [
            *applicants,
            {
                "id": applicant.id,
                "name": applicant.name,
                "user": applicant.user,
                "contact": applicant.contact,
                "appliedAt": applicant.applied_at.isoformat(),
            },
        ]
        self._write_jobs(jobs)
        return True

    async def remove_applicants(self, job_id: str, contact: str) -> None:
        jobs = self._jobs()
        job = next((item for item in jobs if item.get("id") == job_id), None)
        if job is None or not isinstance(job.get("applicants"), list):
            return
        kept = [entry for entry in job["applicants"] if _raw_contact(entry) != contact]
        if len(kept) != len(job["applicants"]):
            job["applicants"] = kept
            self._write_jobs(jobs)

    def _jobs(self) -> list[dict[str, Any]]:
        jobs = self.kv.read_json(JOBS_KEY, [])
        if not isinstance(jobs, list):
            logger.warning("stored job list has unexpected type %s; treating as empty", type(jobs).__name__)
            return []
        return [job for job in jobs if isinstance(job, dict)]

    def _write_jobs(self, jobs: list[dict[str, Any]]) -> None:
        self.kv.write_json(JOBS_KEY, jobs)

    def _laborers(self) -> dict[str, Any]:
        registry = self.kv.read_json(LABORERS_KEY, {})
        return registry if isinstance(registry, dict) else {}

    @staticmethod
    def _laborer_from_record(record: Any, contact: str) -> Laborer | None:
        if not isinstance(record, dict):
            return None
        return Laborer(
            contact=contact,
            name=str(record.get("name") or "").strip(),
            created_at=coerce_datetime(record.get("createdAt")) or EPOCH,
        )

    @staticmethod
    def _job_to_record(job: Job) -> dict[str, Any]:
        return {
            "id": job.id,
            "title": job.title,
            "description": job.description,
            "pricePerHour": job.price_per_hour,
            "requiredCount": job.required_count,
            "createdBy": job.created_by,
            "applicants": [],
            "createdAt": job.created_at.isoformat(),
            "location": job.location,
            "startDateTime": job.start_datetime.isoformat() if job.start_datetime else "",
        }


def _raw_contact(entry: Any) -> str:
    if isinstance(entry, dict):
        return str(entry.get("contact") or "").strip()
    return ""


def _required_count(job: dict[str, Any]) -> int:
    try:
        return int(float(job.get("requiredCount") or 0))
    except (TypeError, ValueError, OverflowError):
        return 0
