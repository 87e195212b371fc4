from __future__ import annotations

import logging

from laborportal.schemas.jobs import Job
from laborportal.services.normalize import normalize_job
from laborportal.services.store import JobQuery, Store

logger = logging.getLogger(__name__)


class JobViews:
    """Read-only projections over the job collection, newest first."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def get_open_jobs(self) -> list[Job]:
        return await self.query(JobQuery(open_only=True))

    async def get_jobs_for_recruiter(self, username: str) -> list[Job]:
        return await self.query(JobQuery(created_by=username))

    async def get_jobs_for_laborer(self, username: str) -> list[Job]:
        return await self.query(JobQuery(applicant=username))

    async def query(self, query: JobQuery) -> list[Job]:
        jobs: list[Job] = []
        for raw in await self.store.query_jobs(query):
            job = normalize_job(raw)
            if job is None:
                logger.warning("skipping stored job without id")
                continue
            if _matches(job, query):
                jobs.append(job)
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return jobs


def _matches(job: Job, query: JobQuery) -> bool:
    if query.open_only and job.is_full:
        return False
    if query.created_by is not None and job.created_by != query.created_by:
        return False
    if query.applicant is not None:
        if not query.applicant:
            return False
        return any(query.applicant in (applicant.user, applicant.contact) for applicant in job.applicants)
    return True
