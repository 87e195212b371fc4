from __future__ import annotations

from datetime import datetime, timezone
import logging
from uuid import uuid4

from opentelemetry import trace

from laborportal.schemas.jobs import Job, JobCreate
from laborportal.services.normalize import normalize_job
from laborportal.services.store import Store

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


class JobStore:
    """Create and delete jobs. Jobs are immutable apart from their applicants."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def add_job(self, fields: JobCreate, created_by: str) -> Job:
        job = Job(
            id=generate_id("job"),
            title=fields.title.strip(),
            description=fields.description.strip(),
            price_per_hour=float(fields.price_per_hour),
            required_count=int(fields.required_count),
            created_by=created_by,
            location=fields.location.strip(),
            start_datetime=fields.start_datetime,
            created_at=datetime.now(timezone.utc),
        )
        with tracer.start_as_current_span("jobs.add") as span:
            span.set_attribute("job.id", job.id)
            await self.store.insert_job(job)
        logger.info("job created id=%s created_by=%s", job.id, created_by)
        return job

    async def get_job(self, job_id: str) -> Job | None:
        raw = await self.store.get_job(job_id)
        return normalize_job(raw) if raw is not None else None

    async def delete_job(self, job_id: str, by_user: str) -> bool:
        """Delete the job with its applicants. Missing or foreign jobs return False."""
        with tracer.start_as_current_span("jobs.delete") as span:
            span.set_attribute("job.id", job_id)
            job = await self.get_job(job_id)
            if job is None or job.created_by != by_user:
                return False
            deleted = await self.store.delete_job(job_id, by_user)
        if deleted:
            logger.info("job deleted id=%s by=%s", job_id, by_user)
        return deleted
