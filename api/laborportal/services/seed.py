from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

from laborportal.schemas.jobs import Job
from laborportal.services.jobs import generate_id
from laborportal.services.store import JobQuery, Store

logger = logging.getLogger(__name__)

DEMO_RECRUITER = "recruiter@demo.com"


def demo_jobs(now: datetime | None = None) -> list[Job]:
    now = now or datetime.now(timezone.utc)
    return [
        Job(
            id=generate_id("job"),
            title="Warehouse Loader",
            description="Assist with loading/unloading inventory. Lift up to 50 lbs.",
            price_per_hour=220,
            required_count=5,
            created_by=DEMO_RECRUITER,
            location="Mumbai",
            start_datetime=now + timedelta(days=1),
            created_at=now,
        ),
        Job(
            id=generate_id("job"),
            title="General Construction",
            description="Site cleanup and material handling. Safety gear provided.",
            price_per_hour=250,
            required_count=10,
            created_by=DEMO_RECRUITER,
            location="Pune",
            start_datetime=now + timedelta(days=2),
            created_at=now,
        ),
    ]


async def seed_demo_data(store: Store) -> int:
    """Insert the demo jobs into an empty store. Returns how many were inserted."""
    if await store.query_jobs(JobQuery()):
        return 0
    jobs = demo_jobs()
    for job in jobs:
        await store.insert_job(job)
    logger.info("seeded %s demo jobs", len(jobs))
    return len(jobs)
