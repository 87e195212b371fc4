from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from datetime import datetime, timezone
import os
from typing import Any, TypeVar

import asyncpg  # type: ignore[import-untyped]
import pytest

from laborportal.schemas.jobs import ApplicantDetails, JobCreate
from laborportal.schemas.sessions import RecruiterCredential
from laborportal.services.applicants import JOB_FILLED, ApplicantManager
from laborportal.services.jobs import JobStore
from laborportal.services.laborers import LaborerRegistry
from laborportal.services.repository import SCHEMA_SQL, PostgresStore
from laborportal.services.views import JobViews

T = TypeVar("T")


@pytest.fixture(scope="session")
def database_url() -> str:
    url = os.getenv("LP_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("integration tests require LP_DATABASE_URL or DATABASE_URL")
    return url


@pytest.fixture(autouse=True)
def reset_tables(database_url: str) -> None:
    _run(_truncate_tables(database_url))


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


async def _truncate_tables(database_url: str) -> None:
    conn = await asyncpg.connect(database_url)
    try:
        await conn.execute(SCHEMA_SQL)
        await conn.execute("truncate table applicants, jobs, laborers, recruiter_auth")
    finally:
        await conn.close()


def _with_store(database_url: str, scenario):
    async def run():
        store = PostgresStore(database_url=database_url, min_pool_size=1, max_pool_size=2)
        try:
            return await scenario(store)
        finally:
            await store.close()

    return _run(run())


def test_recruiter_credential_is_singleton(database_url: str) -> None:
    async def scenario(store: PostgresStore):
        first = await store.create_recruiter_credential(RecruiterCredential(email="a@x.com", password_hash="h1"))
        second = await store.create_recruiter_credential(RecruiterCredential(email="b@x.com", password_hash="h2"))
        return first, second, await store.get_recruiter_credential()

    first, second, stored = _with_store(database_url, scenario)

    assert (first, second) == (True, False)
    assert stored == RecruiterCredential(email="a@x.com", password_hash="h1")


def test_apply_capacity_and_cascade_delete(database_url: str) -> None:
    async def scenario(store: PostgresStore):
        job = await JobStore(store).add_job(
            JobCreate(title="Loader", price_per_hour=200, required_count=1),
            created_by="r@x.com",
        )
        manager = ApplicantManager(store)
        first = await manager.apply_to_job_with_details(
            job.id, ApplicantDetails(name="A", contact="1111111111", passkey="1234")
        )
        second = await manager.apply_to_job_with_details(
            job.id, ApplicantDetails(name="B", contact="2222222222", passkey="1234")
        )
        laborer_jobs = await JobViews(store).get_jobs_for_laborer("1111111111")
        deleted = await JobStore(store).delete_job(job.id, by_user="r@x.com")
        async with store._connection() as conn:
            orphans = await conn.fetchval("select count(*) from applicants")
        return first, second, laborer_jobs, deleted, orphans

    first, second, laborer_jobs, deleted, orphans = _with_store(database_url, scenario)

    assert first.ok is True
    assert second.error == JOB_FILLED
    assert len(laborer_jobs) == 1
    assert deleted is True
    assert orphans == 0


def test_concurrent_applies_respect_capacity(database_url: str) -> None:
    async def scenario(store: PostgresStore):
        job = await JobStore(store).add_job(
            JobCreate(title="Loader", price_per_hour=200, required_count=2),
            created_by="r@x.com",
        )
        manager = ApplicantManager(store)
        outcomes = await asyncio.gather(
            *(
                manager.apply_to_job_with_details(
                    job.id, ApplicantDetails(name=f"W{index}", contact=str(index) * 10, passkey="1234")
                )
                for index in range(1, 6)
            )
        )
        return outcomes, await JobStore(store).get_job(job.id)

    outcomes, job = _with_store(database_url, scenario)

    assert sum(outcome.ok for outcome in outcomes) == 2
    assert job is not None and len(job.applicants) == 2


def test_laborer_registry_roundtrip(database_url: str) -> None:
    async def scenario(store: PostgresStore):
        registry = LaborerRegistry(store)
        return (
            await registry.register_or_verify_laborer("Ana", "5550001234"),
            await registry.register_or_verify_laborer("Ana", "5550001234"),
            await registry.register_or_verify_laborer("Bea", "5550001234"),
        )

    first, second, mismatch = _with_store(database_url, scenario)

    assert first.ok and second.ok
    assert first.value is not None and second.value is not None
    assert first.value.created_at == second.value.created_at
    assert first.value.created_at <= datetime.now(timezone.utc)
    assert mismatch.code == "name_mismatch"
