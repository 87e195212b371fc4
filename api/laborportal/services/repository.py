from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from laborportal.schemas.jobs import Applicant, Job
from laborportal.schemas.sessions import Laborer, RecruiterCredential
from laborportal.services.store import (
    JobQuery,
    KeyValueStore,
    MemoryKeyValueStore,
    Store,
    StoreError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
create table if not exists jobs (
  id text primary key,
  title text not null,
  description text not null default '',
  price_per_hour double precision not null default 0 check (price_per_hour >= 0),
  required_count integer not null check (required_count >= 1),
  created_by text not null,
  location text not null default '',
  start_datetime timestamptz,
  created_at timestamptz not null default now()
);

create index if not exists jobs_created_by_idx on jobs (created_by);

create table if not exists applicants (
  id text primary key,
  job_id text not null references jobs (id) on delete cascade,
  name text not null,
  contact text not null,
  created_at timestamptz not null default now(),
  unique (job_id, contact)
);

create table if not exists laborers (
  contact text primary key,
  name text not null,
  created_at timestamptz not null default now()
);

create table if not exists recruiter_auth (
  singleton boolean primary key default true check (singleton),
  email text not null default '',
  password_hash text not null
);
"""

DROP_SQL = """
drop table if exists applicants;
drop table if exists jobs;
drop table if exists laborers;
drop table if exists recruiter_auth;
"""

_JOB_COLUMNS = """
  id,
  title,
  description,
  price_per_hour,
  required_count,
  created_by,
  location,
  start_datetime,
  created_at
"""


class PostgresStore(Store):
    def __init__(
        self,
        database_url: str | None,
        min_pool_size: int,
        max_pool_size: int,
        session_kv: KeyValueStore | None = None,
    ) -> None:
        super().__init__(session_kv=session_kv if session_kv is not None else MemoryKeyValueStore())
        self.database_url = database_url
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def ensure_schema(self) -> None:
        async with self._connection() as conn:
            await conn.execute(SCHEMA_SQL)

    async def get_recruiter_credential(self) -> RecruiterCredential | None:
        async with self._connection() as conn:
            row = await conn.fetchrow("select email, password_hash from recruiter_auth limit 1")
        if row is None:
            return None
        return RecruiterCredential(email=row["email"] or "", password_hash=row["password_hash"])

    async def create_recruiter_credential(self, credential: RecruiterCredential) -> bool:
        async with self._connection() as conn:
            inserted = await conn.fetchval(
                """
                insert into recruiter_auth (email, password_hash)
                values ($1, $2)
                on conflict (singleton) do nothing
                returning singleton
                """,
                credential.email,
                credential.password_hash,
            )
        return bool(inserted)

    async def get_laborer(self, contact: str) -> Laborer | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                "select contact, name, created_at from laborers where contact = $1",
                contact,
            )
        return self._laborer_row_to_model(row) if row else None

    async def insert_laborer(self, laborer: Laborer) -> Laborer:
        async with self._connection() as conn:
            async with conn.transaction():
                await conn.execute(
                    """
                    insert into laborers (contact, name, created_at)
                    values ($1, $2, $3)
                    on conflict (contact) do nothing
                    """,
                    laborer.contact,
                    laborer.name,
                    laborer.created_at,
                )
                row = await conn.fetchrow(
                    "select contact, name, created_at from laborers where contact = $1",
                    laborer.contact,
                )
        return self._laborer_row_to_model(row)

    async def insert_job(self, job: Job) -> None:
        async with self._connection() as conn:
            await conn.execute(
                """
                insert into jobs (
                  id, title, description, price_per_hour, required_count,
                  created_by, location, start_datetime, created_at
                )
                values ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                """,
                job.id,
                job.title,
                job.description,
                job.price_per_hour,
                job.required_count,
                job.created_by,
                job.location,
                job.start_datetime,
                job.created_at,
            )

    async def get_job(self, job_id: str) -> dict[str, Any] | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(f"select {_JOB_COLUMNS} from jobs where id = $1", job_id)
            if row is None:
                return None
            jobs = await self._attach_applicants(conn, [row])
        return jobs[0]

    async def delete_job(self, job_id: str, created_by: str) -> bool:
        async with self._connection() as conn:
            deleted = await conn.fetchval(
                "delete from jobs where id = $1 and created_by = $2 returning id",
                job_id,
                created_by,
            )
        return deleted is not None

    async def query_jobs(self, query: JobQuery) -> list[dict[str, Any]]:
        async with self._connection() as conn:
            if query.created_by is not None:
                rows = await conn.fetch(
                    f"select {_JOB_COLUMNS} from jobs where created_by = $1 order by created_at desc",
                    query.created_by,
                )
            else:
                rows = await conn.fetch(f"select {_JOB_COLUMNS} from jobs order by created_at desc")
            return await self._attach_applicants(conn, rows)

    async def add_applicant(self, job_id: str, applicant: Applicant) -> bool:
        async with self._connection() as conn:
            async with conn.transaction():
                # Row lock serializes concurrent applies to the same job.
                required_count = await conn.fetchval(
                    "select required_count from jobs where id = $1 for update",
                    job_id,
                )
                if required_count is None:
                    return False
                inserted = await conn.fetchval(
                    """
                    insert into applicants (id, job_id, name, contact, created_at)
                    select $1::text, $2::text, $3::text, $4::text, $5::timestamptz
                    where (select count(*) from applicants where job_id = $2::text) < $6::integer
                    on conflict (job_id, contact) do nothing
                    returning id
                    """,
                    applicant.id,
                    job_id,
                    applicant.name,
                    applicant.contact,
                    applicant.applied_at,
                    required_count,
                )
        return inserted is not None

    async def remove_applicants(self, job_id: str, contact: str) -> None:
        async with self._connection() as conn:
            await conn.execute(
                "delete from applicants where job_id = $1 and contact = $2",
                job_id,
                contact,
            )

    async def _attach_applicants(
        self,
        conn: asyncpg.Connection,
        rows: list[asyncpg.Record],
    ) -> list[dict[str, Any]]:
        jobs = [dict(row) for row in rows]
        if not jobs:
            return jobs
        applicant_rows = await conn.fetch(
            """
            select id, job_id, name, contact, created_at
            from applicants
            where job_id = any($1::text[])
            order by created_at, id
            """,
            [job["id"] for job in jobs],
        )
        by_job: dict[str, list[dict[str, Any]]] = {job["id"]: [] for job in jobs}
        for row in applicant_rows:
            by_job[row["job_id"]].append(
                {
                    "id": row["id"],
                    "name": row["name"],
                    "contact": row["contact"],
                    "created_at": row["created_at"],
                }
            )
        for job in jobs:
            job["applicants"] = by_job[job["id"]]
        return jobs

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            logger.warning("postgres operation failed: %s", exc)
            raise StoreError(f"database error: {exc}") from exc
        except OSError as exc:
            raise StoreUnavailableError("database unavailable") from exc

    async def _get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise StoreUnavailableError("LP_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=15,
            )
            return self._pool
        except Exception as exc:  # pragma: no cover - depends on environment
            raise StoreUnavailableError("database unavailable") from exc

    @staticmethod
    def _laborer_row_to_model(row: asyncpg.Record) -> Laborer:
        return Laborer(contact=row["contact"], name=row["name"], created_at=row["created_at"])
